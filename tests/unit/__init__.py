"""Unit tests.

Source trees are held in `MemorySourceReader` under the fake root ``/proj``;
only the finder and identifier tests use ``tmp_path``.
"""
