"""Integration tests.

Test projects are written to ``tmp_path`` and run through `LocalSourceReader`,
the host resolver and the real session runner.
"""
