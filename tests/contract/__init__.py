"""Contract tests.

Each suite is parametrised over every adapter of one port and asserts only
what the port promises.
"""
