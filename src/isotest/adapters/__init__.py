"""Adapters (infrastructure) for isotest.

Provide concrete implementations of the interfaces: filesystem and in-memory
source readers, console and recording reporters, the glob-based test-file
finder and ID generators.

Dependency rule: may import `isotest.domain` and `isotest.interfaces`; the
domain must not import this package.
"""
