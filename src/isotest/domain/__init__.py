"""Domain layer for isotest.

Contains the harness vocabulary: module identifiers, module nodes, test
outcomes and the error taxonomy. This package is deliberately free of I/O.

Dependency rule: do not import from `isotest.adapters` or `isotest.entrypoints`.
"""
