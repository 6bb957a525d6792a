"""Service layer for isotest.

Implements the harness use-cases: identifier resolution, mock directive
scanning, module graph loading, test sessions and the session runner.

Dependency rule: may import `isotest.domain`, `isotest.interfaces` and
`isotest.runtime`, but not `isotest.adapters` or `isotest.entrypoints`.
"""
