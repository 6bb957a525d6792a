"""Interfaces (application boundary) for isotest.

Defines framework-free application contracts: ABCs for the collaborators the
harness core consumes (source reader, reporter, test-file finder, ID
generator). Behaviour stays out of this package.

Dependency rule: may import `isotest.domain` only. It may be imported by
`isotest.service_layer`, `isotest.adapters`, and `isotest.bootstrap`.
"""
