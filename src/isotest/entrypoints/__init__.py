"""Entrypoints (inbound adapters) for isotest.

Expose the harness to the outside world through the command line. Parse and
validate inputs, call the composition root, and present results.

Dependency rule: may import `isotest.bootstrap` and `isotest.service_layer`;
avoid importing `isotest.adapters` directly.
"""
