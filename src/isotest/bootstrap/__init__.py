"""Bootstrap (composition root) for isotest.

Assembles the harness at runtime: wires concrete adapters (source reader,
reporter, test-file finder, ID generator) to the service layer, reads
configuration and exposes the result to the entrypoints as an `AppContainer`.

Import rules:
- Entry points import *this* package (not adapters/service_layer/interfaces/domain).
- This package may import: `isotest.adapters`, `isotest.service_layer`,
  `isotest.interfaces`, `isotest.domain`, and `isotest.config`.
- Inner layers must not import `isotest.bootstrap`.
"""

from .bootstrap import AppContainer, bootstrap

__all__ = ["AppContainer", "bootstrap"]
