"""isotest

A test harness that runs a source file's declared tests inside an isolated
sandbox. Each file gets its own module graph, resolved on demand, in which
selected dependencies are transparently replaced by mocks: sibling
``__mocks__`` overrides or auto-generated stub modules.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
