"""Harness error definitions."""

# ============================================================================
#                           General harness errors
# ============================================================================


class HarnessError(Exception):
    """Base class for all isotest harness errors."""


# ============================================================================
#                   Resolution and linking errors
# ============================================================================


class ResolutionError(HarnessError):
    """Raised when an import specifier cannot be mapped to an identifier."""

    def __init__(self, specifier: str, referrer: str, reason: str) -> None:
        super().__init__(
            f"Cannot resolve '{specifier}' from '{referrer}': {reason}"
        )
        self.specifier = specifier
        self.referrer = referrer
        self.reason = reason


class DirectiveParseError(HarnessError):
    """Raised when a `@mock` directive is missing or has a malformed specifier."""

    def __init__(self, identifier: str, line_number: int, directive: str) -> None:
        super().__init__(
            f"Malformed mock directive at {identifier}:{line_number}: {directive!r}"
        )
        self.identifier = identifier
        self.line_number = line_number
        self.directive = directive


class UnsupportedModuleProtocolError(HarnessError):
    """Raised when an identifier uses a scheme the loader does not recognize."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Unsupported module protocol for '{identifier}'")
        self.identifier = identifier


class LinkError(HarnessError):
    """Raised when a node reachable from the entry module fails to instantiate.

    The original failure is chained as ``__cause__``.
    """

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"Failed to link '{identifier}': {reason}")
        self.identifier = identifier
        self.reason = reason


# ============================================================================
#                   Evaluation errors
# ============================================================================


class ModuleEvaluationError(HarnessError):
    """Raised when a module body raises while being evaluated in the sandbox."""

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"Error evaluating '{identifier}': {reason}")
        self.identifier = identifier
        self.reason = reason


class TestTimeoutError(HarnessError):
    """Raised when a declared test body exceeds the per-test timeout."""

    __test__ = False  # not a pytest test class

    def __init__(self, name: str, timeout: float) -> None:
        super().__init__(f"Test '{name}' timed out after {timeout:g}s")
        self.name = name
        self.timeout = timeout


# ============================================================================
#                   Mock runtime errors
# ============================================================================


class UnsupportedMockTargetError(HarnessError):
    """Raised when `mock()` is given a value that is neither callable nor a mock."""

    def __init__(self, target: object) -> None:
        super().__init__(f"Unsupported mock target {type(target).__name__}")
        self.target = target


class UnconfiguredMockError(HarnessError):
    """Raised when a mock is invoked before any implementation was bound."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Mock '{name}' is not configured")
        self.name = name
