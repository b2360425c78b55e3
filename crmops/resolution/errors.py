"""
Error taxonomy for name-keyed resolution.

All three errors are precondition or logic failures. None are retried or
recovered internally; callers (the orchestrator, the CLI) let them
propagate and abort the whole operation.
"""


class ResolutionError(RuntimeError):
    """Base class for every failure raised by the resolver."""


class InvalidKey(ResolutionError, ValueError):
    """A child record carries an empty, null, or non-string natural key."""

    def __init__(self, index: int, field: str, value: object) -> None:
        self.index = index
        self.field = field
        self.value = value
        super().__init__(f"child at index {index} has invalid {field!r}: {value!r}")


class PersistenceMismatch(ResolutionError):
    """The create capability did not return one identifier per created parent."""

    def __init__(self, expected: int, received: int, detail: str = "") -> None:
        self.expected = expected
        self.received = received
        message = f"expected {expected} identifiers, received {received}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class UnresolvedKey(ResolutionError, LookupError):
    """finalize() met a child key that the binding does not cover."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"no parent identifier bound for key {key!r}")
