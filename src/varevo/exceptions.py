"""
Exception hierarchy for varevo.

Every error raised on purpose by the package derives from :class:`VarevoError`.
The concrete classes also derive from the matching builtin so callers that
only know about ``ValueError`` / ``IndexError`` keep working.
"""


class VarevoError(Exception):
    """Base class for all varevo errors."""


class InvalidInputError(VarevoError, ValueError):
    """Malformed configuration or arguments (raised before any sampling)."""


class InvalidDistributionError(InvalidInputError):
    """Weights that do not describe a usable discrete distribution."""


class OutOfRangeError(VarevoError, IndexError):
    """Position or length outside the current sequence bounds."""


class DegenerateDistributionError(VarevoError, ValueError):
    """Sampling requested over a region whose total weight is zero."""


class InvariantViolationError(VarevoError, AssertionError):
    """The mutation list no longer satisfies its ordering/position invariants."""


__all__ = [
    "VarevoError",
    "InvalidInputError",
    "InvalidDistributionError",
    "OutOfRangeError",
    "DegenerateDistributionError",
    "InvariantViolationError",
]
