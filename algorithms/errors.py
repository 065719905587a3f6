"""
Error taxonomy for the simulation engines.

Every error is recoverable: engines validate before doing any work, so a
raised error never leaves a collection partially updated.
"""


class SimulationError(Exception):
    """Base class for all engine errors."""
    pass


class InvalidInput(SimulationError, ValueError):
    """Raised for empty process lists, non-positive sizes or out-of-range cylinders."""
    pass


class InsufficientSpace(SimulationError):
    """Raised when no free memory block can hold a request."""
    pass


class EmptyQueue(SimulationError):
    """Raised when a disk run is requested with no pending requests."""
    pass


class AlgorithmUnsupported(SimulationError):
    """Raised for unrecognised or unimplemented algorithm tags."""
    pass


def coerce_algorithm(enum_cls, value):
    """
    Convert a string tag (or enum member) to a member of enum_cls.

    Args:
        enum_cls: Algorithm enum class
        value: Enum member or its string value (case-insensitive)

    Returns:
        Matching enum member

    Raises:
        AlgorithmUnsupported: If value names no member of enum_cls
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise AlgorithmUnsupported(
            f"Unknown {enum_cls.__name__} '{value}' (expected one of: {choices})"
        ) from None
