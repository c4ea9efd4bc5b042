"""Consistency level resolution."""

from enum import Enum
from typing import Any


class ConsistencyLevel(str, Enum):
    """Read consistency modes accepted in configuration.

    The values are the exact (case-sensitive) configuration tokens.
    """

    STRONG = "Strong"
    BOUNDED_STALENESS = "Bounded_Staleness"
    SESSION = "Session"
    CONSISTENT_PREFIX = "Consistent_Prefix"
    EVENTUAL = "Eventual"

    @property
    def consistent_read(self) -> bool:
        """Whether reads at this level must be strongly consistent."""
        return self is ConsistencyLevel.STRONG


_TOKENS = {level.value: level for level in ConsistencyLevel}


def resolve_consistency_level(token: str | None) -> ConsistencyLevel | None:
    """
    Map a configuration token to a consistency level.

    Args:
        token: One of "Strong", "Bounded_Staleness", "Session",
            "Consistent_Prefix", "Eventual"

    Returns:
        The matching level, or None (use the store default) for an empty,
        missing or unrecognized token
    """
    if not token:
        return None
    return _TOKENS.get(token)


def read_options(level: ConsistencyLevel | None) -> dict[str, Any]:
    """Build the read request arguments for a consistency level."""
    if level is None:
        return {}
    return {"ConsistentRead": level.consistent_read}
