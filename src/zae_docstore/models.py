"""Core models for zae-docstore."""

from dataclasses import dataclass, field
from enum import Enum


@dataclass
class Document:
    """
    Base class for every stored record schema.

    Concrete schemas subclass this dataclass and declare their partition key
    field (any name, e.g. ``group``) and payload fields. ``id`` is unique
    within a partition.

    Example:
        @dataclass
        class Note(Document):
            group: str = ""
            value: str | None = None
    """

    id: str


@dataclass
class ExpiringDocument(Document):
    """
    A document schema that opts in to soft delete.

    Repositories check for this capability once, when they are built. When
    soft delete is enabled, deleting such a document sets ``deleted`` and a
    ``ttl`` (seconds) instead of removing it; the store purges it once the
    ttl runs out.

    Attributes:
        ttl: Seconds until the store expires the record (-1 never expires)
        deleted: Tombstone flag
    """

    ttl: int | None = field(default=None, kw_only=True)
    deleted: bool | None = field(default=None, kw_only=True)

    @property
    def is_deleted(self) -> bool:
        """True if this record carries a tombstone."""
        return self.deleted is True


def supports_expiry(schema: type[Document]) -> bool:
    """Whether a schema carries the soft-delete capability."""
    return issubclass(schema, ExpiringDocument)


class ThroughputMode(str, Enum):
    """Collection throughput modes (mutually exclusive)."""

    MANUAL = "manual"
    AUTOSCALE = "autoscale"


@dataclass(frozen=True)
class ThroughputSettings:
    """
    Throughput attached to a collection.

    Attributes:
        mode: Manual capacity or autoscale maximum
        value: Capacity units (manual) or maximum units (autoscale);
            None when the store reports no single value
        replace_pending: True while a previous rescale is still in progress
    """

    mode: ThroughputMode
    value: int | None = None
    replace_pending: bool = False

    def matches(self, other: "ThroughputSettings") -> bool:
        """True if mode and value both equal ``other``'s."""
        return self.mode == other.mode and self.value is not None and self.value == other.value

    @classmethod
    def manual(cls, value: int) -> "ThroughputSettings":
        return cls(mode=ThroughputMode.MANUAL, value=value)

    @classmethod
    def autoscale(cls, max_value: int) -> "ThroughputSettings":
        return cls(mode=ThroughputMode.AUTOSCALE, value=max_value)
