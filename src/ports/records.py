"""Record, offset store and sink port definitions."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

__all__ = [
    "LAST_POLLED_TIMESTAMP",
    "STRING_SCHEMA",
    "OffsetStorePort",
    "OutputRecord",
    "RecordSinkPort",
]

LAST_POLLED_TIMESTAMP = "last_polled_timestamp"
STRING_SCHEMA = "string"


@dataclass(slots=True, frozen=True)
class OutputRecord:
    """Immutable record produced by one successful poll.

    Attributes:
        source_partition: Stable key of the polled endpoint ({"url": ...}).
        source_offset: Checkpoint to persist ({"last_polled_timestamp": ms}).
        topic: Destination name.
        key: Fetch instant as an ISO-8601 UTC string.
        value: Raw response body.
        key_schema: Type marker of the key.
        value_schema: Type marker of the value.
    """

    source_partition: Mapping[str, str]
    source_offset: Mapping[str, int]
    topic: str
    key: str
    value: str
    key_schema: str = field(default=STRING_SCHEMA)
    value_schema: str = field(default=STRING_SCHEMA)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable view of the record."""
        return {
            "source_partition": dict(self.source_partition),
            "source_offset": dict(self.source_offset),
            "topic": self.topic,
            "key_schema": self.key_schema,
            "key": self.key,
            "value_schema": self.value_schema,
            "value": self.value,
        }


class OffsetStorePort(Protocol):
    """Key-value store of source offsets, keyed by partition."""

    def offset(self, partition: Mapping[str, str], /) -> Mapping[str, Any] | None:
        """Return the last committed offset for a partition, or None."""
        ...

    def commit(self, partition: Mapping[str, str], offset: Mapping[str, Any], /) -> None:
        """Persist the offset for a partition."""
        ...


class RecordSinkPort(Protocol):
    """Downstream consumer of produced records."""

    def send(self, record: OutputRecord, /) -> None:
        """Deliver one record."""
        ...
