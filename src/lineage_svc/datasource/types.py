"""Data-access context types - the read-only boundary to the record store."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class DataSourceError(Exception):
    """Base exception for data source errors."""
    pass


class UnsupportedOperationError(DataSourceError):
    """Raised when a context is asked to bind an operation it does not serve."""
    pass


class InvalidQualifierError(DataSourceError, ValueError):
    """Raised when a qualifier cannot identify a document."""
    pass


class ContactApi(str, Enum):
    """Read operations on contacts that a context can bind."""
    GET = "contact.v1.get"
    GET_WITH_LINEAGE = "contact.v1.get_with_lineage"


@dataclass(frozen=True, slots=True)
class Qualifier:
    """Identifies a single document by its unique identifier."""
    uuid: str

    def __str__(self) -> str:
        return self.uuid


def by_uuid(uuid: str) -> Qualifier:
    """Build a qualifier for a document identifier."""
    if not isinstance(uuid, str) or not uuid:
        raise InvalidQualifierError(f"Invalid UUID [{uuid!r}].")
    return Qualifier(uuid=uuid)


# A bound read operation: qualifier in, document (or None) out
BoundRead = Callable[[Qualifier], Awaitable["dict[str, Any] | None"]]


class DataContext(Protocol):
    """
    Injected read capability.

    Implementations resolve a read operation into a coroutine function that
    takes a qualifier and returns the document or None when not found.
    """

    def bind(self, operation: ContactApi) -> BoundRead:
        ...
