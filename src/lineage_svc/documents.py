"""Document shape helpers shared by the data source and the hydration engine."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .config import DEFAULT_CONTACT_TYPES

# Reference fields recognised on records
PATIENT_ID_FIELD = "patient_id"
PLACE_ID_FIELD = "place_id"
LINKED_DOCS_FIELD = "linked_docs"


def doc_id(doc: Mapping[str, Any] | None) -> str | None:
    """Return the document's `_id` when it is a non-empty string."""
    if not isinstance(doc, Mapping):
        return None
    value = doc.get("_id")
    if isinstance(value, str) and value:
        return value
    return None


def parent_id(doc: Mapping[str, Any] | None) -> str | None:
    """Return the `_id` of the document's `parent` stub, if any."""
    if not isinstance(doc, Mapping):
        return None
    return doc_id(doc.get("parent"))


def is_contact(
    doc: Any,
    contact_types: Iterable[str] = (),
) -> bool:
    """
    Tag check for person/place documents.

    Matches the declared `type` against the built-in hierarchy types plus
    any extra `contact_types`. Configurable hierarchies use `type: contact`
    together with a `contact_type`, which the built-in `contact` covers.
    """
    if not isinstance(doc, Mapping):
        return False
    doc_type = doc.get("type")
    if not isinstance(doc_type, str):
        return False
    return doc_type in DEFAULT_CONTACT_TYPES or doc_type in set(contact_types)


def is_reference(value: Any) -> bool:
    """A reference is a non-empty identifier string."""
    return isinstance(value, str) and bool(value)


def has_references(doc: Mapping[str, Any]) -> bool:
    """True when the record carries any reference field worth resolving."""
    return (
        is_reference(doc.get(PATIENT_ID_FIELD))
        or is_reference(doc.get(PLACE_ID_FIELD))
        or isinstance(doc.get(LINKED_DOCS_FIELD), Mapping)
    )
