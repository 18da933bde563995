"""Static in-memory data context.

Serves canned documents keyed by `_id`. Used as a deterministic test double
and as the backing store for the bundled HTTP app.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..documents import doc_id, is_contact, parent_id
from .types import BoundRead, ContactApi, Qualifier, UnsupportedOperationError


logger = logging.getLogger(__name__)


@dataclass
class StaticDataContext:
    """
    Read-only context over a dict of documents.

    `get` returns a copy of a stored contact. `get_with_lineage` also
    attaches `lineage`, built by following the `parent` chain nearest first.
    Ancestors missing from the store appear as None; the walk continues
    through the nested parent stub when one is present.
    """
    documents: dict[str, dict[str, Any]] = field(default_factory=dict)
    contact_types: Iterable[str] = ()
    max_lineage_depth: int = 32

    # Count of reads served, per operation
    _stats: dict[str, int] = field(default_factory=dict, init=False)

    def __post_init__(self):
        self.contact_types = tuple(self.contact_types)
        self._stats = {op.value: 0 for op in ContactApi}

    @classmethod
    def from_documents(cls, docs: Iterable[dict[str, Any]], **kwargs) -> StaticDataContext:
        """Build a context from a sequence of documents."""
        documents = {}
        for doc in docs:
            key = doc_id(doc)
            if key is None:
                logger.warning(f"Skipping document without _id: {doc!r}")
                continue
            documents[key] = doc
        return cls(documents=documents, **kwargs)

    @classmethod
    def from_file(cls, path: str | Path, **kwargs) -> StaticDataContext:
        """Build a context from a YAML or JSON documents file."""
        from .loader import load_documents
        return cls(documents=load_documents(path), **kwargs)

    def bind(self, operation: ContactApi) -> BoundRead:
        if operation == ContactApi.GET:
            return self._get
        if operation == ContactApi.GET_WITH_LINEAGE:
            return self._get_with_lineage
        raise UnsupportedOperationError(f"Unsupported operation: {operation!r}")

    async def _get(self, qualifier: Qualifier) -> dict[str, Any] | None:
        self._stats[ContactApi.GET.value] += 1
        return self._lookup_contact(qualifier.uuid)

    async def _get_with_lineage(self, qualifier: Qualifier) -> dict[str, Any] | None:
        self._stats[ContactApi.GET_WITH_LINEAGE.value] += 1
        contact = self._lookup_contact(qualifier.uuid)
        if contact is None:
            return None
        contact["lineage"] = self._build_lineage(contact)
        return contact

    def _lookup_contact(self, uuid: str) -> dict[str, Any] | None:
        doc = self.documents.get(uuid)
        if doc is None or not is_contact(doc, self.contact_types):
            logger.debug(f"Contact not found: {uuid}")
            return None
        return copy.deepcopy(doc)

    def _build_lineage(self, contact: dict[str, Any]) -> list[dict[str, Any] | None]:
        lineage: list[dict[str, Any] | None] = []
        seen = {contact["_id"]}
        stub = contact.get("parent")

        while True:
            ancestor_id = doc_id(stub)
            if ancestor_id is None:
                break
            if len(lineage) >= self.max_lineage_depth:
                logger.warning(
                    f"Lineage of '{contact['_id']}' exceeded max depth {self.max_lineage_depth}"
                )
                break
            if ancestor_id in seen:
                logger.warning(f"Parent cycle at '{ancestor_id}' in lineage of '{contact['_id']}'")
                break
            seen.add(ancestor_id)

            ancestor = self.documents.get(ancestor_id)
            if ancestor is None:
                lineage.append(None)
                stub = stub.get("parent")
            else:
                lineage.append(copy.deepcopy(ancestor))
                stub = ancestor.get("parent") if parent_id(ancestor) else stub.get("parent")

        return lineage

    @property
    def stats(self) -> dict[str, int]:
        """Reads served, per operation."""
        return dict(self._stats)
