"""Contact loader - point and batch contact lookups against a data context."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from .datasource.types import ContactApi, DataContext, by_uuid
from .documents import LINKED_DOCS_FIELD, is_reference


logger = logging.getLogger(__name__)

Contact = dict[str, Any]


class ContactLoader:
    """
    Resolves contact identifiers through an injected data context.

    Unknown or malformed identifiers resolve to None. Errors raised by the
    context propagate unchanged.
    """

    def __init__(self, context: DataContext):
        self.context = context

    async def fetch_contact_by_id(self, id: str) -> Contact | None:
        """Point lookup, no lineage."""
        if not is_reference(id):
            return None
        return await self.context.bind(ContactApi.GET)(by_uuid(id))

    async def fetch_contact_with_lineage(self, id: str) -> Contact | None:
        """Point lookup including the ancestor chain."""
        if not is_reference(id):
            return None
        return await self.context.bind(ContactApi.GET_WITH_LINEAGE)(by_uuid(id))

    async def fetch_contacts_with_lineage(self, ids: Sequence[str]) -> list[Contact | None]:
        """Resolve all ids concurrently; one result per id, in input order."""
        return list(await asyncio.gather(
            *(self.fetch_contact_with_lineage(id) for id in ids)
        ))

    async def fetch_linked_contacts(self, doc: Mapping[str, Any]) -> dict[str, Contact | None]:
        """
        Resolve the `linked_docs` map of a document.

        Entries whose value is not an identifier string are skipped.
        """
        linked_docs = doc.get(LINKED_DOCS_FIELD)
        if not isinstance(linked_docs, Mapping):
            return {}

        keys = [key for key, value in linked_docs.items() if isinstance(value, str)]
        skipped = len(linked_docs) - len(keys)
        if skipped:
            logger.debug(f"Skipped {skipped} non-string linked_docs entries on {doc.get('_id')}")

        contacts = await asyncio.gather(
            *(self.fetch_contact_by_id(linked_docs[key]) for key in keys)
        )
        return dict(zip(keys, contacts))
