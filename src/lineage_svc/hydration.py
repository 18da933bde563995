"""Hydration service - replaces reference fields with resolved contacts.

Contacts are hydrated by substitution: the document is re-fetched by `_id`
with its lineage, so the stored version wins over whatever the caller holds.
Records keep their fields and gain resolved ones:

    patient_id  -> patient      contact with lineage
    place_id    -> place        [place, *place.lineage]
    linked_docs -> <key>        contact (no lineage) per linked key
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .contact_loader import Contact, ContactLoader
from .datasource.types import DataContext
from .documents import (
    PATIENT_ID_FIELD,
    PLACE_ID_FIELD,
    doc_id,
    has_references,
    is_contact,
    is_reference,
)


logger = logging.getLogger(__name__)

Document = dict[str, Any]


class HydrationService:
    """Classifies documents and assembles their hydrated form."""

    def __init__(
        self,
        context: DataContext,
        contact_types: Iterable[str] = (),
        contact_loader: ContactLoader | None = None,
    ):
        self.context = context
        self.contact_types = tuple(contact_types)
        self.contact_loader = contact_loader or ContactLoader(context)

    async def get_doc(self, id: str) -> Document | None:
        """Fetch a contact by id, hydrated with its lineage."""
        return await self.contact_loader.fetch_contact_with_lineage(id)

    async def get_docs(self, ids: Sequence[str]) -> list[Document | None]:
        """Fetch contacts by id concurrently, preserving input order."""
        return await self.contact_loader.fetch_contacts_with_lineage(ids)

    async def hydrate_doc(self, doc: Mapping[str, Any] | None) -> Document | None:
        if doc is None:
            return None

        if not isinstance(doc, Mapping):
            logger.debug(f"Not a document, returning as-is: {type(doc).__name__}")
            return doc

        if is_contact(doc, self.contact_types):
            return await self.contact_loader.fetch_contact_with_lineage(doc_id(doc))

        if not has_references(doc):
            return dict(doc)

        return await self._hydrate_record(doc)

    async def hydrate_docs(
        self,
        docs: Sequence[Mapping[str, Any] | None],
    ) -> list[Document | None]:
        """Hydrate documents concurrently, preserving order and length."""
        return list(await asyncio.gather(*(self.hydrate_doc(doc) for doc in docs)))

    async def _hydrate_record(self, doc: Mapping[str, Any]) -> Document:
        patient_id = doc.get(PATIENT_ID_FIELD)
        place_id = doc.get(PLACE_ID_FIELD)

        patient, place, linked = await asyncio.gather(
            self._resolve_patient(patient_id),
            self._resolve_place(place_id),
            self.contact_loader.fetch_linked_contacts(doc),
        )

        hydrated = dict(doc)
        if is_reference(patient_id):
            hydrated["patient"] = patient
        if is_reference(place_id):
            hydrated["place"] = place

        for key, contact in linked.items():
            if key in hydrated:
                logger.warning(
                    f"linked_docs key '{key}' collides with a field on {doc.get('_id')}, skipping"
                )
                continue
            hydrated[key] = contact

        return hydrated

    async def _resolve_patient(self, patient_id: Any) -> Contact | None:
        if not is_reference(patient_id):
            return None
        return await self.contact_loader.fetch_contact_with_lineage(patient_id)

    async def _resolve_place(self, place_id: Any) -> list[Contact | None]:
        if not is_reference(place_id):
            return []
        place = await self.contact_loader.fetch_contact_with_lineage(place_id)
        if place is None:
            return []
        return [place, *(place.get("lineage") or [])]
