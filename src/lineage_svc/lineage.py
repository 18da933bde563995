"""Lineage facade - the stable public entry point."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .contact_loader import ContactLoader
from .datasource.types import DataContext
from .hydration import Document, HydrationService


class Lineage:
    """Delegates to the hydration service; wiring stays internal."""

    def __init__(
        self,
        context: DataContext,
        contact_types: Iterable[str] = (),
    ):
        self.contact_loader = ContactLoader(context)
        self.hydration_service = HydrationService(
            context,
            contact_types=contact_types,
            contact_loader=self.contact_loader,
        )

    async def get_doc(self, id: str) -> Document | None:
        return await self.hydration_service.get_doc(id)

    async def get_docs(self, ids: Sequence[str]) -> list[Document | None]:
        return await self.hydration_service.get_docs(ids)

    async def hydrate_doc(self, doc: Mapping[str, Any] | None) -> Document | None:
        return await self.hydration_service.hydrate_doc(doc)

    async def hydrate_docs(
        self,
        docs: Sequence[Mapping[str, Any] | None],
    ) -> list[Document | None]:
        return await self.hydration_service.hydrate_docs(docs)


def create_lineage(context: DataContext) -> Lineage:
    """Legacy construction helper: the whole assembly from one context."""
    return Lineage(context)
