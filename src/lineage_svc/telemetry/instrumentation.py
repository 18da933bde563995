"""Transparent timing wrappers for the public lineage operations."""

from __future__ import annotations

import asyncio
import functools
import time
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from ..contact_loader import ContactLoader
from ..datasource.types import DataContext
from ..hydration import HydrationService
from ..lineage import Lineage
from .monitor import PerformanceMonitor, performance_monitor

T = TypeVar("T")


def monitored(
    operation: str | None = None,
    monitor: PerformanceMonitor | None = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Time an async callable and record one metric per call.

    The monitor is, in order: the `monitor` argument, a `monitor` attribute
    on the bound instance, the process-wide default. The wrapped call's
    return value and exception pass through untouched; a cancelled call is
    recorded as a failure.
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        name = operation or func.__name__

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            target = monitor
            if target is None and args:
                target = getattr(args[0], "monitor", None)
            if not isinstance(target, PerformanceMonitor):
                target = performance_monitor

            start = time.perf_counter()
            success = False
            error: str | None = None

            try:
                result = await func(*args, **kwargs)
                success = True
                return result
            except asyncio.CancelledError:
                error = "cancelled"
                raise
            except Exception as e:
                error = str(e)
                raise
            finally:
                target.record(name, _elapsed_ms(start), success, error)

        return wrapper

    return decorator


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class MonitoredContactLoader(ContactLoader):
    """ContactLoader with every public operation timed."""

    def __init__(self, context: DataContext, monitor: PerformanceMonitor | None = None):
        super().__init__(context)
        self.monitor = monitor or performance_monitor
        self._inner = ContactLoader(context)

    @monitored("fetch_contact_by_id")
    async def fetch_contact_by_id(self, id):
        return await super().fetch_contact_by_id(id)

    @monitored("fetch_contact_with_lineage")
    async def fetch_contact_with_lineage(self, id):
        return await super().fetch_contact_with_lineage(id)

    # Inner lookups go through the unwrapped loader so one call records one metric
    @monitored("fetch_contacts_with_lineage")
    async def fetch_contacts_with_lineage(self, ids):
        return await self._inner.fetch_contacts_with_lineage(ids)

    @monitored("fetch_linked_contacts")
    async def fetch_linked_contacts(self, doc):
        return await self._inner.fetch_linked_contacts(doc)


class MonitoredHydrationService(HydrationService):
    """HydrationService with every public operation timed."""

    def __init__(
        self,
        context: DataContext,
        monitor: PerformanceMonitor | None = None,
        contact_types: Iterable[str] = (),
    ):
        super().__init__(context, contact_types=contact_types)
        self.monitor = monitor or performance_monitor
        self._inner = HydrationService(
            context,
            contact_types=contact_types,
            contact_loader=self.contact_loader,
        )

    @monitored("get_doc")
    async def get_doc(self, id):
        return await self._inner.get_doc(id)

    @monitored("get_docs")
    async def get_docs(self, ids):
        return await self._inner.get_docs(ids)

    @monitored("hydrate_doc")
    async def hydrate_doc(self, doc):
        return await self._inner.hydrate_doc(doc)

    @monitored("hydrate_docs")
    async def hydrate_docs(self, docs):
        return await self._inner.hydrate_docs(docs)


class MonitoredLineage(Lineage):
    """Lineage facade with every public operation timed."""

    def __init__(
        self,
        context: DataContext,
        monitor: PerformanceMonitor | None = None,
        contact_types: Iterable[str] = (),
    ):
        super().__init__(context, contact_types=contact_types)
        self.monitor = monitor or performance_monitor

    @monitored("get_doc")
    async def get_doc(self, id):
        return await super().get_doc(id)

    @monitored("get_docs")
    async def get_docs(self, ids):
        return await super().get_docs(ids)

    @monitored("hydrate_doc")
    async def hydrate_doc(self, doc):
        return await super().hydrate_doc(doc)

    @monitored("hydrate_docs")
    async def hydrate_docs(self, docs):
        return await super().hydrate_docs(docs)


def create_monitored_lineage(
    context: DataContext,
    monitor: PerformanceMonitor | None = None,
    contact_types: Iterable[str] = (),
) -> MonitoredLineage:
    """Build a timed facade from a single context."""
    return MonitoredLineage(context, monitor=monitor, contact_types=contact_types)
