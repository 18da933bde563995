"""FastAPI application - Lineage hydration service.

Exposes the lineage facade over HTTP, backed by a static data context.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import __version__
from .config import Config
from .datasource import DataSourceError, StaticDataContext
from .lineage import Lineage
from .telemetry.instrumentation import MonitoredLineage
from .telemetry.monitor import PerformanceMonitor
from .telemetry.sinks import create_sink


logger = logging.getLogger(__name__)


# Request models
class BatchIdsRequest(BaseModel):
    ids: list[str]


class HydrateRequest(BaseModel):
    doc: dict[str, Any] | None = None


class HydrateBatchRequest(BaseModel):
    docs: list[dict[str, Any] | None]


# Response models
class DocumentResponse(BaseModel):
    doc: dict[str, Any] | None


class DocumentsResponse(BaseModel):
    docs: list[dict[str, Any] | None]


class HealthResponse(BaseModel):
    status: str
    version: str
    telemetry: dict[str, Any]


class MetricsResponse(BaseModel):
    metrics: list[dict[str, Any]]
    summary: dict[str, dict[str, float]]


def build_lineage(config: Config, monitor: PerformanceMonitor) -> Lineage:
    """Create the facade (timed when telemetry is enabled) from config."""
    context_kwargs = {
        "contact_types": config.hydration.contact_types,
        "max_lineage_depth": config.datasource.max_lineage_depth,
    }
    if config.datasource.documents_file:
        context = StaticDataContext.from_file(config.datasource.documents_file, **context_kwargs)
    else:
        logger.warning("No documents_file configured, serving an empty data context")
        context = StaticDataContext(**context_kwargs)

    if config.telemetry.enabled:
        return MonitoredLineage(context, monitor=monitor, contact_types=config.hydration.contact_types)
    return Lineage(context, contact_types=config.hydration.contact_types)


def create_app(
    lineage: Lineage | None = None,
    monitor: PerformanceMonitor | None = None,
    config: Config | None = None,
) -> FastAPI:
    """
    Create the FastAPI app.

    When `lineage` is given it is served as-is; otherwise the facade is built
    on startup from `config` (or `Config.load()`).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting lineage service...")

        if app.state.lineage is None:
            cfg = config or Config.load()
            app.state.monitor = PerformanceMonitor(max_metrics=cfg.telemetry.max_metrics)

            if cfg.telemetry.enabled:
                sink = create_sink(cfg.telemetry)
                if sink is not None:
                    app.state.monitor.add_sink(sink)

            app.state.lineage = build_lineage(cfg, app.state.monitor)

        # Starts sink delivery in the background
        await app.state.monitor.start()
        logger.info("Lineage service started")

        yield

        await app.state.monitor.stop()
        logger.info("Lineage service stopped")

    app = FastAPI(
        title="Lineage Service",
        description="Hydrates reference-style documents with contacts and their lineage.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.lineage = lineage
    app.state.monitor = monitor or getattr(lineage, "monitor", None) or PerformanceMonitor()

    @app.exception_handler(DataSourceError)
    async def data_source_error_handler(request: Request, exc: DataSourceError):
        logger.error(f"Data source error on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=502,
            content={"error": "Data source error", "detail": str(exc)},
        )

    def get_lineage(request: Request) -> Lineage:
        service = request.app.state.lineage
        if service is None:
            raise HTTPException(status_code=503, detail="Service not initialized")
        return service

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request):
        """Health check endpoint."""
        return HealthResponse(
            status="healthy" if request.app.state.lineage is not None else "starting",
            version=__version__,
            telemetry=request.app.state.monitor.stats,
        )

    @app.get("/documents/{doc_id}", response_model=DocumentResponse)
    async def get_document(request: Request, doc_id: str):
        """Fetch a contact with its lineage."""
        doc = await get_lineage(request).get_doc(doc_id)
        if doc is None:
            raise HTTPException(status_code=404, detail=f"Document not found: {doc_id}")
        return DocumentResponse(doc=doc)

    @app.post("/documents/batch", response_model=DocumentsResponse)
    async def get_documents(request: Request, body: BatchIdsRequest):
        """Fetch contacts with lineage; null at positions that were not found."""
        docs = await get_lineage(request).get_docs(body.ids)
        return DocumentsResponse(docs=docs)

    @app.post("/hydrate", response_model=DocumentResponse)
    async def hydrate(request: Request, body: HydrateRequest):
        """Hydrate a single document."""
        doc = await get_lineage(request).hydrate_doc(body.doc)
        return DocumentResponse(doc=doc)

    @app.post("/hydrate/batch", response_model=DocumentsResponse)
    async def hydrate_batch(request: Request, body: HydrateBatchRequest):
        """Hydrate documents, preserving order."""
        docs = await get_lineage(request).hydrate_docs(body.docs)
        return DocumentsResponse(docs=docs)

    @app.get("/metrics", response_model=MetricsResponse)
    async def metrics(request: Request):
        """Recorded operation timings and per-operation aggregates."""
        monitor: PerformanceMonitor = request.app.state.monitor
        return MetricsResponse(
            metrics=[m.to_dict() for m in monitor.metrics],
            summary=monitor.summary(),
        )

    return app


app = create_app()
