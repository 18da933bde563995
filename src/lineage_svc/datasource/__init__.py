"""Data-access context - the read-only boundary to the record store."""

from .types import (
    BoundRead,
    ContactApi,
    DataContext,
    DataSourceError,
    InvalidQualifierError,
    Qualifier,
    UnsupportedOperationError,
    by_uuid,
)
from .loader import DocumentLoader, load_documents
from .static import StaticDataContext

__all__ = [
    "BoundRead",
    "ContactApi",
    "DataContext",
    "DataSourceError",
    "InvalidQualifierError",
    "Qualifier",
    "UnsupportedOperationError",
    "by_uuid",
    "DocumentLoader",
    "load_documents",
    "StaticDataContext",
]
