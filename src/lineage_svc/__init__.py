"""
Lineage Service - Document Hydration Engine

Enriches sparse, reference-style health-record documents:
- Contacts are refreshed from the store together with their ancestor lineage
- Record reference fields (patient_id, place_id, linked_docs) are resolved
  into embedded contacts
- Optional timing of every public operation
"""

__version__ = "0.1.0"

from .contact_loader import ContactLoader
from .hydration import HydrationService
from .lineage import Lineage, create_lineage

__all__ = [
    "__version__",
    "ContactLoader",
    "HydrationService",
    "Lineage",
    "create_lineage",
]
