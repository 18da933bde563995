"""Shared test fixtures for lineage tests.

Two kinds of data context are provided:
- StaticDataContext over a small health hierarchy (the real static context)
- CannedContext, a double returning fixed results per operation that also
  records calls, tracks in-flight reads and can inject delays or failures
"""

import asyncio
import copy
import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).parent.parent
if (_REPO_ROOT / "src" / "lineage_svc").exists():
    sys.path.insert(0, str(_REPO_ROOT / "src"))

from lineage_svc.datasource import ContactApi, StaticDataContext
from lineage_svc.lineage import Lineage
from lineage_svc.telemetry.monitor import PerformanceMonitor


class CannedContext:
    """Data context double with canned results keyed by operation and id."""

    def __init__(self, contacts=None, with_lineage=None, delays=None, error=None):
        self.contacts = contacts or {}
        self.with_lineage = with_lineage or {}
        self.delays = delays or {}
        self.error = error
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    def bind(self, operation):
        table = self.contacts if operation == ContactApi.GET else self.with_lineage

        async def read(qualifier):
            self.calls.append((operation, qualifier.uuid))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                await asyncio.sleep(self.delays.get(qualifier.uuid, 0))
                if self.error is not None:
                    raise self.error
                doc = table.get(qualifier.uuid)
                return copy.deepcopy(doc) if doc is not None else None
            finally:
                self.in_flight -= 1

        return read


# =============================================================================
# Canned contact fixtures
# =============================================================================

@pytest.fixture
def mock_contact() -> dict:
    return {
        "_id": "contact1",
        "_rev": "1-abc",
        "type": "person",
        "name": "Test Person",
        "parent": {"_id": "place1"},
    }


@pytest.fixture
def mock_contact_with_lineage(mock_contact) -> dict:
    return {
        **mock_contact,
        "lineage": [
            {"_id": "place1", "_rev": "1-def", "type": "clinic", "name": "Test Clinic"},
        ],
    }


@pytest.fixture
def canned_context(mock_contact, mock_contact_with_lineage) -> CannedContext:
    return CannedContext(
        contacts={"contact1": mock_contact},
        with_lineage={"contact1": mock_contact_with_lineage},
    )


@pytest.fixture
def make_context():
    """Factory for CannedContext doubles."""
    return CannedContext


# =============================================================================
# Static hierarchy fixtures
# =============================================================================

@pytest.fixture
def documents() -> dict:
    """District hospital > health center > clinic > patient, plus a report."""
    return {
        "dh1": {"_id": "dh1", "type": "district_hospital", "name": "Central District"},
        "hc1": {
            "_id": "hc1",
            "type": "health_center",
            "name": "Riverside Health Center",
            "parent": {"_id": "dh1"},
        },
        "clinic1": {
            "_id": "clinic1",
            "type": "clinic",
            "name": "Riverside Household",
            "parent": {"_id": "hc1", "parent": {"_id": "dh1"}},
        },
        "chw1": {
            "_id": "chw1",
            "type": "person",
            "name": "Amina",
            "parent": {"_id": "hc1", "parent": {"_id": "dh1"}},
        },
        "patient1": {
            "_id": "patient1",
            "type": "person",
            "name": "Joseph",
            "parent": {"_id": "clinic1", "parent": {"_id": "hc1", "parent": {"_id": "dh1"}}},
        },
        "report1": {
            "_id": "report1",
            "type": "data_record",
            "form": "pregnancy_visit",
            "patient_id": "patient1",
            "place_id": "clinic1",
        },
    }


@pytest.fixture
def static_context(documents) -> StaticDataContext:
    return StaticDataContext(documents=documents)


@pytest.fixture
def lineage(static_context) -> Lineage:
    return Lineage(static_context)


@pytest.fixture
def monitor() -> PerformanceMonitor:
    return PerformanceMonitor()
