"""Tests for HydrationService."""

import copy

import pytest

from lineage_svc.datasource import ContactApi, DataSourceError
from lineage_svc.documents import has_references, is_contact
from lineage_svc.hydration import HydrationService


@pytest.fixture
def service(canned_context) -> HydrationService:
    return HydrationService(canned_context)


class TestClassification:
    @pytest.mark.parametrize("doc_type", [
        "contact", "person", "clinic", "health_center", "district_hospital",
    ])
    def test_contact_types(self, doc_type):
        assert is_contact({"_id": "x", "type": doc_type})

    @pytest.mark.parametrize("doc", [
        {"_id": "x", "type": "data_record"},
        {"_id": "x"},
        {"_id": "x", "type": None},
        None,
        "person",
    ])
    def test_not_contacts(self, doc):
        assert not is_contact(doc)

    def test_parent_alone_is_not_a_contact(self):
        assert not is_contact({"_id": "x", "parent": {"_id": "p"}})

    def test_custom_contact_types_extend_builtins(self):
        assert is_contact({"type": "household"}, contact_types=["household"])
        assert is_contact({"type": "person"}, contact_types=["household"])
        assert not is_contact({"type": "household"})

    def test_configurable_hierarchy_contact(self):
        assert is_contact({"_id": "x", "type": "contact", "contact_type": "household"})

    def test_has_references(self):
        assert has_references({"patient_id": "a"})
        assert has_references({"place_id": "a"})
        assert has_references({"linked_docs": {}})
        assert not has_references({"patient_id": ""})
        assert not has_references({"patient_id": 7, "linked_docs": "a"})


class TestHydrateDoc:
    @pytest.mark.asyncio
    async def test_none_is_none(self, service):
        assert await service.hydrate_doc(None) is None

    @pytest.mark.asyncio
    async def test_contact_is_refetched_with_lineage(self, service, mock_contact, mock_contact_with_lineage):
        result = await service.hydrate_doc(dict(mock_contact))
        assert result == mock_contact_with_lineage

    @pytest.mark.asyncio
    async def test_contact_hydration_discards_local_edits(self, service, mock_contact, mock_contact_with_lineage):
        stale = {**mock_contact, "name": "Edited Locally", "extra": True}
        result = await service.hydrate_doc(stale)
        assert result == mock_contact_with_lineage

    @pytest.mark.asyncio
    async def test_unknown_contact_is_none(self, service):
        assert await service.hydrate_doc({"_id": "gone", "type": "person"}) is None

    @pytest.mark.asyncio
    async def test_builtin_contact_refetched_with_extra_types(self, canned_context, mock_contact_with_lineage):
        service = HydrationService(canned_context, contact_types=["household"])
        result = await service.hydrate_doc({"_id": "contact1", "type": "person"})
        assert result == mock_contact_with_lineage

    @pytest.mark.asyncio
    async def test_contact_without_id_is_none(self, service, canned_context):
        assert await service.hydrate_doc({"type": "person"}) is None
        assert canned_context.calls == []

    @pytest.mark.asyncio
    async def test_contact_replaced_by_stored_lineage_version(self, make_context):
        context = make_context(with_lineage={
            "c1": {
                "_id": "c1",
                "type": "person",
                "lineage": [{"_id": "p1", "type": "clinic"}],
            },
        })
        service = HydrationService(context)

        result = await service.hydrate_doc({"_id": "c1", "type": "person"})

        assert result == {
            "_id": "c1",
            "type": "person",
            "lineage": [{"_id": "p1", "type": "clinic"}],
        }

    @pytest.mark.asyncio
    async def test_plain_doc_returned_unchanged(self, service, canned_context):
        doc = {"_id": "doc1", "type": "other"}
        result = await service.hydrate_doc(doc)
        assert result == doc
        assert canned_context.calls == []

    @pytest.mark.asyncio
    async def test_hydration_is_idempotent(self, service):
        doc = {"_id": "doc1", "type": "other", "fields": {"a": 1}}
        once = await service.hydrate_doc(doc)
        twice = await service.hydrate_doc(once)
        assert twice == once == doc

    @pytest.mark.asyncio
    async def test_record_with_patient_and_place(self, service, mock_contact_with_lineage):
        record = {
            "_id": "report1",
            "type": "data_record",
            "patient_id": "contact1",
            "place_id": "contact1",
        }

        result = await service.hydrate_doc(record)

        assert result == {
            **record,
            "patient": mock_contact_with_lineage,
            "place": [mock_contact_with_lineage, *mock_contact_with_lineage["lineage"]],
        }

    @pytest.mark.asyncio
    async def test_record_input_not_mutated(self, service):
        record = {"_id": "report1", "type": "data_record", "patient_id": "contact1"}
        original = copy.deepcopy(record)

        await service.hydrate_doc(record)

        assert record == original

    @pytest.mark.asyncio
    async def test_unknown_patient_is_none(self, service):
        record = {"_id": "r", "type": "data_record", "patient_id": "missing"}
        result = await service.hydrate_doc(record)
        assert result["patient"] is None
        assert result["patient_id"] == "missing"
        assert "place" not in result

    @pytest.mark.asyncio
    async def test_unknown_place_is_empty_list(self, service):
        record = {"_id": "r", "type": "data_record", "place_id": "missing"}
        result = await service.hydrate_doc(record)
        assert result["place"] == []
        assert "patient" not in result

    @pytest.mark.asyncio
    async def test_place_keeps_unresolved_ancestors(self, make_context):
        context = make_context(with_lineage={
            "clinic1": {
                "_id": "clinic1",
                "type": "clinic",
                "lineage": [None, {"_id": "dh1", "type": "district_hospital"}],
            },
        })
        service = HydrationService(context)

        result = await service.hydrate_doc({"_id": "r", "place_id": "clinic1"})

        assert [p and p["_id"] for p in result["place"]] == ["clinic1", None, "dh1"]

    @pytest.mark.asyncio
    async def test_linked_docs_merged(self, service, mock_contact):
        record = {
            "_id": "r",
            "type": "data_record",
            "linked_docs": {"chw": "contact1", "supervisor": "missing", "count": 3},
        }

        result = await service.hydrate_doc(record)

        assert result["chw"] == mock_contact
        assert result["supervisor"] is None
        assert "count" not in result
        assert result["linked_docs"] == record["linked_docs"]

    @pytest.mark.asyncio
    async def test_linked_docs_do_not_overwrite_fields(self, service, mock_contact_with_lineage):
        record = {
            "_id": "r",
            "type": "data_record",
            "patient_id": "contact1",
            "linked_docs": {"patient": "missing", "_id": "contact1"},
        }

        result = await service.hydrate_doc(record)

        assert result["_id"] == "r"
        assert result["patient"] == mock_contact_with_lineage

    @pytest.mark.asyncio
    async def test_reference_fields_resolved_concurrently(self, make_context):
        context = make_context(delays={"p": 0.01, "pl": 0.01, "l": 0.01})
        service = HydrationService(context)

        await service.hydrate_doc({
            "_id": "r",
            "patient_id": "p",
            "place_id": "pl",
            "linked_docs": {"x": "l"},
        })

        assert context.max_in_flight == 3
        assert sorted(uuid for _, uuid in context.calls) == ["l", "p", "pl"]

    @pytest.mark.asyncio
    async def test_upstream_error_propagates(self, make_context):
        error = DataSourceError("unauthorized")
        service = HydrationService(make_context(error=error))

        with pytest.raises(DataSourceError) as exc_info:
            await service.hydrate_doc({"_id": "r", "patient_id": "p"})

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_non_mapping_returned_as_is(self, service):
        assert await service.hydrate_doc("not-a-doc") == "not-a-doc"


class TestHydrateDocs:
    @pytest.mark.asyncio
    async def test_mixed_batch(self, service, mock_contact, mock_contact_with_lineage):
        docs = [
            dict(mock_contact),
            {"_id": "report1", "type": "data_record", "patient_id": "contact1", "place_id": "contact1"},
            None,
            {"_id": "doc1", "type": "other"},
        ]

        result = await service.hydrate_docs(docs)

        assert result == [
            mock_contact_with_lineage,
            {
                "_id": "report1",
                "type": "data_record",
                "patient_id": "contact1",
                "place_id": "contact1",
                "patient": mock_contact_with_lineage,
                "place": [mock_contact_with_lineage, *mock_contact_with_lineage["lineage"]],
            },
            None,
            {"_id": "doc1", "type": "other"},
        ]

    @pytest.mark.asyncio
    async def test_empty(self, service):
        assert await service.hydrate_docs([]) == []

    @pytest.mark.asyncio
    async def test_order_preserved(self, make_context):
        context = make_context(
            with_lineage={
                "a": {"_id": "a", "type": "person"},
                "b": {"_id": "b", "type": "person"},
            },
            delays={"a": 0.03},
        )
        service = HydrationService(context)

        result = await service.hydrate_docs([
            {"_id": "a", "type": "person"},
            None,
            {"_id": "b", "type": "person"},
        ])

        assert [doc and doc["_id"] for doc in result] == ["a", None, "b"]


class TestGetDoc:
    @pytest.mark.asyncio
    async def test_get_doc(self, service, mock_contact_with_lineage):
        assert await service.get_doc("contact1") == mock_contact_with_lineage

    @pytest.mark.asyncio
    async def test_get_doc_missing(self, service):
        assert await service.get_doc("nonexistent") is None

    @pytest.mark.asyncio
    async def test_get_docs(self, service, canned_context, mock_contact_with_lineage):
        result = await service.get_docs(["contact1", "nonexistent"])
        assert result == [mock_contact_with_lineage, None]
        assert all(op == ContactApi.GET_WITH_LINEAGE for op, _ in canned_context.calls)
