"""Tests for VersionHistoryService."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from querino.errors import RestoreIncompleteError, VersionConflictError, VersionNotFoundError
from querino.models.version import VersionRecord
from querino.versions.service import DocumentStore, VersionHistoryService, VersionStore

_FIELDS = {"title": "T", "description": None, "content": "body", "tags": ["a"]}


@pytest.fixture
def history(version_store, document_store) -> VersionHistoryService:
    return VersionHistoryService(version_store, document_store, max_conflict_retries=2)


@pytest.mark.unit
class TestCreateVersion:
    """Test version numbering."""

    async def test_first_version_is_one(self, history, version_store) -> None:
        """Verify a document without history gets version 1."""
        record = await history.create_version("doc-1", _FIELDS, "initial")

        assert record.version_number == 1
        assert record.label == "v1"
        assert record.change_notes == "initial"
        assert version_store.records[("doc-1", 1)] is record

    async def test_next_number_after_existing(self, history, version_store) -> None:
        """Verify numbering continues from the highest existing version."""
        version_store.seed("doc-1", 3)

        record = await history.create_version("doc-1", _FIELDS, current_max=3)

        assert record.version_number == 4
        assert record.change_notes is None

    async def test_snapshot_is_a_copy(self, history) -> None:
        """Verify later edits to the source fields do not change the stored snapshot."""
        fields = {**_FIELDS, "tags": ["a"]}
        record = await history.create_version("doc-1", fields)

        fields["tags"].append("b")

        assert record.snapshot["tags"] == ["a"]

    async def test_stale_max_raises_conflict(self, history, version_store) -> None:
        """Verify create_version does not retry a taken number."""
        version_store.seed("doc-1", 2)

        with pytest.raises(VersionConflictError) as exc_info:
            await history.create_version("doc-1", _FIELDS, current_max=1)

        assert exc_info.value.version_number == 2
        assert exc_info.value.retryable is True


@pytest.mark.unit
class TestSaveVersion:
    """Test conflict retries."""

    async def test_retries_with_refetched_max(self, history, version_store) -> None:
        """Verify a stale number is corrected from the store."""
        version_store.seed("doc-1", 3)

        record = await history.save_version("doc-1", _FIELDS, "edit", current_max=1)

        assert record.version_number == 4
        assert len(version_store.records) == 4

    async def test_gives_up_after_max_retries(self, version_store, document_store) -> None:
        """Verify repeated conflicts eventually propagate."""
        version_store.fail_with = VersionConflictError("doc-1", 1)
        history = VersionHistoryService(version_store, document_store, max_conflict_retries=2)

        with pytest.raises(VersionConflictError):
            await history.save_version("doc-1", _FIELDS)

        assert version_store.create_calls == 3

    async def test_other_errors_are_not_retried(self, history, version_store) -> None:
        """Verify only conflicts trigger a retry."""
        version_store.fail_with = RuntimeError("cosmos down")

        with pytest.raises(RuntimeError):
            await history.save_version("doc-1", _FIELDS)

        assert version_store.create_calls == 1


@pytest.mark.unit
class TestListAndGet:
    """Test history reads."""

    async def test_list_is_newest_first(self, history, version_store) -> None:
        """Verify versions come back in descending number order."""
        version_store.seed("doc-1", 3)
        version_store.seed("doc-2", 1)

        versions = await history.list_versions("doc-1")

        assert [v.version_number for v in versions] == [3, 2, 1]

    async def test_list_sorts_unordered_store_results(self, document_store) -> None:
        """Verify ordering does not depend on the store."""
        store = AsyncMock()
        store.list_by_document.return_value = [
            VersionRecord.new("doc-1", n, _FIELDS) for n in (2, 3, 1)
        ]
        history = VersionHistoryService(store, document_store)

        versions = await history.list_versions("doc-1")

        assert [v.version_number for v in versions] == [3, 2, 1]

    async def test_get_missing_version_raises(self, history) -> None:
        """Verify an unknown number is a not-found error."""
        with pytest.raises(VersionNotFoundError) as exc_info:
            await history.get_version("doc-1", 9)

        assert exc_info.value.status_code == 404

    def test_fakes_satisfy_protocols(self, version_store, document_store) -> None:
        """Verify the in-memory stores match the store protocols."""
        assert isinstance(version_store, VersionStore)
        assert isinstance(document_store, DocumentStore)


@pytest.mark.unit
class TestRestoreVersion:
    """Test non-destructive restore."""

    async def test_restore_records_new_version(
        self, history, version_store, document_store, document
    ) -> None:
        """Verify restoring v1 of three versions writes the fields and adds v4."""
        seeded = version_store.seed("doc-1", 3)
        before = {key: record.model_dump() for key, record in version_store.records.items()}

        restored = await history.restore_version("doc-1", seeded[0], 3)

        assert restored.version_number == 4
        assert restored.change_notes == "Restored from version v1"
        assert restored.snapshot == seeded[0].snapshot
        assert document.title == "T1"
        assert document.content == "c1"
        assert document_store.applied == [("doc-1", seeded[0].snapshot)]
        for key, dumped in before.items():
            assert version_store.records[key].model_dump() == dumped

    async def test_restore_with_stale_current_number(self, history, version_store) -> None:
        """Verify a stale current number still yields the next free version."""
        seeded = version_store.seed("doc-1", 3)

        restored = await history.restore_version("doc-1", seeded[1], 1)

        assert restored.version_number == 4
        assert restored.change_notes == "Restored from version v2"

    async def test_restore_incomplete_when_version_write_fails(
        self, history, version_store, document
    ) -> None:
        """Verify a failed history write after the field overwrite is reported."""
        seeded = version_store.seed("doc-1", 2)
        version_store.fail_with = RuntimeError("cosmos down")

        with pytest.raises(RestoreIncompleteError) as exc_info:
            await history.restore_version("doc-1", seeded[0], 2)

        assert exc_info.value.restored_version == 1
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert document.content == "c1"

    async def test_failed_field_write_records_nothing(
        self, history, version_store, document_store
    ) -> None:
        """Verify no version is created when the document update fails."""
        seeded = version_store.seed("doc-1", 2)
        document_store.fail_with = RuntimeError("cosmos down")

        with pytest.raises(RuntimeError):
            await history.restore_version("doc-1", seeded[0], 2)

        assert version_store.create_calls == 0
