"""Tests for VersionRepository query and insert methods."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError

from querino.database.repositories.versions import VersionRepository
from querino.errors import VersionConflictError
from querino.models.version import VersionRecord

_FIELDS = {"title": "T", "description": None, "content": "c", "tags": []}
_EXPECTED_MAX = 7


def _query_results(*items):
    calls: list[tuple[str, dict]] = []

    def query_items(sql, **kwargs):
        calls.append((sql, kwargs))

        async def results():
            for item in items:
                yield item

        return results()

    return query_items, calls


class TestVersionRepository:
    """Test the Version Repository."""

    @pytest.fixture
    def repo(self) -> VersionRepository:
        """Create a repo backed by a mock container."""
        mock_db = MagicMock()
        mock_container = AsyncMock()
        mock_db.get_container_client.return_value = mock_container
        return VersionRepository(mock_db)

    def test_uses_versions_container(self) -> None:
        """Verify the repository binds the versions container."""
        mock_db = MagicMock()
        VersionRepository(mock_db)
        mock_db.get_container_client.assert_called_once_with("versions")

    async def test_list_by_document_orders_descending(self, repo: VersionRepository) -> None:
        """Verify list by document queries newest first within the partition."""
        repo.query = AsyncMock(return_value=[VersionRecord.new("doc-1", 1, _FIELDS)])

        result = await repo.list_by_document("doc-1")

        assert len(result) == 1
        query_str = repo.query.call_args[0][0]
        assert "@document_id" in query_str
        assert "ORDER BY c.version_number DESC" in query_str
        assert repo.query.call_args.kwargs["partition_key"] == "doc-1"

    async def test_get_by_number_reads_deterministic_id(self, repo: VersionRepository) -> None:
        """Verify a version is read by its derived id in the document partition."""
        record = VersionRecord.new("doc-1", 2, _FIELDS)
        repo._container.read_item = AsyncMock(  # noqa: SLF001
            return_value=record.model_dump(mode="json")
        )

        result = await repo.get_by_number("doc-1", 2)

        assert result is not None
        assert result.version_number == 2
        repo._container.read_item.assert_awaited_once_with(  # noqa: SLF001
            item="doc-1:v2", partition_key="doc-1"
        )

    async def test_get_by_number_missing(self, repo: VersionRepository) -> None:
        """Verify a missing version returns none."""
        repo._container.read_item = AsyncMock(  # noqa: SLF001
            side_effect=CosmosResourceNotFoundError(status_code=404, message="missing")
        )

        assert await repo.get_by_number("doc-1", 9) is None

    async def test_max_version_number(self, repo: VersionRepository) -> None:
        """Verify the MAX aggregate result is returned."""
        query_items, calls = _query_results(_EXPECTED_MAX)
        repo._container.query_items = query_items  # noqa: SLF001

        assert await repo.max_version_number("doc-1") == _EXPECTED_MAX
        sql, kwargs = calls[0]
        assert "MAX(c.version_number)" in sql
        assert kwargs["partition_key"] == "doc-1"

    async def test_max_version_number_without_versions(self, repo: VersionRepository) -> None:
        """Verify an empty aggregate counts as zero."""
        query_items, _ = _query_results()
        repo._container.query_items = query_items  # noqa: SLF001

        assert await repo.max_version_number("doc-1") == 0

    async def test_create_version_inserts_body(self, repo: VersionRepository) -> None:
        """Verify the record is inserted with its derived id."""
        record = VersionRecord.new("doc-1", 1, _FIELDS, "first")

        result = await repo.create_version(record)

        assert result is record
        body = repo._container.create_item.call_args.kwargs["body"]  # noqa: SLF001
        assert body["id"] == "doc-1:v1"
        assert body["document_id"] == "doc-1"
        assert body["change_notes"] == "first"

    async def test_create_version_conflict(self, repo: VersionRepository) -> None:
        """Verify a 409 from Cosmos becomes a version conflict."""
        repo._container.create_item = AsyncMock(  # noqa: SLF001
            side_effect=CosmosHttpResponseError(status_code=409, message="Conflict")
        )

        with pytest.raises(VersionConflictError) as exc_info:
            await repo.create_version(VersionRecord.new("doc-1", 3, _FIELDS))

        assert exc_info.value.version_number == 3

    async def test_create_version_other_errors_propagate(self, repo: VersionRepository) -> None:
        """Verify non-conflict Cosmos errors are not translated."""
        repo._container.create_item = AsyncMock(  # noqa: SLF001
            side_effect=CosmosHttpResponseError(status_code=503, message="Unavailable")
        )

        with pytest.raises(CosmosHttpResponseError):
            await repo.create_version(VersionRecord.new("doc-1", 3, _FIELDS))
