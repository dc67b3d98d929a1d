"""Repository for the versions container (partitioned by /document_id)."""

from __future__ import annotations

import logging
from typing import Any

from azure.cosmos.exceptions import CosmosHttpResponseError

from querino.database.repositories.base import BaseRepository
from querino.errors import VersionConflictError
from querino.models.version import VersionRecord, version_id

logger = logging.getLogger(__name__)

_HTTP_CONFLICT = 409


class VersionRepository(BaseRepository[VersionRecord]):
    """Append-only version history.

    Record ids are derived from ``(document_id, version_number)``, so Cosmos'
    per-partition id uniqueness rejects a second record with the same number.
    """

    container_name = "versions"
    partition_key_path = "/document_id"
    model_class = VersionRecord

    async def list_by_document(self, document_id: str) -> list[VersionRecord]:
        """Fetch all versions of a document, highest version number first."""
        return await self.query(
            "SELECT * FROM c WHERE c.document_id = @document_id"
            " ORDER BY c.version_number DESC",
            [{"name": "@document_id", "value": document_id}],
            partition_key=document_id,
        )

    async def get_by_number(self, document_id: str, version_number: int) -> VersionRecord | None:
        return await self.get(version_id(document_id, version_number), document_id)

    async def max_version_number(self, document_id: str) -> int:
        """Return the highest stored version number, or 0 when there are none."""
        highest = 0
        async for item in self._container.query_items(
            "SELECT VALUE MAX(c.version_number) FROM c WHERE c.document_id = @document_id",
            parameters=[{"name": "@document_id", "value": document_id}],
            partition_key=document_id,
        ):
            if isinstance(item, int):
                highest = item
        return highest

    async def create_version(self, record: VersionRecord) -> VersionRecord:
        """Insert a new record, raising VersionConflictError if the number is taken."""
        body: dict[str, Any] = self._to_body(record)
        try:
            await self._container.create_item(body=body)
        except CosmosHttpResponseError as exc:
            if exc.status_code == _HTTP_CONFLICT:
                logger.info(
                    "Version v%d already exists for document %s",
                    record.version_number,
                    record.document_id,
                )
                raise VersionConflictError(record.document_id, record.version_number) from exc
            raise
        return record
