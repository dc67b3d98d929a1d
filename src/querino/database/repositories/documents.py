"""Repository for the documents container (partitioned by /id)."""

from __future__ import annotations

import logging
from typing import Any

from querino.database.repositories.base import BaseRepository
from querino.errors import DocumentNotFoundError
from querino.models.document import Document

logger = logging.getLogger(__name__)


class DocumentRepository(BaseRepository[Document]):
    container_name = "documents"
    partition_key_path = "/id"
    model_class = Document

    async def get_or_raise(self, document_id: str) -> Document:
        document = await self.get(document_id, document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    async def apply_fields(self, document_id: str, fields: dict[str, Any]) -> Document:
        """Overwrite the live document's editable fields with ``fields``.

        Idempotent: applying the same fields twice leaves the same content.
        """
        document = await self.get_or_raise(document_id)
        document.apply_fields(fields)
        await self.update(document, document_id)
        logger.debug("Applied fields %s to document %s", sorted(fields), document_id)
        return document
