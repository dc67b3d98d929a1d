"""Shared fixtures: in-memory stores standing in for the Cosmos repositories."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from querino.errors import DocumentNotFoundError, VersionConflictError
from querino.models.document import Document
from querino.models.version import VersionRecord


class FakeVersionStore:
    """Dict-backed version store that rejects duplicate version numbers."""

    def __init__(self) -> None:
        self.records: dict[tuple[str, int], VersionRecord] = {}
        self.create_calls = 0
        self.fail_with: Exception | None = None

    async def list_by_document(self, document_id: str) -> list[VersionRecord]:
        return sorted(
            (r for (doc, _), r in self.records.items() if doc == document_id),
            key=lambda r: r.version_number,
            reverse=True,
        )

    async def get_by_number(self, document_id: str, version_number: int) -> VersionRecord | None:
        return self.records.get((document_id, version_number))

    async def max_version_number(self, document_id: str) -> int:
        numbers = [n for (doc, n) in self.records if doc == document_id]
        return max(numbers, default=0)

    async def create_version(self, record: VersionRecord) -> VersionRecord:
        self.create_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        key = (record.document_id, record.version_number)
        if key in self.records:
            raise VersionConflictError(record.document_id, record.version_number)
        self.records[key] = record
        return record

    def seed(self, document_id: str, count: int) -> list[VersionRecord]:
        """Insert versions 1..count with distinct content."""
        seeded = []
        for number in range(1, count + 1):
            record = VersionRecord.new(
                document_id,
                number,
                {"title": f"T{number}", "description": None, "content": f"c{number}", "tags": []},
                f"note {number}",
            )
            self.records[(document_id, number)] = record
            seeded.append(record)
        return seeded


class FakeDocumentStore:
    """Dict-backed document store recording every apply_fields call."""

    def __init__(self, *documents: Document) -> None:
        self.documents = {document.id: document for document in documents}
        self.applied: list[tuple[str, dict[str, Any]]] = []
        self.fail_with: Exception | None = None

    async def get_or_raise(self, document_id: str) -> Document:
        if document_id not in self.documents:
            raise DocumentNotFoundError(document_id)
        return self.documents[document_id]

    async def apply_fields(self, document_id: str, fields: dict[str, Any]) -> Document:
        if self.fail_with is not None:
            raise self.fail_with
        document = await self.get_or_raise(document_id)
        document.apply_fields(fields)
        self.applied.append((document_id, dict(fields)))
        return document

    async def soft_delete(self, document: Document, partition_key: str) -> None:
        document.deleted_at = datetime.now(UTC)
        self.documents.pop(partition_key, None)


@pytest.fixture
def document() -> Document:
    return Document(
        id="doc-1",
        title="Summarize",
        description="Summaries",
        content="line one\nline two",
        tags=["research"],
    )


@pytest.fixture
def version_store() -> FakeVersionStore:
    return FakeVersionStore()


@pytest.fixture
def document_store(document: Document) -> FakeDocumentStore:
    return FakeDocumentStore(document)
