"""Version history routes: list, create, restore, compare, export."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from querino.database.repositories.documents import DocumentRepository
from querino.database.repositories.versions import VersionRepository
from querino.diff.fields import FieldChange, compare_fields
from querino.diff.line_diff import LineDiff, compute_line_diff
from querino.markdown import markdown_filename, version_to_markdown
from querino.models.version import VersionRecord
from querino.versions.service import VersionHistoryService

router = APIRouter(prefix="/documents/{document_id}/versions", tags=["versions"])


class CreateVersionRequest(BaseModel):
    change_notes: str | None = None
    fields: dict[str, Any] | None = None
    current_max: int | None = None


class CompareResponse(BaseModel):
    version: VersionRecord
    changes: list[FieldChange]
    content: LineDiff
    has_changes: bool


def _repositories(request: Request) -> tuple[DocumentRepository, VersionRepository]:
    database = request.app.state.cosmos.database
    return DocumentRepository(database), VersionRepository(database)


def _history(
    request: Request, documents: DocumentRepository, versions: VersionRepository
) -> VersionHistoryService:
    settings = request.app.state.settings
    return VersionHistoryService(
        versions,
        documents,
        max_conflict_retries=settings.versions.max_conflict_retries,
    )


@router.get("/", response_model=list[VersionRecord])
async def list_versions(request: Request, document_id: str) -> list[VersionRecord]:
    """List versions of a document, newest first."""
    documents, versions = _repositories(request)
    await documents.get_or_raise(document_id)
    return await _history(request, documents, versions).list_versions(document_id)


@router.post("/", response_model=VersionRecord, status_code=status.HTTP_201_CREATED)
async def create_version(
    request: Request, document_id: str, body: CreateVersionRequest
) -> VersionRecord:
    """Record the live document (or the supplied fields) as the next version."""
    documents, versions = _repositories(request)
    fields = body.fields
    if fields is None:
        document = await documents.get_or_raise(document_id)
        fields = document.editable_fields()
    return await _history(request, documents, versions).save_version(
        document_id,
        fields,
        body.change_notes,
        current_max=body.current_max,
    )


@router.post("/{version_number}/restore", response_model=VersionRecord)
async def restore_version(
    request: Request, document_id: str, version_number: int
) -> VersionRecord:
    """Restore a version; the jump is recorded as a new version."""
    documents, versions = _repositories(request)
    history = _history(request, documents, versions)
    await documents.get_or_raise(document_id)
    version = await history.get_version(document_id, version_number)
    current = await versions.max_version_number(document_id)
    return await history.restore_version(document_id, version, current)


@router.get("/{version_number}/compare", response_model=CompareResponse)
async def compare_version(
    request: Request, document_id: str, version_number: int
) -> CompareResponse:
    """Compare a stored version against the live document."""
    documents, versions = _repositories(request)
    document = await documents.get_or_raise(document_id)
    version = await _history(request, documents, versions).get_version(
        document_id, version_number
    )
    fields = compare_fields(version.snapshot, document.editable_fields())
    content = compute_line_diff(version.snapshot.get("content") or "", document.content)
    return CompareResponse(
        version=version,
        changes=fields,
        content=content,
        has_changes=any(change.changed for change in fields),
    )


@router.get("/{version_number}/markdown", response_class=PlainTextResponse)
async def export_version(
    request: Request, document_id: str, version_number: int
) -> PlainTextResponse:
    """Download a version as a markdown file."""
    documents, versions = _repositories(request)
    document = await documents.get_or_raise(document_id)
    version = await _history(request, documents, versions).get_version(
        document_id, version_number
    )
    filename = markdown_filename(version.snapshot.get("title") or document.title, version_number)
    return PlainTextResponse(
        version_to_markdown(version, document.kind),
        media_type="text/markdown",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
