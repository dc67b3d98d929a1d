"""Document routes: markdown export/import and soft delete."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import PlainTextResponse

from querino.database.repositories.documents import DocumentRepository
from querino.markdown import document_to_markdown, markdown_filename, parse_markdown
from querino.models.document import Document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents/{document_id}", tags=["documents"])


def _documents(request: Request) -> DocumentRepository:
    return DocumentRepository(request.app.state.cosmos.database)


@router.get("/markdown", response_class=PlainTextResponse)
async def export_document(request: Request, document_id: str) -> PlainTextResponse:
    """Download the live document as a markdown file."""
    document = await _documents(request).get_or_raise(document_id)
    filename = markdown_filename(document.title)
    return PlainTextResponse(
        document_to_markdown(document),
        media_type="text/markdown",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.put("/markdown", response_model=Document)
async def import_document(
    request: Request, document_id: str, filename: str | None = None
) -> Document:
    """Replace the document's editable fields with an uploaded markdown file."""
    parsed = parse_markdown((await request.body()).decode("utf-8"), filename)
    documents = _documents(request)
    document = await documents.get_or_raise(document_id)
    if parsed.frontmatter.type is not document.kind:
        logger.info(
            "Imported %s markdown into %s document %s",
            parsed.frontmatter.type,
            document.kind,
            document_id,
        )
    return await documents.apply_fields(document_id, parsed.editable_fields())


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(request: Request, document_id: str) -> Response:
    """Soft-delete the document; its version history is kept."""
    documents = _documents(request)
    document = await documents.get_or_raise(document_id)
    await documents.soft_delete(document, document_id)
    logger.info("Soft-deleted document %s", document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
