"""Data models for Cosmos DB document types."""

from querino.models.base import DocumentBase
from querino.models.document import EDITABLE_FIELDS, ArtefactKind, Document
from querino.models.version import VersionRecord, restore_note, version_id

__all__ = [
    "EDITABLE_FIELDS",
    "ArtefactKind",
    "Document",
    "DocumentBase",
    "VersionRecord",
    "restore_note",
    "version_id",
]
