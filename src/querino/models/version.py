"""Version record model: immutable, numbered snapshots of a document's fields."""

from __future__ import annotations

import copy
from typing import Any

from pydantic import ConfigDict, Field

from querino.models.base import DocumentBase


def version_id(document_id: str, version_number: int) -> str:
    """Deterministic id so the store rejects a duplicate (document, number) pair."""
    return f"{document_id}:v{version_number}"


def restore_note(version_number: int) -> str:
    return f"Restored from version v{version_number}"


class VersionRecord(DocumentBase):
    """An append-only snapshot of a document at a point in time."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    version_number: int = Field(ge=1)
    snapshot: dict[str, Any] = Field(default_factory=dict)
    change_notes: str | None = None

    @classmethod
    def new(
        cls,
        document_id: str,
        version_number: int,
        fields: dict[str, Any],
        change_notes: str | None = None,
    ) -> VersionRecord:
        """Create a record with a deterministic id and a private copy of ``fields``."""
        return cls(
            id=version_id(document_id, version_number),
            document_id=document_id,
            version_number=version_number,
            snapshot=copy.deepcopy(fields),
            change_notes=change_notes or None,
        )

    @property
    def label(self) -> str:
        return f"v{self.version_number}"
