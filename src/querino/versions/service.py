"""Version history: append-only numbered snapshots and non-destructive restore."""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from querino.errors import RestoreIncompleteError, VersionConflictError, VersionNotFoundError
from querino.models.version import VersionRecord, restore_note

logger = logging.getLogger(__name__)

DEFAULT_CONFLICT_RETRIES = 3


@runtime_checkable
class VersionStore(Protocol):
    """Store enforcing uniqueness of ``(document_id, version_number)``."""

    async def list_by_document(self, document_id: str) -> list[VersionRecord]: ...

    async def get_by_number(
        self, document_id: str, version_number: int
    ) -> VersionRecord | None: ...

    async def max_version_number(self, document_id: str) -> int: ...

    async def create_version(self, record: VersionRecord) -> VersionRecord:
        """Insert ``record`` or raise VersionConflictError if its number is taken."""
        ...


@runtime_checkable
class DocumentStore(Protocol):
    """Persistence for the live document's editable fields."""

    async def apply_fields(self, document_id: str, fields: dict[str, Any]) -> Any: ...


class VersionHistoryService:
    """Create, list and restore versions of a document."""

    def __init__(
        self,
        versions: VersionStore,
        documents: DocumentStore,
        *,
        max_conflict_retries: int = DEFAULT_CONFLICT_RETRIES,
    ) -> None:
        self._versions = versions
        self._documents = documents
        self._max_conflict_retries = max_conflict_retries

    async def list_versions(self, document_id: str) -> list[VersionRecord]:
        """Return versions newest first; the first element is the current one."""
        versions = await self._versions.list_by_document(document_id)
        return sorted(versions, key=lambda v: v.version_number, reverse=True)

    async def get_version(self, document_id: str, version_number: int) -> VersionRecord:
        version = await self._versions.get_by_number(document_id, version_number)
        if version is None:
            raise VersionNotFoundError(document_id, version_number)
        return version

    async def create_version(
        self,
        document_id: str,
        fields: dict[str, Any],
        change_notes: str | None = None,
        *,
        current_max: int | None = None,
    ) -> VersionRecord:
        """Append a version numbered ``current_max + 1``.

        When ``current_max`` is omitted it is read from the store. A stale
        ``current_max`` surfaces as VersionConflictError.
        """
        if current_max is None:
            current_max = await self._versions.max_version_number(document_id)
        record = VersionRecord.new(document_id, current_max + 1, fields, change_notes)
        created = await self._versions.create_version(record)
        logger.info("Created version %s of document %s", created.label, document_id)
        return created

    async def save_version(
        self,
        document_id: str,
        fields: dict[str, Any],
        change_notes: str | None = None,
        *,
        current_max: int | None = None,
    ) -> VersionRecord:
        """Like create_version, but refetch the current maximum and retry on conflict."""
        attempt = 0
        while True:
            try:
                return await self.create_version(
                    document_id, fields, change_notes, current_max=current_max
                )
            except VersionConflictError as exc:
                attempt += 1
                if attempt > self._max_conflict_retries:
                    logger.warning(
                        "Giving up on version for document %s after %d conflicts",
                        document_id,
                        attempt,
                    )
                    raise
                logger.info(
                    "Version v%d of document %s was taken, refetching (attempt %d)",
                    exc.version_number,
                    document_id,
                    attempt,
                )
                current_max = await self._versions.max_version_number(document_id)

    async def restore_version(
        self,
        document_id: str,
        version: VersionRecord,
        current_version_number: int,
    ) -> VersionRecord:
        """Overwrite the live document with ``version`` and record the jump as a new version.

        The two writes are not atomic. If the live document is overwritten but
        the new version record cannot be created, RestoreIncompleteError is
        raised so the caller can report it and retry recording the version.
        """
        await self._documents.apply_fields(document_id, version.snapshot)
        try:
            restored = await self.save_version(
                document_id,
                version.snapshot,
                restore_note(version.version_number),
                current_max=current_version_number,
            )
        except Exception as exc:
            logger.exception(
                "Document %s restored to %s without a history entry",
                document_id,
                version.label,
            )
            raise RestoreIncompleteError(document_id, version.version_number) from exc
        logger.info(
            "Restored document %s to %s as %s", document_id, version.label, restored.label
        )
        return restored
