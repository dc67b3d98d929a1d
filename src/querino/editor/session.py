"""Editor session: one open document with autosave, change view and versions."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from querino.autosave.engine import DEFAULT_DELAY, AutosaveEngine, AutosaveStatus
from querino.diff.line_diff import LineDiff, compute_line_diff
from querino.errors import RestoreIncompleteError
from querino.models.document import EDITABLE_FIELDS

if TYPE_CHECKING:
    from querino.config import AutosaveConfig
    from querino.models.document import Document
    from querino.models.version import VersionRecord
    from querino.versions.service import DocumentStore, VersionHistoryService


class EditorSession:
    """Bind a loaded document to an autosave engine and its version history."""

    def __init__(
        self,
        document: Document,
        documents: DocumentStore,
        history: VersionHistoryService,
        *,
        config: AutosaveConfig | None = None,
    ) -> None:
        self._document_id = document.id
        self._documents = documents
        self._history = history
        self._versions: list[VersionRecord] = []
        self._engine: AutosaveEngine[dict[str, Any]] = AutosaveEngine(
            document.editable_fields(),
            self._persist,
            delay=config.delay if config else DEFAULT_DELAY,
            enabled=config.enabled if config else True,
        )

    @property
    def document_id(self) -> str:
        return self._document_id

    @property
    def engine(self) -> AutosaveEngine[dict[str, Any]]:
        return self._engine

    @property
    def status(self) -> AutosaveStatus:
        return self._engine.status

    @property
    def draft(self) -> dict[str, Any]:
        return self._engine.draft

    @property
    def versions(self) -> list[VersionRecord]:
        return list(self._versions)

    @property
    def current_version_number(self) -> int:
        return self._versions[0].version_number if self._versions else 0

    async def _persist(self, fields: dict[str, Any]) -> None:
        await self._documents.apply_fields(self._document_id, fields)

    def edit(self, **changes: Any) -> dict[str, Any]:
        """Apply field changes to a new draft and hand it to the autosave engine."""
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")
        draft = {**self._engine.draft, **changes}
        self._engine.notify_changed(draft)
        return draft

    def view_changes(self, field: str = "content") -> LineDiff | None:
        """Diff the last saved value of ``field`` against the draft, or None if unchanged."""
        baseline = self._engine.last_saved.get(field) or ""
        current = self._engine.draft.get(field) or ""
        if isinstance(baseline, list) or isinstance(current, list):
            baseline = "\n".join(baseline or [])
            current = "\n".join(current or [])
        if baseline == current:
            return None
        return compute_line_diff(baseline, current)

    async def load_versions(self) -> list[VersionRecord]:
        self._versions = await self._history.list_versions(self._document_id)
        return self.versions

    async def create_version_from_changes(self, change_notes: str | None = None) -> VersionRecord:
        """Persist the draft, then record it as the next version."""
        fields = copy.deepcopy(self._engine.draft)
        await self._engine.force_save(fields)
        record = await self._history.save_version(
            self._document_id,
            fields,
            change_notes,
            current_max=self.current_version_number,
        )
        await self.load_versions()
        return record

    async def restore(self, version: VersionRecord) -> VersionRecord:
        """Restore ``version`` and adopt its fields as the new saved baseline."""
        await self._engine.close()
        try:
            restored = await self._history.restore_version(
                self._document_id, version, self.current_version_number
            )
        except RestoreIncompleteError:
            # The live document already holds the restored fields.
            self._engine.reset_baseline(copy.deepcopy(version.snapshot))
            raise
        self._engine.reset_baseline(copy.deepcopy(version.snapshot))
        await self.load_versions()
        return restored

    async def close(self) -> None:
        """Flush unsaved edits and stop the autosave timer.

        The engine is closed even when the flush fails; the failure is re-raised.
        """
        try:
            await self._engine.flush()
        finally:
            await self._engine.close()
