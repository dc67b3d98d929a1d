"""Editing session glue between autosave, diffs and version history."""

from querino.editor.session import EditorSession

__all__ = ["EditorSession"]
