"""Querino document drafts: autosave, line diffs and version history."""

__version__ = "0.1.0"
