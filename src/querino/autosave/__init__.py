"""Autosave engine and the structural equality it relies on."""

from querino.autosave.engine import DEFAULT_DELAY, AutosaveEngine, AutosaveStatus
from querino.autosave.equality import deep_equal

__all__ = ["DEFAULT_DELAY", "AutosaveEngine", "AutosaveStatus", "deep_equal"]
