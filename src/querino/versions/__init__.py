"""Version history service and the store protocols it depends on."""

from querino.versions.service import DocumentStore, VersionHistoryService, VersionStore

__all__ = ["DocumentStore", "VersionHistoryService", "VersionStore"]
