"""Repository modules for each Cosmos DB container."""

from querino.database.repositories.documents import DocumentRepository
from querino.database.repositories.versions import VersionRepository

__all__ = [
    "DocumentRepository",
    "VersionRepository",
]
