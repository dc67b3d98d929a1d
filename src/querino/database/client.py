"""Cosmos DB connection owned by the app for its lifetime."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from azure.cosmos import PartitionKey
from azure.cosmos.aio import CosmosClient as AzureCosmosClient

from querino.database.repositories import DocumentRepository, VersionRepository

if TYPE_CHECKING:
    from azure.cosmos.aio import DatabaseProxy

    from querino.config import CosmosConfig

logger = logging.getLogger(__name__)

# Version uniqueness relies on ids being unique per /document_id partition.
CONTAINERS = {
    repository.container_name: repository.partition_key_path
    for repository in (DocumentRepository, VersionRepository)
}


class CosmosClient:
    """Wraps the async SDK client and the querino database handle."""

    def __init__(self, config: CosmosConfig) -> None:
        self._config = config
        self._client: AzureCosmosClient | None = None
        self._database: DatabaseProxy | None = None

    @property
    def is_initialized(self) -> bool:
        return self._database is not None

    async def initialize(self) -> None:
        """Open the SDK client; calling it again on an open client does nothing."""
        if self.is_initialized:
            return
        if not self._config.endpoint:
            raise ConnectionError("COSMOS_ENDPOINT is not set")
        self._client = AzureCosmosClient(self._config.endpoint, credential=self._config.key)
        self._database = self._client.get_database_client(self._config.database)
        logger.info(
            "Cosmos client ready: endpoint=%s database=%s",
            self._config.endpoint,
            self._config.database,
        )

    async def ensure_containers(self) -> None:
        """Create missing containers with the partition keys the repositories expect."""
        for name, path in CONTAINERS.items():
            await self.database.create_container_if_not_exists(
                id=name, partition_key=PartitionKey(path=path)
            )
            logger.info("Container %s ready (partition key %s)", name, path)

    async def close(self) -> None:
        if self._client is None:
            return
        await self._client.close()
        self._client = None
        self._database = None
        logger.info("Cosmos client closed")

    @property
    def database(self) -> DatabaseProxy:
        if self._database is None:
            raise RuntimeError("Cosmos client is closed; await initialize() before use")
        return self._database
