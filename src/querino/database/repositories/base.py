"""Generic repository over a single Cosmos DB container."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar, cast

from azure.cosmos.exceptions import CosmosResourceNotFoundError

from querino.models.base import DocumentBase

if TYPE_CHECKING:
    from azure.cosmos.aio import ContainerProxy, DatabaseProxy

ModelT = TypeVar("ModelT", bound=DocumentBase)


class BaseRepository(Generic[ModelT]):
    """CRUD helpers shared by every container repository."""

    container_name: ClassVar[str]
    partition_key_path: ClassVar[str]
    model_class: type[ModelT]

    def __init__(self, database: DatabaseProxy) -> None:
        self._container: ContainerProxy = database.get_container_client(self.container_name)

    def _to_body(self, item: ModelT) -> dict[str, Any]:
        return item.model_dump(mode="json")

    async def create(self, item: ModelT) -> ModelT:
        await self._container.create_item(body=self._to_body(item))
        return item

    async def get(self, item_id: str, partition_key: str) -> ModelT | None:
        """Fetch a live item by id, or None when missing or soft-deleted."""
        try:
            data = cast(
                "dict[str, Any]",
                await self._container.read_item(item=item_id, partition_key=partition_key),
            )
        except CosmosResourceNotFoundError:
            return None
        if data.get("deleted_at") is not None:
            return None
        return self.model_class.model_validate(data)

    async def update(self, item: ModelT, partition_key: str) -> ModelT:
        item.touch()
        await self._container.replace_item(item=item.id, body=self._to_body(item))
        return item

    async def soft_delete(self, item: ModelT, partition_key: str) -> None:
        item.deleted_at = datetime.now(UTC)
        await self.update(item, partition_key)

    async def query(
        self,
        sql: str,
        parameters: list[dict[str, Any]] | None = None,
        *,
        partition_key: str | None = None,
    ) -> list[ModelT]:
        kwargs: dict[str, Any] = {"parameters": parameters or []}
        if partition_key is not None:
            kwargs["partition_key"] = partition_key
        items = self._container.query_items(sql, **kwargs)
        return [
            self.model_class.model_validate(cast("dict[str, Any]", item)) async for item in items
        ]
