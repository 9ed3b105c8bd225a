from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Self

from bson import ObjectId
from bson.errors import BSONError
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from mongodriver.core.connection import (
    ClientFactory,
    ensure_collection,
    ensure_database,
    open_client,
    redact_uri,
)
from mongodriver.core.result import (
    DeleteResult,
    Failure,
    InsertResult,
    Result,
    Success,
    UpdateResult,
    is_error_result,
    result_count,
)
from mongodriver.fields.base import parse_object_id
from mongodriver.lifecycle.observability import track_query
from mongodriver.utils.exceptions import InvalidArgument, NotFoundError
from mongodriver.utils.settings import DriverSettings
from mongodriver.utils.types import (
    DocumentData,
    FilterSpec,
    ProjectionSpec,
    SortSpec,
    UpdateSpec,
    resolve_sort,
)

logger = logging.getLogger("mongodriver")

# Faults raised by the driver that are reported as Failure instead of raised
DRIVER_FAULTS = (PyMongoError, BSONError)
# Argument checks pymongo performs itself before sending a command
CLIENT_REJECTIONS = (TypeError, ValueError)


@dataclass(frozen=True)
class Binding:
    """The database and collection that operations run against."""

    database: str
    collection: Optional[str] = None


class MongoDriver:
    """Thin async facade over one MongoDB collection at a time.

    Use :meth:`create` to build an instance: it checks that the database and
    collection exist. Each operation opens its own client, runs a single
    driver call and closes the client again. Server and driver faults come
    back as :class:`Failure`; bad arguments and missing databases or
    collections raise.

    Example:
        driver = await MongoDriver.create("mongodb://localhost:27017", "shop", "orders")
        result = await driver.find_many({"qty": {"$gt": 1}}, sort="-qty")
        if not driver.is_error_result(result):
            for order in result.value:
                ...
    """

    def __init__(
        self,
        connection_string: str,
        *,
        client_factory: ClientFactory | None = None,
        **client_options: Any,
    ) -> None:
        self._connection_string = connection_string
        self._client_factory = client_factory
        self._client_options = client_options
        self._binding = Binding(database="")
        logger.info(f">>> Driver created with connection string {redact_uri(connection_string)}")

    @classmethod
    async def create(
        cls,
        connection_string: str,
        database: str,
        collection: str | None = None,
        *,
        client_factory: ClientFactory | None = None,
        **client_options: Any,
    ) -> Self:
        """Create a driver bound to an existing database (and collection).

        Args:
            connection_string: MongoDB connection URI
            database: Name of an existing database
            collection: Name of an existing collection in that database
            client_factory: Callable building the client; defaults to AsyncMongoClient
            **client_options: Extra keyword arguments for the client

        Raises:
            NotFoundError: If the database or collection does not exist
            PyMongoError: If the server cannot be reached
        """
        driver = cls(connection_string, client_factory=client_factory, **client_options)
        await driver.select_database(database)
        if collection:
            await driver.select_collection(collection)

        logger.info(
            f">>> Database '{driver.database}' and collection '{driver.collection}' selected"
        )
        return driver

    @classmethod
    async def from_settings(
        cls, settings: DriverSettings, *, client_factory: ClientFactory | None = None
    ) -> Self:
        """Create a driver from a DriverSettings value."""
        return await cls.create(
            settings.uri,
            settings.database,
            settings.collection,
            client_factory=client_factory,
            **settings.client_options,
        )

    # --- Configuration ---

    @property
    def connection_string(self) -> str:
        return self._connection_string

    @property
    def binding(self) -> Binding:
        return self._binding

    @property
    def database(self) -> str:
        return self._binding.database

    @property
    def collection(self) -> str | None:
        return self._binding.collection

    async def select_database(self, name: str) -> None:
        """Bind to another database after checking that it exists.

        The collection name is kept. On failure the binding is unchanged.

        Raises:
            NotFoundError: If the database does not exist
        """
        async with self._client() as client:
            await ensure_database(client, name)
        self._binding = Binding(database=name, collection=self._binding.collection)

    async def select_collection(self, name: str) -> None:
        """Bind to another collection of the current database.

        Raises:
            NotFoundError: If the collection does not exist
        """
        binding = self._binding
        async with self._client() as client:
            await ensure_collection(client, binding.database, name)
        self._binding = Binding(database=binding.database, collection=name)

    async def list_collections(self) -> Result[list[str]]:
        """List the collection names of the bound database."""
        return await self._execute(
            "list_collections",
            lambda db: db.list_collection_names(),
            collection_scoped=False,
        )

    # --- Identifiers ---

    @staticmethod
    def object_id(text: str) -> ObjectId:
        """Parse the text form of an ObjectId.

        Raises:
            InvalidArgument: If the text is not a valid ObjectId
        """
        return parse_object_id(text)

    # --- Queries ---

    async def find_many(
        self,
        filter: FilterSpec | None = None,
        projection: ProjectionSpec | None = None,
        sort: str | SortSpec | dict[str, Any] | None = None,
        direction: int | str = ASCENDING,
    ) -> Result[list[DocumentData]]:
        """Return every document matching ``filter``.

        Args:
            filter: MongoDB filter; empty matches everything
            projection: Fields to include or exclude; empty returns all fields
            sort: Field name to sort on ('-' prefix for descending), or a
                list of (field, direction) pairs
            direction: Direction for a plain field name, 1/-1 or "asc"/"desc"
        """
        sort_spec = resolve_sort(sort, direction)

        async def call(collection):
            cursor = collection.find(filter or {}, projection or None)
            if sort_spec:
                cursor = cursor.sort(sort_spec)
            return await cursor.to_list()

        return await self._execute("find", call, filter=filter)

    async def find_one(
        self,
        filter: FilterSpec | None = None,
        projection: ProjectionSpec | None = None,
    ) -> Result[DocumentData | None]:
        """Return the first document matching ``filter``, or None."""
        return await self._execute(
            "find_one",
            lambda c: c.find_one(filter or {}, projection or None),
            filter=filter,
        )

    async def find_by_id(self, id_text: str) -> Result[DocumentData | None]:
        """Return the document whose _id matches ``id_text``.

        Deprecated: use ``find_one({"_id": driver.object_id(text)})``.

        Raises:
            InvalidArgument: If ``id_text`` is not a valid ObjectId
        """
        warnings.warn(
            "find_by_id() is deprecated; use find_one({'_id': object_id(text)})",
            DeprecationWarning,
            stacklevel=2,
        )
        return await self.find_one({"_id": self.object_id(id_text)})

    async def count(self, filter: FilterSpec | None = None) -> Result[int]:
        """Count documents matching ``filter``."""
        return await self._execute(
            "count", lambda c: c.count_documents(filter or {}), filter=filter
        )

    async def distinct(
        self, field: str, filter: FilterSpec | None = None
    ) -> Result[list[Any]]:
        """Return the distinct values of ``field`` among matching documents."""
        return await self._execute(
            "distinct", lambda c: c.distinct(field, filter or {}), filter=filter
        )

    # --- Writes ---

    async def insert(self, *documents: DocumentData) -> Result[InsertResult]:
        """Insert one or more documents.

        A single document goes through insert_one, several through
        insert_many. pymongo sets the generated _id on each document.

        Raises:
            InvalidArgument: If no document is given
        """
        if not documents:
            raise InvalidArgument("insert() requires at least one document")

        async def call(collection):
            if len(documents) == 1:
                result = await collection.insert_one(documents[0])
            else:
                result = await collection.insert_many(list(documents))
            return InsertResult.from_pymongo(result)

        return await self._execute("insert", call)

    async def update_one(
        self, filter: FilterSpec, update: UpdateSpec, upsert: bool = False
    ) -> Result[UpdateResult]:
        """Apply ``update`` to the first document matching ``filter``."""

        async def call(collection):
            result = await collection.update_one(filter, update, upsert=upsert)
            return UpdateResult.from_pymongo(result)

        return await self._execute("update_one", call, filter=filter, update=update)

    async def update_many(
        self, filter: FilterSpec, update: UpdateSpec, upsert: bool = False
    ) -> Result[UpdateResult]:
        """Apply ``update`` to every document matching ``filter``."""

        async def call(collection):
            result = await collection.update_many(filter, update, upsert=upsert)
            return UpdateResult.from_pymongo(result)

        return await self._execute("update_many", call, filter=filter, update=update)

    async def replace_one(
        self, filter: FilterSpec, replacement: DocumentData, upsert: bool = False
    ) -> Result[UpdateResult]:
        """Replace the first document matching ``filter``, keeping its _id."""

        async def call(collection):
            result = await collection.replace_one(filter, replacement, upsert=upsert)
            return UpdateResult.from_pymongo(result)

        return await self._execute("replace_one", call, filter=filter, update=replacement)

    async def delete_one(self, filter: FilterSpec) -> Result[DeleteResult]:
        """Delete the first document matching ``filter``."""

        async def call(collection):
            return DeleteResult.from_pymongo(await collection.delete_one(filter))

        return await self._execute("delete_one", call, filter=filter)

    async def delete_many(self, filter: FilterSpec) -> Result[DeleteResult]:
        """Delete every document matching ``filter``."""

        async def call(collection):
            return DeleteResult.from_pymongo(await collection.delete_many(filter))

        return await self._execute("delete_many", call, filter=filter)

    is_error_result = staticmethod(is_error_result)

    # --- Internal ---

    def _client(self):
        return open_client(
            self._connection_string, self._client_factory, **self._client_options
        )

    async def _execute(
        self,
        operation: str,
        call: Callable[[Any], Awaitable[Any]],
        *,
        filter: FilterSpec | None = None,
        update: UpdateSpec | None = None,
        collection_scoped: bool = True,
    ) -> Result[Any]:
        """Open a client, run ``call`` on the bound target and close the client.

        ``call`` receives the bound collection, or the bound database when
        ``collection_scoped`` is False. Driver faults, and arguments the driver
        rejects, become a Failure.
        """
        # Read once so a concurrent select_* cannot change the target mid-call
        binding = self._binding
        if collection_scoped and not binding.collection:
            raise NotFoundError("No collection selected. Call select_collection() first.")

        try:
            async with track_query(
                operation, binding.database, binding.collection, filter=filter, update=update
            ) as ctx:
                async with self._client() as client:
                    target = client[binding.database]
                    if collection_scoped:
                        target = target[binding.collection]
                    value = await call(target)
                ctx["result_count"] = result_count(value)
        except DRIVER_FAULTS + CLIENT_REJECTIONS as e:
            logger.error(f">>> Query {operation} failed: {e}")
            return Failure(str(e))

        logger.info(f">>> Query {operation} executed successfully")
        return Success(value)
