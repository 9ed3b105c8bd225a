from __future__ import annotations

import logging
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable

from pymongo import AsyncMongoClient

from mongodriver.utils.exceptions import NotFoundError

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]

_CREDENTIALS = re.compile(r"://([^:/@]+):([^@]*)@")


def redact_uri(uri: str) -> str:
    """Mask the password of a MongoDB URI for logging."""
    return _CREDENTIALS.sub(r"://\1:***@", uri)


@asynccontextmanager
async def open_client(
    uri: str, factory: ClientFactory | None = None, **options: Any
) -> AsyncIterator[AsyncMongoClient]:
    """Open a client for the duration of one operation.

    The client is closed on every exit path, including failed connects.

    Args:
        uri: MongoDB connection URI
        factory: Callable building the client; defaults to AsyncMongoClient
        **options: Extra keyword arguments passed to the factory

    Yields:
        A connected client
    """
    factory = factory or AsyncMongoClient
    client = factory(uri, **options)
    try:
        await client.aconnect()
        logger.debug(f"Opened client for {redact_uri(uri)}")
        yield client
    finally:
        await client.close()
        logger.debug(f"Closed client for {redact_uri(uri)}")


async def ensure_database(client: Any, name: str) -> None:
    """Raise NotFoundError unless the server lists a database called ``name``.

    Raises:
        NotFoundError: If the database does not exist
    """
    names = await client.list_database_names()
    if name not in names:
        raise NotFoundError(f"Database '{name}' does not exist")


async def ensure_collection(client: Any, database: str, name: str) -> None:
    """Raise NotFoundError unless ``database`` holds a collection called ``name``.

    Raises:
        NotFoundError: If the collection does not exist
    """
    names = await client[database].list_collection_names()
    if name not in names:
        raise NotFoundError(
            f"Collection '{name}' does not exist in database '{database}'"
        )
