from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any, Optional

from bson import ObjectId
from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.responses import Response

from mongodriver.core.connection import ClientFactory
from mongodriver.core.driver import MongoDriver
from mongodriver.core.result import InsertResult, is_error_result
from mongodriver.fields.base import PyObjectId
from mongodriver.utils.exceptions import InvalidArgument, MongoDriverError, NotFoundError

DEFAULT_ERROR_MESSAGE = "Internal server error while querying the database"
ERROR_STATUS_CODE = 500


class ObjectIDJSONResponse(JSONResponse):
    """Custom JSONResponse that serializes ObjectId to string.

    This allows FastAPI endpoints to return raw MongoDB documents
    without serialization errors.
    """

    def render(self, content: Any) -> bytes:
        """Render content to JSON, handling ObjectId serialization."""
        def default_handler(obj: Any) -> Any:
            if isinstance(obj, ObjectId):
                return str(obj)
            raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

        return json.dumps(content, default=default_handler, separators=(",", ":")).encode("utf-8")


class InsertResponse(BaseModel):
    """Response schema for an insert; ids are sent as hex strings."""

    inserted_ids: list[PyObjectId]
    inserted_count: int

    @classmethod
    def from_result(cls, result: InsertResult) -> InsertResponse:
        return cls(inserted_ids=result.inserted_ids, inserted_count=result.inserted_count)


def respond_on_error(value: Any, response: Response, message: Optional[str] = None) -> bool:
    """Check a result and, on failure, write a 500 error into ``response``.

    Args:
        value: Result returned by a MongoDriver operation
        response: Response to write to (e.g. the one FastAPI injects)
        message: Error detail sent to the client; a generic message by default

    Returns:
        True if ``value`` was a failure and the response was written

    Example:
        @app.get("/orders")
        async def orders(response: Response, driver: MongoDriver = Depends(get_driver)):
            result = await driver.find_many()
            if respond_on_error(result, response, "Could not load orders"):
                return response
            return result.value
    """
    if not is_error_result(value):
        return False

    rendered = ObjectIDJSONResponse(
        content={"detail": message if message is not None else DEFAULT_ERROR_MESSAGE},
        status_code=ERROR_STATUS_CODE,
    )
    response.status_code = rendered.status_code
    response.body = rendered.body
    # Keep headers the endpoint already set, replace the body-related ones
    kept = [
        (key, val)
        for key, val in response.raw_headers
        if key not in (b"content-length", b"content-type")
    ]
    response.raw_headers[:] = kept + rendered.raw_headers
    return True


def init_app(
    app: Any,
    uri: str,
    database: str,
    collection: str | None = None,
    *,
    client_factory: ClientFactory | None = None,
    **client_options: Any,
) -> Any:
    """Initialize a FastAPI app with a MongoDriver.

    Sets up:
    - A MongoDriver created in the app lifespan, stored on ``app.state.driver``
    - Custom JSON encoder for ObjectId serialization

    Args:
        app: FastAPI application instance
        uri: MongoDB connection URI
        database: Database to bind
        collection: Collection to bind
        client_factory: Callable building the client; defaults to AsyncMongoClient
    """
    # Set custom JSONResponse to handle ObjectId serialization
    app.default_response_class = ObjectIDJSONResponse
    app.router.default_response_class = ObjectIDJSONResponse

    original_lifespan = getattr(app, "router", app).lifespan_context

    @asynccontextmanager
    async def lifespan(a: Any):
        a.state.driver = await MongoDriver.create(
            uri, database, collection, client_factory=client_factory, **client_options
        )
        if original_lifespan is not None:
            async with original_lifespan(a) as state:
                yield state
        else:
            yield

    app.router.lifespan_context = lifespan
    return app


def get_driver(request: Request) -> MongoDriver:
    """FastAPI dependency returning the driver created by init_app."""
    return request.app.state.driver


def register_exception_handlers(app: Any) -> None:
    """Register mongodriver exception handlers on a FastAPI app."""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Any, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(InvalidArgument)
    async def invalid_argument_handler(request: Any, exc: InvalidArgument):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(MongoDriverError)
    async def driver_error_handler(request: Any, exc: MongoDriverError):
        return JSONResponse(status_code=500, content={"detail": str(exc)})
