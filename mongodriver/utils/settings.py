"""Configuration for building a MongoDriver from code or the environment."""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_URI = "mongodb://localhost:27017"

_DB_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def extract_db_name(uri: str) -> str | None:
    """Extract the database name from the path of a MongoDB URI.

    Args:
        uri: MongoDB connection URI

    Returns:
        Database name, or None if the URI carries no path
    """
    # Remove query string and scheme
    path = uri.split("?")[0].split("://", 1)[-1]
    if "/" not in path:
        return None
    db_name = path.rsplit("/", 1)[-1]
    return db_name or None


class DriverSettings(BaseModel):
    """Connection string plus the database/collection to bind on startup."""

    model_config = {"frozen": True}

    uri: str = DEFAULT_URI
    database: str
    collection: Optional[str] = None
    client_options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("uri")
    @classmethod
    def _check_uri(cls, value: str) -> str:
        if not value:
            raise ValueError("MongoDB URI cannot be empty")
        return value

    @field_validator("database")
    @classmethod
    def _check_database(cls, value: str) -> str:
        # MongoDB naming rules
        if not _DB_NAME_PATTERN.match(value):
            raise ValueError(
                f"Invalid database name '{value}'. "
                f"Database names can only contain letters, numbers, underscores, and hyphens."
            )
        return value

    @field_validator("collection")
    @classmethod
    def _check_collection(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and (not value or "$" in value):
            raise ValueError(f"Invalid collection name '{value}'")
        return value

    @classmethod
    def from_env(cls, prefix: str = "MONGODRIVER_", **overrides: Any) -> DriverSettings:
        """Build settings from environment variables.

        Reads ``{prefix}URI`` (falling back to ``MONGO_URL``), ``{prefix}DATABASE``
        and ``{prefix}COLLECTION``. When no database variable is set, the
        database name is taken from the URI path. Keyword overrides win.
        """
        uri = os.environ.get(f"{prefix}URI") or os.environ.get("MONGO_URL") or DEFAULT_URI
        values: dict[str, Any] = {"uri": uri}

        database = os.environ.get(f"{prefix}DATABASE") or extract_db_name(uri)
        if database:
            values["database"] = database
        collection = os.environ.get(f"{prefix}COLLECTION")
        if collection:
            values["collection"] = collection

        values.update(overrides)
        logger.debug(f"Loaded driver settings from environment (prefix '{prefix}')")
        return cls(**values)
