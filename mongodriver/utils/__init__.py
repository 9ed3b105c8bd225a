from mongodriver.utils.exceptions import (
    MongoDriverError,
    NotFoundError,
    InvalidArgument,
)
from mongodriver.utils.settings import DriverSettings, extract_db_name
from mongodriver.utils.types import (
    DocumentData,
    FilterSpec,
    ProjectionSpec,
    UpdateSpec,
    SortSpec,
    resolve_sort,
    resolve_direction,
)

__all__ = [
    "MongoDriverError",
    "NotFoundError",
    "InvalidArgument",
    "DriverSettings",
    "extract_db_name",
    "DocumentData",
    "FilterSpec",
    "ProjectionSpec",
    "UpdateSpec",
    "SortSpec",
    "resolve_sort",
    "resolve_direction",
]
