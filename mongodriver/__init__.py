from mongodriver.core import (
    MongoDriver,
    Binding,
    Success,
    Failure,
    Result,
    InsertResult,
    UpdateResult,
    DeleteResult,
    is_error_result,
)
from mongodriver.fields import PyObjectId, parse_object_id
from mongodriver.lifecycle import (
    enable_tracing,
    disable_tracing,
    QueryEvent,
    add_listener,
)
from mongodriver.utils import (
    MongoDriverError,
    NotFoundError,
    InvalidArgument,
    DriverSettings,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "MongoDriver",
    "Binding",
    "Success",
    "Failure",
    "Result",
    "InsertResult",
    "UpdateResult",
    "DeleteResult",
    "is_error_result",
    # Fields
    "PyObjectId",
    "parse_object_id",
    # Lifecycle
    "enable_tracing",
    "disable_tracing",
    "QueryEvent",
    "add_listener",
    # Utils
    "MongoDriverError",
    "NotFoundError",
    "InvalidArgument",
    "DriverSettings",
]
