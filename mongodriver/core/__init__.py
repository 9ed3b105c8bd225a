from mongodriver.core.driver import MongoDriver, Binding
from mongodriver.core.result import (
    Success,
    Failure,
    Result,
    InsertResult,
    UpdateResult,
    DeleteResult,
    is_error_result,
)
from mongodriver.core.connection import open_client

__all__ = [
    "MongoDriver",
    "Binding",
    "Success",
    "Failure",
    "Result",
    "InsertResult",
    "UpdateResult",
    "DeleteResult",
    "is_error_result",
    "open_client",
]
