"""Result envelope returned by every data operation of MongoDriver.

Data operations never raise for server or driver faults. They return either
``Success(value)`` or ``Failure(error)`` and callers branch on the variant:

    result = await driver.count({"item": "pen"})
    if is_error_result(result):
        log.warning(result.error)
    else:
        print(result.value)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Mapping, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome carrying the operation's payload."""

    value: T


@dataclass(frozen=True)
class Failure:
    """Failed outcome carrying the driver's error message."""

    error: str


Result = Union[Success[T], Failure]


def is_error_result(value: Any) -> bool:
    """Return True if ``value`` is the failure branch of a result.

    Accepts ``Failure`` instances and plain mappings carrying a non-None
    ``"error"`` entry. None, primitives and success payloads are not errors.
    """
    if isinstance(value, Failure):
        return True
    if isinstance(value, Mapping):
        return value.get("error") is not None
    return False


@dataclass(frozen=True)
class InsertResult:
    """Outcome of inserting one or more documents."""

    acknowledged: bool
    inserted_ids: list[Any] = field(default_factory=list)

    @property
    def inserted_count(self) -> int:
        return len(self.inserted_ids)

    @property
    def inserted_id(self) -> Any:
        """The first inserted id, or None when nothing was inserted."""
        return self.inserted_ids[0] if self.inserted_ids else None

    @classmethod
    def from_pymongo(cls, result: Any) -> InsertResult:
        # InsertOneResult exposes inserted_id, InsertManyResult inserted_ids
        if hasattr(result, "inserted_ids"):
            ids = list(result.inserted_ids)
        else:
            ids = [result.inserted_id]
        return cls(acknowledged=result.acknowledged, inserted_ids=ids)


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of an update or replace."""

    acknowledged: bool
    matched_count: int = 0
    modified_count: int = 0
    upserted_count: int = 0
    upserted_id: Any = None

    @classmethod
    def from_pymongo(cls, result: Any) -> UpdateResult:
        # Counts are unavailable on unacknowledged writes
        if not result.acknowledged:
            return cls(acknowledged=False)
        return cls(
            acknowledged=True,
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_count=1 if result.did_upsert else 0,
            upserted_id=result.upserted_id,
        )


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a delete."""

    acknowledged: bool
    deleted_count: int = 0

    @classmethod
    def from_pymongo(cls, result: Any) -> DeleteResult:
        if not result.acknowledged:
            return cls(acknowledged=False)
        return cls(acknowledged=True, deleted_count=result.deleted_count)


def result_count(value: Any) -> int | None:
    """Best-effort count of what an operation returned, for tracing."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, list):
        return len(value)
    if isinstance(value, InsertResult):
        return value.inserted_count
    if isinstance(value, UpdateResult):
        return value.modified_count + value.upserted_count
    if isinstance(value, DeleteResult):
        return value.deleted_count
    return None
