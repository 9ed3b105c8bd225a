from typing import Any, Mapping, Sequence

from pymongo import ASCENDING, DESCENDING

# Type aliases for better clarity
DocumentData = dict[str, Any]
FilterSpec = Mapping[str, Any]
ProjectionSpec = Mapping[str, Any]
UpdateSpec = Mapping[str, Any]
SortSpec = list[tuple[str, int]]

_DIRECTIONS = {
    "asc": ASCENDING,
    "ascending": ASCENDING,
    "desc": DESCENDING,
    "descending": DESCENDING,
}


def resolve_direction(direction: int | str) -> int:
    """Normalize 1/-1 or "asc"/"desc" into a pymongo sort direction."""
    if isinstance(direction, str):
        try:
            return _DIRECTIONS[direction.lower()]
        except KeyError:
            raise ValueError(f"Unknown sort direction: {direction!r}")
    if direction not in (ASCENDING, DESCENDING):
        raise ValueError(f"Unknown sort direction: {direction!r}")
    return direction


def resolve_sort(
    sort: str | Mapping[str, Any] | Sequence[tuple[str, Any]] | None,
    direction: int | str = ASCENDING,
) -> SortSpec:
    """Flatten a sort field (plus direction) into the list pymongo expects.

    A leading '-' on a field name means descending and overrides ``direction``.

    Examples:
        resolve_sort("name")               # [("name", 1)]
        resolve_sort("name", "desc")       # [("name", -1)]
        resolve_sort("-created_at")        # [("created_at", -1)]
        resolve_sort({"a": 1, "b": -1})    # [("a", 1), ("b", -1)]
    """
    if not sort:
        return []
    if isinstance(sort, str):
        if sort.startswith("-"):
            return [(sort[1:], DESCENDING)]
        return [(sort, resolve_direction(direction))]
    if isinstance(sort, Mapping):
        return [(field, resolve_direction(value)) for field, value in sort.items()]
    return [(field, resolve_direction(value)) for field, value in sort]
