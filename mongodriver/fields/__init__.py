from mongodriver.fields.base import PyObjectId, parse_object_id

__all__ = [
    "PyObjectId",
    "parse_object_id",
]
