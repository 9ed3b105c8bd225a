from __future__ import annotations

from typing import Any

from bson import ObjectId
from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import CoreSchema, core_schema

from mongodriver.utils.exceptions import InvalidArgument


def parse_object_id(text: str) -> ObjectId:
    """Parse the 24-hex-digit text form of an ObjectId.

    Raises:
        InvalidArgument: If the text is not a valid ObjectId
    """
    if not ObjectId.is_valid(text):
        raise InvalidArgument(f"Invalid ObjectId: {text!r}")
    return ObjectId(text)


OBJECT_ID_PATTERN = "^[0-9a-fA-F]{24}$"


class PyObjectId(ObjectId):
    """ObjectId field type for pydantic models.

    Takes an ObjectId or its hex text; JSON input must be text. Dumps to the
    hex string in JSON mode and in the generated JSON schema.
    """

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> CoreSchema:
        from_text = core_schema.no_info_after_validator_function(
            parse_object_id, core_schema.str_schema()
        )
        return core_schema.json_or_python_schema(
            json_schema=from_text,
            python_schema=core_schema.union_schema(
                [core_schema.is_instance_schema(ObjectId), from_text]
            ),
            serialization=core_schema.to_string_ser_schema(when_used="json"),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        return {"type": "string", "pattern": OBJECT_ID_PATTERN}

