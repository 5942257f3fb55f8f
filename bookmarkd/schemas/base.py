"""Input validation entry point shared by the services."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from bookmarkd.exceptions import InvalidInput

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_input(schema: type[SchemaT], **data: Any) -> SchemaT:
    """Validate raw arguments, raising ``InvalidInput`` with per-field messages."""
    try:
        return schema(**data)
    except ValidationError as exc:
        fields = {
            ".".join(str(part) for part in error["loc"]) or "input": error["msg"]
            for error in exc.errors()
        }
        first = next(iter(fields.items()))
        raise InvalidInput(f"Invalid {first[0]}: {first[1]}", {"fields": fields}) from exc
