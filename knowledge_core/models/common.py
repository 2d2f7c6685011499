"""
Shared helpers for input schemas.

Dependencies: pydantic
System role: Translate schema failures into the library's ValidationError
"""

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from knowledge_core.core.exceptions import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def parse_schema(schema: type[SchemaT], data: Any) -> SchemaT:
    """
    Validate data against a schema.

    Args:
        schema: Pydantic model class
        data: Model instance or mapping of field values

    Returns:
        Validated schema instance

    Raises:
        ValidationError: Naming the first offending field
    """
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or schema.__name__
        raise ValidationError(
            f"{field}: {first['msg']}",
            field=field,
            details={"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc
