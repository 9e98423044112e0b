"""
Payload validation helpers.

Services accept either a DTO instance or a raw mapping; both paths end in a
validated DTO or a ValidationException, never a bare pydantic error.
"""

from typing import Any, Mapping, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from caseflow.core.exceptions import ValidationException

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_payload(model_cls: Type[ModelT], payload: Union[ModelT, Mapping[str, Any]]) -> ModelT:
    """Validate a payload against a DTO class."""
    if isinstance(payload, model_cls):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()
    try:
        return model_cls.model_validate(payload)
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationException(
            f"Invalid {model_cls.__name__} payload",
            {"errors": errors}
        ) from e


def require_text(value: str | None, field_name: str) -> str:
    """Return the stripped value or raise if it is empty."""
    if value is None or not value.strip():
        raise ValidationException(f"{field_name} must not be empty", {"field": field_name})
    return value.strip()
