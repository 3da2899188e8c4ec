from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from mediavault.exceptions import InvalidInputError

M = TypeVar("M", bound=BaseModel)


class CamelModel(BaseModel):
    """Snake_case in Python and Mongo, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


def field_errors(exc: ValidationError) -> list[dict[str, Any]]:
    errors: list[dict[str, Any]] = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "form")]
        errors.append(
            {
                "field": ".".join(loc) or None,
                "message": err.get("msg"),
                "value": err.get("input") if _is_plain(err.get("input")) else None,
            }
        )
    return errors


def _is_plain(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


def parse_model(model: type[M], data: Any) -> M:
    """Validate ``data`` into ``model``, reporting failures as InvalidInputError."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidInputError("Validation failed", errors=field_errors(exc)) from exc
