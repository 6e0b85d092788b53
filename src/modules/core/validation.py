"""Boundary parsing shared by the inbound operations of every module.

Raw arguments are turned into pydantic DTOs here; pydantic failures become
the domain ``ValidationError`` carrying the first error, so callers only
ever see ``DomainError`` subclasses.
"""

from __future__ import annotations

from typing import Any, Type, TypeVar

import pydantic

from modules.core.exceptions import ValidationError

D = TypeVar("D", bound=pydantic.BaseModel)


def parse_dto(dto_class: Type[D], **data: Any) -> D:
    try:
        return dto_class(**data)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        message = f"{location}: {first['msg']}" if location else first["msg"]
        raise ValidationError(message) from exc
