from typing import Annotated, Any, Dict, Iterable

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel

# Stripped, non-empty text
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire (both accepted on input)"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def reject_explicit_nulls(data: Dict[str, Any], fields: Iterable[str]) -> None:
    """Partial updates may omit these fields but never null them"""
    for name in fields:
        alias = to_camel(name)
        for key in (name, alias):
            if key in data and data[key] is None:
                raise ValueError(f"{alias} cannot be null")


class MessageResponse(BaseModel):
    message: str
