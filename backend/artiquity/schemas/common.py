"""Shared Schema Base — camelCase wire format for every wizard-facing payload.

Invariants:
    - Field names are snake_case in Python and camelCase on the wire
    - Both spellings are accepted on input (populate_by_name)
    - NonBlank strings are stripped and rejected when empty

Design Decisions:
    - alias_generator over per-field aliases: one rule for every model, no drift
      between a field and its alias
"""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("cannot be empty or whitespace")
    return v


NonBlank = Annotated[str, AfterValidator(_strip_required)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def of(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=-(-total // limit))
