"""
Shared schema plumbing: camelCase wire format and the response envelope.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire; readable from ORM objects."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Envelope(BaseModel, Generic[DataT]):
    """Every response body: ``{success, message?, data?}``."""

    success: bool = True
    message: str | None = None
    data: DataT | None = None


class Pagination(CamelModel):
    current: int
    pages: int
    total: int
    limit: int
