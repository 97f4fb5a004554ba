"""Common schemas for the API."""

import typing as t

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

StrippedString = t.Annotated[str, StringConstraints(strip_whitespace=True)]
NameString = t.Annotated[str, StringConstraints(strip_whitespace=True, min_length=2)]

T = t.TypeVar("T")


class Schema(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_payload(self) -> dict[str, t.Any]:
        """Serialize for a request body, dropping unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class FieldError(Schema):
    field: str
    message: str


class ApiResponse(Schema, t.Generic[T]):
    """The envelope every endpoint answers with."""

    success: bool = True
    message: str | None = None
    data: T | None = None
    status: t.Literal["fail", "error"] | None = None
    errors: list[FieldError] = Field(default_factory=list)


class Pagination(Schema):
    page: int = 1
    limit: int = 10
    total: int = 0
    pages: int = 0
    has_next: bool = False
    has_prev: bool = False


class ResponseOk(Schema):
    success: bool = True
    message: str | None = None


def query_params(filters: Schema | dict[str, t.Any] | None) -> dict[str, t.Any] | None:
    """Turn a filter model or dict into query parameters, dropping empty values."""
    if filters is None:
        return None
    raw = filters.to_payload() if isinstance(filters, Schema) else filters
    return {key: value for key, value in raw.items() if value is not None} or None
