"""Data contracts shared by both backends."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

SEARCH_PAGE_SIZE = 100  # GitHub search API maximum per_page


class ClientErrorDetail(BaseModel):
    """Detail of a single client error."""

    resource: str
    field: str
    code: str


class ClientErrorBody(BaseModel):
    """Returned by a backend when the request was rejected with a 4xx."""

    message: str
    errors: list[ClientErrorDetail] | None = None
    documentation_url: str | None = None


class SearchResults(BaseModel, Generic[T]):
    """One page of a search response."""

    incomplete_results: bool
    items: list[T]
