"""Classify HTTP responses into typed values or typed errors."""

from functools import lru_cache
from typing import Any

import httpx
from pydantic import TypeAdapter

from .errors import BackendClientError, DeserializationError, UnexpectedStatusError
from .models import ClientErrorBody


@lru_cache(maxsize=None)
def _adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def decode(content: bytes, schema: Any, status: int | None = None) -> Any:
    """Decode a JSON body as ``schema`` or raise DeserializationError."""
    try:
        return _adapter(schema).validate_json(content)
    except ValueError as exc:  # pydantic.ValidationError included
        raise DeserializationError(
            f"Response body did not match {getattr(schema, '__name__', schema)}: {exc}",
            status=status,
        ) from exc


def classify(response: httpx.Response, schema: Any = None) -> Any:
    """Return the decoded success value of ``response``, or raise.

    ``schema`` is any type pydantic can validate (a model, ``list[Model]``...).
    ``None`` means the endpoint has no meaningful success body.
    """
    status = response.status_code
    if 200 <= status < 300:
        if schema is None:
            return None
        return decode(response.content, schema, status)
    if 400 <= status < 500:
        body = decode(response.content, ClientErrorBody, status)
        raise BackendClientError(status, body)
    raise UnexpectedStatusError(status)
