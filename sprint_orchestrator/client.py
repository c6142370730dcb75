"""Shared scaffolding for the GitHub and ZenHub REST clients."""

import logging
from typing import Any

import httpx

from .errors import TransportError
from .request import RequestSigner, client_identity
from .response import classify

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class BaseClient:
    """Signs, dispatches and classifies requests against one backend.

    One instance owns one ``httpx.Client``; use it from one thread at a time.
    """

    accept = "application/json"

    def __init__(self, url: str, token: str, timeout: float = DEFAULT_TIMEOUT):
        self._signer = RequestSigner(url, token, headers={"Accept": self.accept})
        self._id = client_identity(url, token)
        self._client = httpx.Client(timeout=timeout)

    @property
    def id(self) -> str:
        return self._id

    @property
    def base_url(self) -> httpx.URL:
        return self._signer.base_url

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._id})"

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self._id == other._id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._id))

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self._client.close()

    def _send(
        self,
        method: str,
        *segments: str | int,
        schema: Any = None,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> Any:
        """Issue one request and return its decoded success body.

        Args:
            method: HTTP method
            *segments: Path segments relative to the base URL
            schema: Expected success type, or None when the body is ignored
            params: Query parameters, already stripped of absent values
            json: JSON payload

        Raises:
            TransportError, DeserializationError, BackendClientError,
            UnexpectedStatusError
        """
        request = self._signer.sign(method, *segments)
        kwargs: dict[str, Any] = {"headers": dict(request.headers)}
        if params:
            kwargs["params"] = params
        if json is not None:
            kwargs["json"] = json
        try:
            response = self._client.request(request.method, str(request.url), **kwargs)
        except httpx.TransportError as exc:
            logger.debug("%s %s failed: %s", request.method, request.url, exc)
            raise TransportError(f"{request.method} {request.url} failed: {exc}") from exc
        return classify(response, schema)
