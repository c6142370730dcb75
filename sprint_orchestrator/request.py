"""Request signing: authorization headers and base URL composition."""

import hashlib
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

import httpx

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")


def client_identity(url: str, token: str) -> str:
    """Fingerprint a (base URL, token) pair for log correlation and equality."""
    raw = f"{url}|{token}"
    return hashlib.sha256(raw.encode()).hexdigest()[:16]


def _is_header_value(value: str) -> bool:
    # Visible ASCII plus space and tab; everything else is rejected by httpx on send.
    return all(ch == "\t" or " " <= ch <= "~" for ch in value)


def _parse_base_url(base_url: str) -> httpx.URL:
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ConfigurationError(f"Invalid base url {base_url}") from exc
    # A query or fragment would be dropped by the first join.
    if url.scheme not in ALLOWED_SCHEMES or not url.host or url.query or url.fragment:
        raise ConfigurationError(f"Invalid base url {base_url}")
    if not url.path.endswith("/"):
        url = url.copy_with(path=url.path + "/")
    return url


def _check_segment(segment: str) -> None:
    """Reject anything that is not a plain relative path reference."""
    if not segment:
        raise ConfigurationError("Empty path segment")
    if any(ch < " " or ch == "\x7f" for ch in segment):
        raise ConfigurationError(f"Invalid characters in path segment {segment!r}")
    if segment.startswith("/"):
        raise ConfigurationError(f"Path segment {segment!r} is not a valid relative reference")
    if "?" in segment or "#" in segment:
        raise ConfigurationError(f"Path segment {segment!r} must not carry a query or fragment")
    if any(part in (".", "..", "") for part in segment.split("/")):
        raise ConfigurationError(f"Path segment {segment!r} is not a valid relative reference")
    try:
        parsed = httpx.URL(segment)
    except httpx.InvalidURL as exc:
        raise ConfigurationError(f"Path segment {segment!r} is not a valid relative reference") from exc
    if parsed.scheme or parsed.host:
        raise ConfigurationError(f"Path segment {segment!r} is not a valid relative reference")


def join_url(base: httpx.URL, *segments: str | int) -> httpx.URL:
    """Join path segments onto a base URL, strictly left to right.

    Every intermediate result is treated as a directory, so ``join_url(base,
    "repos", "o", "r")`` yields ``<base>/repos/o/r`` without losing any base
    path or doubling separators.
    """
    url = base
    for raw in segments:
        segment = str(raw)
        _check_segment(segment)
        if not url.path.endswith("/"):
            url = url.copy_with(path=url.path + "/")
        url = url.join(segment)
    return url


@dataclass(frozen=True)
class AuthenticatedRequest:
    """A method, a resolved URL and the headers sent with it."""

    method: str
    url: httpx.URL
    headers: Mapping[str, str]


class RequestSigner:
    """Builds authenticated requests against one base URL."""

    def __init__(self, base_url: str, token: str, headers: Mapping[str, str] | None = None):
        if not _is_header_value(token):
            raise ConfigurationError("Invalid token for Authorization header.")
        self.base_url = _parse_base_url(base_url)
        merged = dict(headers or {})
        for name, value in merged.items():
            if not _is_header_value(value):
                raise ConfigurationError(f"Invalid value for {name} header.")
        merged["Authorization"] = f"token {token}"
        self._headers = MappingProxyType(merged)

    def url(self, *segments: str | int) -> httpx.URL:
        return join_url(self.base_url, *segments)

    def sign(self, method: str, *segments: str | int) -> AuthenticatedRequest:
        """Resolve ``segments`` against the base URL and attach auth headers."""
        url = self.url(*segments)
        method = method.upper()
        logger.debug("%s %s", method, url)
        return AuthenticatedRequest(method=method, url=url, headers=self._headers)
