"""Tri-state fields for PATCH-style payloads.

Each field of an update is in exactly one of three states:

* ``UNSET``: the caller did not touch it; the key is left out of the payload
  so the backend keeps its current value.
* ``CLEAR``: the caller wants the value removed; the key is sent as ``null``.
* any other value: sent, converted to its JSON form.
"""

import enum
from dataclasses import dataclass, fields
from typing import Any

from pydantic_core import to_jsonable_python


class Marker(enum.Enum):
    UNSET = "unset"
    CLEAR = "clear"

    def __repr__(self) -> str:
        return self.name

    def __bool__(self) -> bool:
        return False


UNSET = Marker.UNSET
CLEAR = Marker.CLEAR


@dataclass
class Update:
    """Base for update requests; subclasses declare fields defaulting to UNSET."""

    def to_payload(self) -> dict[str, Any]:
        payload = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is UNSET:
                continue
            if value is CLEAR:
                payload[f.name] = None
            elif value is None:
                raise ValueError(f"{f.name} is None; use UNSET to skip it or CLEAR to remove it")
            else:
                payload[f.name] = to_jsonable_python(value)
        return payload

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is UNSET for f in fields(self))


def query_params(**params: Any) -> dict[str, str]:
    """Build query parameters, leaving out every parameter that is None."""
    out = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, enum.Enum):
            value = value.value
        out[key] = str(value)
    return out
