"""kuiper models - request definitions before and after resolution."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

Headers = dict[str, str | None]


@dataclass
class RequestDefinition:
    """A request file as loaded from disk, placeholders untouched."""

    name: str
    uri: str
    method: str
    headers: Headers = field(default_factory=dict)
    params: dict[str, str] = field(default_factory=dict)
    body: Any = None


@dataclass(frozen=True)
class ResolvedRequest:
    """A request with headers merged and every placeholder replaced.

    headers and params are read-only views. body is a deep copy owned by this
    request, so changing it never reaches the definition it came from; it is
    a plain JSON value and not itself read-only.
    """

    name: str
    uri: str
    method: str
    headers: MappingProxyType[str, str | None]
    params: MappingProxyType[str, str]
    body: Any = None

    @classmethod
    def from_definition(cls, definition: RequestDefinition) -> ResolvedRequest:
        return cls(
            name=definition.name,
            uri=definition.uri,
            method=definition.method,
            headers=MappingProxyType(dict(definition.headers)),
            params=MappingProxyType(dict(definition.params)),
            body=copy.deepcopy(definition.body),
        )

    def sendable_headers(self) -> dict[str, str]:
        """Headers with a value; null headers are never put on the wire."""
        return {k: v for k, v in self.headers.items() if v is not None}
