from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .exceptions import EncodingError, TransportError


@dataclass(frozen=True)
class EndpointRecord:
    url: str
    options: Mapping[str, Any] = field(default_factory=dict)
    name: str | None = None

    @property
    def label(self) -> str:
        return self.name or self.url

    def headers(self) -> dict[str, str]:
        """Configured headers with every value stringified."""
        raw = self.options.get("headers") if self.options else None
        if not isinstance(raw, Mapping):
            return {}
        return {str(key): str(value) for key, value in raw.items()}


@dataclass(frozen=True)
class QueryRequest:
    query_text: str
    variables_text: str | None = None


@dataclass(frozen=True)
class QuerySuccess:
    raw_body: str
    elapsed_ms: float
    error_count: int | None = None


@dataclass(frozen=True)
class QueryFailure:
    reason: EncodingError | TransportError


QueryOutcome = QuerySuccess | QueryFailure


@dataclass(frozen=True)
class GraphQLResponse:
    status: int
    text: str
    duration_ms: float


@dataclass(frozen=True)
class QueryResult:
    source: str
    endpoint_url: str
    raw_body: str
    elapsed_ms: float
    size_bytes: int
    error_count: int | None = None


@dataclass
class ServiceConfiguration:
    command: tuple[str, ...]
    cwd: str | None = None
    env: dict[str, str] | None = None
