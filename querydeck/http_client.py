import asyncio
import json
from collections.abc import Callable
from typing import Any
from urllib.parse import urlparse

import httpx

from .config import REQUEST_TIMEOUT
from .exceptions import EncodingError, TransportError
from .models import EndpointRecord, GraphQLResponse, QueryRequest

ClientFactory = Callable[[], httpx.AsyncClient]


def default_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=REQUEST_TIMEOUT)


def build_payload(request: QueryRequest) -> dict[str, Any]:
    payload: dict[str, Any] = {"query": request.query_text}
    if request.variables_text is not None:
        try:
            payload["variables"] = json.loads(request.variables_text)
        except json.JSONDecodeError as exc:
            raise EncodingError(f"Variables are not valid JSON: {exc}") from exc
    return payload


def encode_payload(request: QueryRequest) -> bytes:
    return json.dumps(build_payload(request), ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def build_request(endpoint: EndpointRecord, request: QueryRequest) -> httpx.Request:
    """Build the POST for an endpoint; raises EncodingError before anything is sent."""
    try:
        _validate_url(endpoint.url)
        body = encode_payload(request)
        headers = httpx.Headers({"Content-Type": "application/json"})
        headers.update(endpoint.headers())
        return httpx.Request("POST", endpoint.url, content=body, headers=headers)
    except EncodingError:
        raise
    except (ValueError, TypeError, httpx.InvalidURL) as exc:
        raise EncodingError(str(exc) or exc.__class__.__name__) from exc


async def perform_request(http_request: httpx.Request, client_factory: ClientFactory | None = None) -> GraphQLResponse:
    factory = client_factory or default_client
    loop = asyncio.get_running_loop()
    start = loop.time()
    try:
        async with factory() as client:
            resp = await client.send(http_request)
    except (httpx.HTTPError, OSError) as exc:
        raise TransportError(str(exc) or exc.__class__.__name__) from exc
    elapsed = (loop.time() - start) * 1000
    return GraphQLResponse(status=resp.status_code, text=resp.text or "", duration_ms=elapsed)


def _validate_url(endpoint: str) -> None:
    parsed = urlparse(endpoint)
    if parsed.scheme not in {"http", "https"}:
        raise ValueError(f"Unsupported URL scheme: {parsed.scheme or 'missing'}")
    if not parsed.netloc:
        raise ValueError("Missing host in URL.")
