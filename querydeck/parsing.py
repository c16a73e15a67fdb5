import json
from collections.abc import Iterable

from .models import EndpointRecord


def parse_variables(raw: str) -> dict:
    """Decode the variables editor; blank text means no variables."""
    raw = raw.strip()
    if not raw:
        return {}
    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        raise ValueError(f"expected an object, got {type(parsed).__name__}")
    return parsed


def parse_header_flags(lines: Iterable[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for line in lines:
        name, sep, value = line.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"Invalid header line: {line!r}")
        headers[name.strip()] = value.strip()
    return headers


def endpoints_from_args(urls: Iterable[str], header_lines: Iterable[str]) -> list[EndpointRecord]:
    """Endpoint records for ``--endpoint`` flags, sharing the ``--header`` flags."""
    headers = parse_header_flags(header_lines)
    options = {"headers": headers} if headers else {}
    return [EndpointRecord(url=url, options=dict(options)) for url in urls]
