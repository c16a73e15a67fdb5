"""Summaries of query responses: error counts, sizes and the result line."""

from __future__ import annotations

import json
from decimal import ROUND_HALF_UP, Decimal

from .models import QueryResult

SIZE_SYMBOLS = "kMGTPE"


def count_errors(raw_body: str) -> int | None:
    """Length of the top-level ``errors`` list, 0 without one, None when unknown."""
    try:
        parsed = json.loads(raw_body)
    except (TypeError, ValueError, RecursionError):
        return None
    if not isinstance(parsed, dict):
        return None
    if "errors" not in parsed:
        return 0
    errors = parsed["errors"]
    if isinstance(errors, list):
        return len(errors)
    return None


def format_size(size: int) -> str:
    if size < 1000:
        return f"{size} bytes"
    exp = 0
    while exp < len(SIZE_SYMBOLS) and size >= 1000 ** (exp + 1):
        exp += 1
    value = (Decimal(size) / Decimal(1000**exp)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{value} {SIZE_SYMBOLS[exp - 1]}b"


def describe(result: QueryResult) -> str:
    text = (
        f"{result.source}: {result.elapsed_ms:.0f} ms execution time, "
        f"{format_size(result.size_bytes)} response"
    )
    count = result.error_count
    if count:
        text += f", {count} error{'s' if count > 1 else ''}"
    return text


def result_status(error_count: int | None) -> str | None:
    if error_count is None:
        return None
    return "ok" if error_count == 0 else "error"
