"""Deterministic canonicalization helpers for request bodies."""

from __future__ import annotations

import json
import math
from typing import Any
from urllib.parse import urlencode


def canonicalize(value: Any) -> Any:
    """Normalize values to a deterministic representation."""
    if isinstance(value, dict):
        return {str(key): canonicalize(value[key]) for key in sorted(value.keys(), key=str)}

    if isinstance(value, (list, tuple)):
        return [canonicalize(item) for item in value]

    if isinstance(value, str):
        return value.replace("\r\n", "\n").replace("\r", "\n")

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError("NaN and infinity are not supported in canonical JSON")
        return float(f"{value:.12g}")

    return value


def canonical_json(value: Any) -> str:
    """Serialize a value to stable canonical JSON."""
    return json.dumps(
        canonicalize(value),
        ensure_ascii=True,
        separators=(",", ":"),
        sort_keys=True,
    )


def canonical_body(body: Any) -> str | None:
    """Reduce a request or response body to comparable text.

    JSON documents (decoded or still encoded) collapse to canonical JSON so
    key order and whitespace never affect matching.
    """
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray)):
        body = bytes(body).decode("utf-8", errors="replace")
    if isinstance(body, str):
        if not body:
            return None
        try:
            decoded = json.loads(body)
        except json.JSONDecodeError:
            return body
        if isinstance(decoded, (dict, list)):
            return canonical_json(decoded)
        return body
    if isinstance(body, (dict, list, tuple)):
        return canonical_json(body)
    return str(body)


def form_body(data: Any) -> str | None:
    """Encode form data the way HTTP clients put it on the wire."""
    if data is None:
        return None
    if isinstance(data, dict):
        return urlencode(sorted((str(key), str(val)) for key, val in data.items()))
    if isinstance(data, (list, tuple)):
        return urlencode([(str(key), str(val)) for key, val in data])
    return canonical_body(data)
