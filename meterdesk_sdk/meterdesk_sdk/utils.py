"""Utilities: URL joining, query cleaning, safe log formatting."""

from __future__ import annotations

import datetime
import json
from typing import Any, Dict, List, Mapping, Optional, Tuple

QueryValue = Optional[Any]


def normalize_base_url(value: str) -> str:
    """Strip whitespace and trailing slashes. Empty input stays empty."""
    trimmed = value.strip()
    if not trimmed:
        return ""
    return trimmed.rstrip("/")


def join_url(base_url: str, path: str) -> str:
    """Join a base address and a request path with exactly one slash."""
    base = normalize_base_url(base_url)
    if not base:
        return path
    if not path:
        return base
    if path.startswith("/"):
        return f"{base}{path}"
    return f"{base}/{path}"


def _query_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def clean_query(query: Optional[Mapping[str, QueryValue]]) -> List[Tuple[str, str]]:
    """Drop absent (``None``) values and stringify the rest, keeping order."""
    if not query:
        return []
    return [(key, _query_str(value)) for key, value in query.items() if value is not None]


def clean_headers(headers: Optional[Mapping[str, Optional[str]]]) -> Dict[str, str]:
    """Drop header overrides whose value is ``None``."""
    if not headers:
        return {}
    return {key: value for key, value in headers.items() if value is not None}


def format_exchange_log(
    log_format: str,
    *,
    method: str,
    path: str,
    status: int,
    elapsed_ms: int,
) -> str:
    """Render one request/response log line. Metadata only, never bodies."""
    if log_format == "json":
        event = {
            "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "method": method,
            "path": path,
            "status": status,
            "elapsed_ms": elapsed_ms,
        }
        return json.dumps(event, separators=(",", ":"))
    return f"method={method} path={path} status={status} elapsed_ms={elapsed_ms}"
