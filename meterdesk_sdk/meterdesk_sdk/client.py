"""AsyncMeterdeskClient: asynchronous HTTP client for the metering service.

Every completed HTTP exchange comes back as an ``ApiResult``, whatever the
status code. Only a missing base address (``ConfigurationError``) and
transport failures (``TransportError``) are raised.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from meterdesk_sdk.auth import build_auth_headers
from meterdesk_sdk.config import ClientSettings, load_settings
from meterdesk_sdk.envelope import error_message, unwrap
from meterdesk_sdk.errors import ConfigurationError, DomainError, HttpError, TransportError
from meterdesk_sdk.utils import QueryValue, clean_headers, clean_query, format_exchange_log, join_url

logger = logging.getLogger("meterdesk.client")

METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


@dataclass
class RequestSpec:
    """One request. Built per call and discarded.

    ``None`` query values and header overrides are omitted. A ``None`` body
    means "no body": nothing is sent and no Content-Type is set.
    """

    path: str
    method: str = "GET"
    query: Optional[Mapping[str, QueryValue]] = None
    body: Any = None
    headers: Optional[Mapping[str, Optional[str]]] = None
    send_identity: bool = True
    send_token: bool = True

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if self.method not in METHODS:
            raise ValueError(f"Unsupported method: {self.method}")


@dataclass(frozen=True)
class ApiResult:
    ok: bool
    status: int
    body: Any

    @property
    def declared_error(self) -> Optional[str]:
        """Envelope ``success: false`` message, if any."""
        return error_message(self.body)

    @property
    def payload(self) -> Any:
        return unwrap(self.body)

    def failure_message(self) -> Optional[str]:
        """Declared message first, then the HTTP status; ``None`` on success."""
        declared = self.declared_error
        if declared is not None:
            return declared
        if not self.ok:
            return f"HTTP {self.status}"
        return None

    def raise_for_error(self, endpoint: Optional[str] = None) -> None:
        """Opt-in: raise ``DomainError`` or ``HttpError`` instead of inspecting."""
        declared = self.declared_error
        if declared is not None:
            raise DomainError(self.status, declared, self.body, endpoint)
        if not self.ok:
            message = f"HTTP {self.status}"
            if endpoint:
                message = f"{message} (endpoint: {endpoint})"
            raise HttpError(self.status, message, self.body)


def read_response_body(resp: httpx.Response) -> Any:
    """Parsed JSON for JSON responses, text otherwise, ``None`` when unreadable."""
    content_type = resp.headers.get("content-type", "")
    if "application/json" in content_type.lower():
        try:
            return resp.json()
        except ValueError:
            return None
    try:
        return resp.text
    except (UnicodeDecodeError, LookupError):
        return None


class AsyncMeterdeskClient:
    """Asynchronous client for the metering service.

    Usage::

        import asyncio
        from meterdesk_sdk import AsyncMeterdeskClient, ClientSettings, RequestSpec

        async def main():
            settings = ClientSettings(base_url="https://meter.example.com", access_token="...")
            async with AsyncMeterdeskClient(settings) as c:
                r = await c.request(RequestSpec(path="/api/user/self"))
                print(r.status, r.payload)

        asyncio.run(main())

    The settings object is held by reference and read on every request, so
    ``settings.update(base_url=...)`` applies to the next call. Cookies set by
    the server are kept and replayed for the client's lifetime.
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize async client.

        Args:
            settings: Connection settings; loaded from the environment when omitted
            transport: Custom httpx transport (tests, proxies)
        """
        self._settings = settings if settings is not None else load_settings()
        self._client = httpx.AsyncClient(timeout=self._settings.timeout, transport=transport)

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    # ── Internal helpers ─────────────────────────────────────────

    def _headers(self, spec: RequestSpec) -> dict:
        headers = clean_headers(spec.headers)
        headers.update(
            build_auth_headers(
                self._settings,
                send_identity=spec.send_identity,
                send_token=spec.send_token,
            )
        )
        if spec.body is not None:
            headers["Content-Type"] = "application/json"
        return headers

    def _url(self, path: str) -> str:
        if not self._settings.base_url:
            raise ConfigurationError("Base URL is not set")
        return join_url(self._settings.base_url, path)

    # ── Public API ───────────────────────────────────────────────

    async def request(self, spec: RequestSpec) -> ApiResult:
        """Send one request and return its result without raising on non-2xx."""
        url = self._url(spec.path)
        headers = self._headers(spec)
        content = None if spec.body is None else json.dumps(spec.body).encode("utf-8")

        t0 = time.monotonic()
        try:
            resp = await self._client.request(
                spec.method,
                url,
                params=clean_query(spec.query),
                headers=headers,
                content=content,
                timeout=self._settings.timeout,
            )
        except httpx.TransportError as e:
            logger.warning("method=%s path=%s transport_error=%s", spec.method, spec.path, type(e).__name__)
            raise TransportError(
                f"{spec.method} {spec.path} failed: {e}", method=spec.method, url=url
            ) from e
        elapsed_ms = int((time.monotonic() - t0) * 1000)

        logger.info(
            format_exchange_log(
                self._settings.log_format,
                method=spec.method,
                path=spec.path,
                status=resp.status_code,
                elapsed_ms=elapsed_ms,
            )
        )
        return ApiResult(ok=resp.is_success, status=resp.status_code, body=read_response_body(resp))

    async def get(self, path: str, **kwargs: Any) -> ApiResult:
        """GET ``path``; keyword arguments are ``RequestSpec`` fields."""
        return await self.request(RequestSpec(path=path, method="GET", **kwargs))

    async def post(self, path: str, **kwargs: Any) -> ApiResult:
        return await self.request(RequestSpec(path=path, method="POST", **kwargs))

    async def put(self, path: str, **kwargs: Any) -> ApiResult:
        return await self.request(RequestSpec(path=path, method="PUT", **kwargs))

    async def delete(self, path: str, **kwargs: Any) -> ApiResult:
        return await self.request(RequestSpec(path=path, method="DELETE", **kwargs))

    # ── Lifecycle ──────────────────────────────────────────────

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncMeterdeskClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
