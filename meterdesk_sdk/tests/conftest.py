"""Shared test fixtures for Meterdesk SDK tests."""

from __future__ import annotations

import json
from typing import Any, Callable, List, Optional

import httpx
import pytest

from meterdesk_sdk import AsyncMeterdeskClient, ClientSettings

BASE_URL = "https://meter.example.com"


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self._responder = responder
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(base_url=BASE_URL, user_id="7", access_token="tok-123")


@pytest.fixture
def make_client(settings):
    """Build a client whose transport is a ``Recorder`` around ``responder``."""

    def _make(
        responder: Callable[[httpx.Request], httpx.Response],
        client_settings: Optional[ClientSettings] = None,
    ):
        recorder = Recorder(responder)
        client = AsyncMeterdeskClient(
            client_settings or settings,
            transport=httpx.MockTransport(recorder),
        )
        return client, recorder

    return _make
