"""Repo-wide test fixtures.

Snapshots and restores client environment variables between tests so
settings loaded in one module never leak into another.
"""

from __future__ import annotations

import os

import pytest

_CLIENT_ENV_VARS = [
    "METERDESK_BASE_URL",
    "METERDESK_USER_ID",
    "METERDESK_ACCESS_TOKEN",
    "METERDESK_IDENTITY_HEADER",
    "METERDESK_TIMEOUT",
    "METERDESK_LOG_FORMAT",
]


@pytest.fixture(autouse=True)
def _restore_env():
    """Snapshot client env vars before each test and restore after."""
    snapshot = {}
    for var in _CLIENT_ENV_VARS:
        val = os.environ.get(var)
        if val is not None:
            snapshot[var] = val

    yield

    # Restore: remove any that were added, reset any that changed
    for var in _CLIENT_ENV_VARS:
        if var in snapshot:
            os.environ[var] = snapshot[var]
        else:
            os.environ.pop(var, None)
