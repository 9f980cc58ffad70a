"""Client settings for the Meterdesk SDK.

One ``ClientSettings`` object is built at application start (usually via
``load_settings()``) and handed to the client by reference. The client reads
it on every request, so ``update()`` takes effect on the next call without
rebuilding anything. Never exposes secrets in repr or serialization.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from meterdesk_sdk.utils import normalize_base_url

DEFAULT_IDENTITY_HEADER = "Identity"
DEFAULT_TIMEOUT = 30.0
LOG_FORMATS = ("text", "json")


def _float_env(key: str, default: float) -> float:
    """Parse a float env var with fallback."""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        return default


def _optional_env(key: str) -> Optional[str]:
    val = os.environ.get(key, "").strip()
    return val or None


@dataclass
class ClientSettings:
    """Mutable connection configuration. Safe to log: secrets are masked."""

    # ── Endpoint ───────────────────────────────────────────────────
    base_url: str = ""
    timeout: float = DEFAULT_TIMEOUT

    # ── Credentials ────────────────────────────────────────────────
    user_id: Optional[str] = None
    access_token: Optional[str] = None
    identity_header: str = DEFAULT_IDENTITY_HEADER

    # ── Logging ────────────────────────────────────────────────────
    log_format: str = "text"

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        self.base_url = normalize_base_url(self.base_url or "")
        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {', '.join(LOG_FORMATS)}; got {self.log_format!r}"
            )
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive; got {self.timeout!r}")
        if not self.identity_header:
            raise ValueError("identity_header must not be empty")

    def __repr__(self) -> str:
        return (
            f"ClientSettings(base_url={self.base_url!r}, timeout={self.timeout}, "
            f"user_id={self.user_id!r}, "
            f"access_token={'***' if self.access_token else ''!r}, "
            f"identity_header={self.identity_header!r}, log_format={self.log_format!r})"
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    def update(self, **changes: Any) -> None:
        """Apply new values in place. Unknown keys raise ``ValueError``."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(unknown)}")
        previous = {name: getattr(self, name) for name in changes}
        for name, value in changes.items():
            setattr(self, name, value)
        try:
            self._validate()
        except ValueError:
            for name, value in previous.items():
                setattr(self, name, value)
            raise

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe dict with the access token masked."""
        return {
            "base_url": self.base_url,
            "timeout": self.timeout,
            "user_id": self.user_id,
            "access_token": "configured" if self.access_token else "not set",
            "identity_header": self.identity_header,
            "log_format": self.log_format,
        }


def load_settings(**overrides: Any) -> ClientSettings:
    """Load settings from environment with optional overrides.

    Args:
        **overrides: Field values that win over the environment

    Returns:
        ClientSettings instance
    """
    values: Dict[str, Any] = {
        "base_url": os.environ.get("METERDESK_BASE_URL", ""),
        "timeout": _float_env("METERDESK_TIMEOUT", DEFAULT_TIMEOUT),
        "user_id": _optional_env("METERDESK_USER_ID"),
        "access_token": _optional_env("METERDESK_ACCESS_TOKEN"),
        "identity_header": os.environ.get("METERDESK_IDENTITY_HEADER", DEFAULT_IDENTITY_HEADER),
        "log_format": os.environ.get("METERDESK_LOG_FORMAT", "text"),
    }
    known = {f.name for f in fields(ClientSettings)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"Unknown setting(s): {', '.join(unknown)}")
    values.update(overrides)
    return ClientSettings(**values)
