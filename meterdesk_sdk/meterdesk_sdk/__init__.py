"""Meterdesk Python SDK: async data-access layer for the metering service API."""

from meterdesk_sdk.client import ApiResult, AsyncMeterdeskClient, RequestSpec
from meterdesk_sdk.config import ClientSettings, load_settings
from meterdesk_sdk.envelope import error_message, unwrap
from meterdesk_sdk.errors import (
    ApiError,
    ConfigurationError,
    DomainError,
    HttpError,
    MeterdeskError,
    TransportError,
)
from meterdesk_sdk.pagination import LoadState, Paginator
from meterdesk_sdk.timeseries import aggregate

__version__ = "1.0.0"

__all__ = [
    "AsyncMeterdeskClient",
    "ApiResult",
    "RequestSpec",
    "ClientSettings",
    "load_settings",
    "unwrap",
    "error_message",
    "MeterdeskError",
    "ConfigurationError",
    "TransportError",
    "ApiError",
    "HttpError",
    "DomainError",
    "Paginator",
    "LoadState",
    "aggregate",
]
