"""Pydantic entity models for the Meterdesk SDK.

Entities are immutable snapshots built fresh on every parse. Identity
fields are required; every other field is ``None`` when the server omitted
it or sent something of the wrong type.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]


class Entity(BaseModel):
    # Wire names such as ``model_name`` overlap pydantic's ``model_`` prefix.
    model_config = ConfigDict(frozen=True, protected_namespaces=())


# ── Accounts ─────────────────────────────────────────────────────

class User(Entity):
    id: int
    username: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[int] = None
    status: Optional[int] = None
    group: Optional[str] = None
    quota: Optional[Number] = None
    used_quota: Optional[Number] = None
    request_count: Optional[int] = None


class Token(Entity):
    id: int
    name: Optional[str] = None
    key: Optional[str] = None
    status: Optional[int] = None
    group: Optional[str] = None
    created_time: Optional[int] = None
    accessed_time: Optional[int] = None
    expired_time: Optional[int] = None
    remain_quota: Optional[Number] = None
    used_quota: Optional[Number] = None
    unlimited_quota: Optional[bool] = None
    model_limits_enabled: Optional[bool] = None
    model_limits: Optional[str] = None
    allow_ips: Optional[str] = None
    cross_group_retry: Optional[bool] = None


# ── Usage ────────────────────────────────────────────────────────

class LogItem(Entity):
    id: int
    type: Optional[int] = None
    content: Optional[str] = None
    created_at: Optional[int] = None
    username: Optional[str] = None
    token_name: Optional[str] = None
    model_name: Optional[str] = None
    quota: Optional[Number] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    use_time: Optional[Number] = None
    is_stream: Optional[bool] = None
    channel: Optional[int] = None
    token_id: Optional[int] = None
    group: Optional[str] = None
    ip: Optional[str] = None
    other: Optional[str] = None

    @property
    def total_tokens(self) -> int:
        return (self.prompt_tokens or 0) + (self.completion_tokens or 0)


class QuotaDataPoint(Entity):
    id: Optional[int] = None
    user_id: Optional[int] = None
    username: Optional[str] = None
    model_name: Optional[str] = None
    created_at: Optional[int] = None
    token_used: Optional[Number] = None
    count: Optional[Number] = None
    quota: Optional[Number] = None


# ── Administration ───────────────────────────────────────────────

class Channel(Entity):
    id: int
    type: Optional[int] = None
    status: Optional[int] = None
    name: Optional[str] = None
    group: Optional[str] = None
    tag: Optional[str] = None
    base_url: Optional[str] = None
    models: Optional[str] = None
    priority: Optional[int] = None
    weight: Optional[int] = None
    created_time: Optional[int] = None
    response_time: Optional[Number] = None
    balance: Optional[Number] = None
    other: Optional[str] = None
    remark: Optional[str] = None


class Redemption(Entity):
    id: int
    user_id: Optional[int] = None
    key: Optional[str] = None
    status: Optional[int] = None
    name: Optional[str] = None
    quota: Optional[Number] = None
    created_time: Optional[int] = None
    redeemed_time: Optional[int] = None
    used_user_id: Optional[int] = None
    expired_time: Optional[int] = None


# ── Top-up ───────────────────────────────────────────────────────

class TopupRecord(Entity):
    id: int
    name: Optional[str] = None
    quota: Optional[Number] = None
    status: Optional[int] = None
    created: Optional[int] = None
    redeemed: Optional[int] = None


class PayMethod(Entity):
    type: str
    name: str
    color: Optional[str] = None
    min_topup: Optional[Number] = None


class CreemProduct(Entity):
    product_id: str
    name: str
    price: Number
    currency: Optional[str] = None
    quota: Optional[Number] = None


class TopupInfo(Entity):
    enable_online_topup: bool = False
    enable_stripe_topup: bool = False
    enable_creem_topup: bool = False
    min_topup: Optional[Number] = None
    stripe_min_topup: Optional[Number] = None
    pay_methods: List[PayMethod] = Field(default_factory=list)
    amount_options: List[Number] = Field(default_factory=list)
    discount: Dict[str, Number] = Field(default_factory=dict)
    creem_products: List[CreemProduct] = Field(default_factory=list)


# ── Server status ────────────────────────────────────────────────

QuotaDisplayType = Literal["USD", "CNY", "CUSTOM", "TOKENS"]


class StatusInfo(Entity):
    quota_per_unit: Number = 500000
    quota_display_type: QuotaDisplayType = "USD"
    usd_exchange_rate: Number = 1
    custom_currency_symbol: str = "¤"
    custom_currency_exchange_rate: Number = 1
