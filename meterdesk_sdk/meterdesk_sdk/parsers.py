"""Entity parsers: raw response bodies to validated, immutable entities.

Each entity is described by a ``FieldMap``: the model class plus one
``FieldRule`` per attribute saying which wire key(s) to read and with which
typed getter. Rows lacking an identity field are dropped rather than
defaulted, so one malformed row never fails a whole page. ``parse_rows``
reports what was dropped and why; ``parse_list`` returns only the items.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Type

from pydantic import ValidationError

from meterdesk_sdk.envelope import unwrap
from meterdesk_sdk.fields import (
    Path,
    as_list,
    coerce_number,
    first_present,
    get_bool,
    get_int,
    get_number,
    get_string,
    is_record,
    numeric_map,
    parse_json_lenient,
    positive_numbers,
)
from meterdesk_sdk.models import (
    Channel,
    CreemProduct,
    Entity,
    LogItem,
    PayMethod,
    QuotaDataPoint,
    Redemption,
    StatusInfo,
    Token,
    TopupInfo,
    TopupRecord,
    User,
)

logger = logging.getLogger("meterdesk.parsers")

# Keys under which list endpoints nest their rows, in lookup order.
ROW_ARRAY_KEYS = ("items", "list", "data", "logs", "tokens", "records", "result")


# ── Field maps ───────────────────────────────────────────────────

@dataclass(frozen=True)
class FieldRule:
    """How to read one entity attribute from a raw row.

    ``paths`` are tried in order (alternate wire names). An ``identity``
    rule must produce a truthy value (non-zero id, non-empty string) or the
    row is dropped. ``fallback`` names another attribute whose value is
    reused when this one is absent.
    """

    getter: Callable[[Any, Path], Any]
    paths: Tuple[Path, ...]
    identity: bool = False
    fallback: Optional[str] = None

    def read(self, row: Any) -> Any:
        return first_present(row, *self.paths, getter=self.getter)


def rule(
    getter: Callable[[Any, Path], Any],
    *paths: Path,
    identity: bool = False,
    fallback: Optional[str] = None,
) -> FieldRule:
    return FieldRule(getter=getter, paths=paths, identity=identity, fallback=fallback)


@dataclass(frozen=True)
class FieldMap:
    model: Type[Entity]
    rules: Mapping[str, FieldRule]

    @property
    def identity_fields(self) -> Tuple[str, ...]:
        return tuple(name for name, r in self.rules.items() if r.identity)


def _snake_map(model: Type[Entity], identity: Iterable[str], **getters: Callable) -> FieldMap:
    """Field map whose attribute names equal the wire names."""
    ids = set(identity)
    return FieldMap(
        model=model,
        rules={name: rule(getter, name, identity=name in ids) for name, getter in getters.items()},
    )


USER_FIELDS = _snake_map(
    User, ("id", "username"),
    id=get_int, username=get_string, display_name=get_string, email=get_string,
    role=get_int, status=get_int, group=get_string, quota=get_number,
    used_quota=get_number, request_count=get_int,
)

TOKEN_FIELDS = _snake_map(
    Token, ("id",),
    id=get_int, name=get_string, key=get_string, status=get_int, group=get_string,
    created_time=get_int, accessed_time=get_int, expired_time=get_int,
    remain_quota=get_number, used_quota=get_number, unlimited_quota=get_bool,
    model_limits_enabled=get_bool, model_limits=get_string, allow_ips=get_string,
    cross_group_retry=get_bool,
)

LOG_FIELDS = _snake_map(
    LogItem, ("id",),
    id=get_int, type=get_int, content=get_string, created_at=get_int,
    username=get_string, token_name=get_string, model_name=get_string,
    quota=get_number, prompt_tokens=get_int, completion_tokens=get_int,
    use_time=get_number, is_stream=get_bool, channel=get_int, token_id=get_int,
    group=get_string, ip=get_string, other=get_string,
)

QUOTA_DATA_FIELDS = _snake_map(
    QuotaDataPoint, (),
    id=get_int, user_id=get_int, username=get_string, model_name=get_string,
    created_at=get_int, token_used=get_number, count=get_number, quota=get_number,
)

CHANNEL_FIELDS = _snake_map(
    Channel, ("id",),
    id=get_int, type=get_int, status=get_int, name=get_string, group=get_string,
    tag=get_string, base_url=get_string, models=get_string, priority=get_int,
    weight=get_int, created_time=get_int, response_time=get_number,
    balance=get_number, other=get_string, remark=get_string,
)

REDEMPTION_FIELDS = _snake_map(
    Redemption, ("id",),
    id=get_int, user_id=get_int, key=get_string, status=get_int, name=get_string,
    quota=get_number, created_time=get_int, redeemed_time=get_int,
    used_user_id=get_int, expired_time=get_int,
)

TOPUP_RECORD_FIELDS = FieldMap(
    model=TopupRecord,
    rules={
        "id": rule(get_int, "id", identity=True),
        "name": rule(get_string, "name"),
        "quota": rule(get_number, "quota"),
        "status": rule(get_int, "status"),
        "created": rule(get_int, "created_time", "created_at"),
        "redeemed": rule(get_int, "redeemed_time"),
    },
)

PAY_METHOD_FIELDS = FieldMap(
    model=PayMethod,
    rules={
        "type": rule(get_string, "type", identity=True),
        "name": rule(get_string, "name", fallback="type"),
        "color": rule(get_string, "color"),
        "min_topup": rule(get_number, "min_topup"),
    },
)

CREEM_PRODUCT_FIELDS = FieldMap(
    model=CreemProduct,
    rules={
        "product_id": rule(get_string, "productId", "product_id", identity=True),
        "name": rule(get_string, "name", fallback="product_id"),
        "price": rule(get_number, "price", identity=True),
        "currency": rule(get_string, "currency"),
        "quota": rule(get_number, "quota"),
    },
)


# ── Generic machinery ────────────────────────────────────────────

@dataclass(frozen=True)
class DroppedRow:
    index: int
    reason: str


@dataclass
class ParseResult:
    items: List[Any] = field(default_factory=list)
    dropped: List[DroppedRow] = field(default_factory=list)

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)


def find_row_array(payload: Any) -> List[Any]:
    """Locate the list of raw rows inside an unwrapped payload.

    Tried in order: the payload itself, a conventional key, the first list
    among the payload's values, the first list one object level down.
    Returns ``[]`` when nothing matches.
    """
    if isinstance(payload, list):
        return payload
    if not is_record(payload):
        return []
    for key in ROW_ARRAY_KEYS:
        value = payload.get(key)
        if isinstance(value, list):
            return value
    for value in payload.values():
        if isinstance(value, list):
            return value
    for value in payload.values():
        if not is_record(value):
            continue
        for nested in value.values():
            if isinstance(nested, list):
                return nested
    return []


def extract_entity(row: Any, field_map: FieldMap) -> Tuple[Optional[Entity], Optional[str]]:
    """Build one entity from a raw row. Returns ``(entity, None)`` or ``(None, reason)``."""
    if not is_record(row):
        return None, "row is not an object"

    values: Dict[str, Any] = {name: r.read(row) for name, r in field_map.rules.items()}
    for name, r in field_map.rules.items():
        if values[name] is None and r.fallback is not None:
            values[name] = values.get(r.fallback)

    missing = [name for name in field_map.identity_fields if not values[name]]
    if missing:
        return None, f"missing identity field(s): {', '.join(missing)}"

    present = {name: value for name, value in values.items() if value is not None}
    try:
        return field_map.model(**present), None
    except ValidationError as e:
        return None, f"invalid {field_map.model.__name__}: {e.error_count()} error(s)"


def parse_rows(body: Any, field_map: FieldMap) -> ParseResult:
    """Parse every row of a list response, recording the ones dropped."""
    result = ParseResult()
    for index, row in enumerate(find_row_array(unwrap(body))):
        entity, reason = extract_entity(row, field_map)
        if entity is None:
            result.dropped.append(DroppedRow(index=index, reason=reason or "unknown"))
        else:
            result.items.append(entity)
    if result.dropped:
        logger.debug(
            "Dropped %d of %d %s row(s)",
            result.dropped_count,
            result.dropped_count + len(result.items),
            field_map.model.__name__,
        )
    return result


def parse_list(body: Any, field_map: FieldMap) -> List[Any]:
    return parse_rows(body, field_map).items


def parse_one(body: Any, field_map: FieldMap) -> Optional[Any]:
    """Parse a single-object response; ``None`` when identity fields are missing."""
    entity, reason = extract_entity(unwrap(body), field_map)
    if entity is None:
        logger.debug("Discarded %s: %s", field_map.model.__name__, reason)
    return entity


# ── Entity parsers ───────────────────────────────────────────────

def parse_user(body: Any) -> Optional[User]:
    return parse_one(body, USER_FIELDS)


def parse_users(body: Any) -> List[User]:
    return parse_list(body, USER_FIELDS)


def parse_tokens(body: Any) -> List[Token]:
    return parse_list(body, TOKEN_FIELDS)


def parse_token(body: Any) -> Optional[Token]:
    return parse_one(body, TOKEN_FIELDS)


def parse_logs(body: Any) -> List[LogItem]:
    return parse_list(body, LOG_FIELDS)


def parse_quota_data(body: Any) -> List[QuotaDataPoint]:
    return parse_list(body, QUOTA_DATA_FIELDS)


def parse_channels(body: Any) -> List[Channel]:
    return parse_list(body, CHANNEL_FIELDS)


def parse_channel(body: Any) -> Optional[Channel]:
    return parse_one(body, CHANNEL_FIELDS)


def parse_redemptions(body: Any) -> List[Redemption]:
    return parse_list(body, REDEMPTION_FIELDS)


def parse_topup_records(body: Any) -> List[TopupRecord]:
    return parse_list(body, TOPUP_RECORD_FIELDS)


def _entities(values: Any, field_map: FieldMap) -> list:
    out = []
    for row in as_list(values):
        entity, _ = extract_entity(row, field_map)
        if entity is not None:
            out.append(entity)
    return out


def parse_topup_info(body: Any) -> Optional[TopupInfo]:
    """Top-up configuration. List-valued fields may arrive JSON-encoded."""
    data = unwrap(body)
    if not is_record(data):
        return None

    discount_raw = parse_json_lenient(data.get("discount"))
    discount = {}
    if is_record(discount_raw):
        for key, value in discount_raw.items():
            number = coerce_number(value)
            if number is not None and number > 0:
                discount[key] = number

    return TopupInfo(
        enable_online_topup=bool(get_bool(data, "enable_online_topup")),
        enable_stripe_topup=bool(get_bool(data, "enable_stripe_topup")),
        enable_creem_topup=bool(get_bool(data, "enable_creem_topup")),
        min_topup=get_number(data, "min_topup"),
        stripe_min_topup=get_number(data, "stripe_min_topup"),
        pay_methods=_entities(data.get("pay_methods"), PAY_METHOD_FIELDS),
        amount_options=positive_numbers(as_list(data.get("amount_options"))),
        discount=discount,
        creem_products=_entities(data.get("creem_products"), CREEM_PRODUCT_FIELDS),
    )


_DISPLAY_TYPES = ("USD", "CNY", "CUSTOM", "TOKENS")


def _or_default(value: Any, default: Any) -> Any:
    return default if value is None else value


def parse_status(body: Any) -> Optional[StatusInfo]:
    """Server-wide quota display settings from ``/api/status``."""
    data = unwrap(body)
    if not is_record(data):
        return None
    defaults = StatusInfo()

    quota_per_unit = get_number(data, "quota_per_unit")
    if quota_per_unit is None or quota_per_unit <= 0:
        quota_per_unit = defaults.quota_per_unit
    display_type = (get_string(data, "quota_display_type") or "USD").upper()
    if display_type not in _DISPLAY_TYPES:
        display_type = "USD"

    return StatusInfo(
        quota_per_unit=quota_per_unit,
        quota_display_type=display_type,
        usd_exchange_rate=_or_default(get_number(data, "usd_exchange_rate"), defaults.usd_exchange_rate),
        custom_currency_symbol=_or_default(
            get_string(data, "custom_currency_symbol"), defaults.custom_currency_symbol
        ),
        custom_currency_exchange_rate=_or_default(
            get_number(data, "custom_currency_exchange_rate"), defaults.custom_currency_exchange_rate
        ),
    )


def parse_numeric_map(body: Any) -> Dict[str, Any]:
    """Stat endpoints: every numeric (or numeric-string) entry of the payload."""
    return numeric_map(unwrap(body))


def pick_metric(data: Mapping[str, Any], keys: Iterable[str]) -> Optional[Any]:
    """First of ``keys`` present in ``data``; servers disagree on stat names."""
    for key in keys:
        if key in data:
            return data[key]
    return None
