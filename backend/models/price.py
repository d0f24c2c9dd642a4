"""
Price data models.

GeckoTerminal has served pool attributes under several field names over time.
``normalize_price`` maps every known shape onto one ``PriceSnapshot`` so that
formatting code never has to look at the raw payload.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple


@dataclass(frozen=True)
class PriceSnapshot:
    """Normalized market data for the PEPU pool."""
    price_usd: float
    price_change_24h: float
    market_cap: float
    volume_24h: float
    liquidity: float
    symbol: str = "PEPU"
    name: str = "Pepe Unchained"
    variant: str = "pool"


# (field name, variant tag) in lookup order
PRICE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("base_token_price_usd", "pool"),
    ("price_usd", "flat"),
    ("token_price_usd", "token"),
)

CHANGE_PATHS = (("price_change_percentage", "h24"), ("price_change_24h",))
VOLUME_PATHS = (("volume_usd", "h24"), ("volume_24h_usd",), ("volume_usd",))
LIQUIDITY_PATHS = (("reserve_in_usd",), ("liquidity_usd",), ("total_liquidity_usd",))
MARKET_CAP_PATHS = (("fdv_usd",), ("fully_diluted_valuation_usd",), ("market_cap_usd",))


def _to_float(value: Any) -> float:
    """Parse numbers and numeric strings; anything else is 0.0."""
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _lookup(attributes: Dict[str, Any], path: Sequence[str]) -> Optional[Any]:
    value: Any = attributes
    for key in path:
        if not isinstance(value, dict) or key not in value:
            return None
        value = value[key]
    # A nested dict where a number is expected means the path was too short
    if isinstance(value, dict):
        return None
    return value


def _first_number(attributes: Dict[str, Any], paths: Sequence[Sequence[str]]) -> float:
    for path in paths:
        value = _to_float(_lookup(attributes, path))
        if value:
            return value
    return 0.0


def normalize_price(attributes: Dict[str, Any]) -> PriceSnapshot:
    """
    Map raw pool attributes onto a PriceSnapshot.

    Args:
        attributes: The ``data.attributes`` object of a pool response

    Returns:
        PriceSnapshot tagged with the variant whose price field matched,
        or ``"empty"`` when no price field was present
    """
    variant = "empty"
    price = 0.0
    for field_name, tag in PRICE_FIELDS:
        if attributes.get(field_name) is not None:
            variant = tag
            price = _to_float(attributes[field_name])
            break

    base_token = attributes.get("base_token") or attributes.get("token_0") or {}
    if not isinstance(base_token, dict):
        base_token = {}

    return PriceSnapshot(
        price_usd=price,
        price_change_24h=_first_number(attributes, CHANGE_PATHS),
        market_cap=_first_number(attributes, MARKET_CAP_PATHS),
        volume_24h=_first_number(attributes, VOLUME_PATHS),
        liquidity=_first_number(attributes, LIQUIDITY_PATHS),
        symbol=base_token.get("symbol") or "PEPU",
        name=base_token.get("name") or "Pepe Unchained",
        variant=variant,
    )
