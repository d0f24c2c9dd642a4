"""PEPU market data from the GeckoTerminal API."""
import logging
from typing import Optional

import httpx

from models.price import PriceSnapshot, normalize_price
from config import PRICE_API_BASE_URL, PEPU_POOL_ADDRESS, PRICE_TIMEOUT

logger = logging.getLogger(__name__)


class PriceFetchError(Exception):
    """Raised when market data cannot be fetched or understood."""


class PriceClient:
    """Fetches the PEPU pool from GeckoTerminal and normalizes it."""

    def __init__(
        self,
        base_url: str = PRICE_API_BASE_URL,
        pool_address: str = PEPU_POOL_ADDRESS,
        network: str = "eth",
        timeout: float = PRICE_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the price client.

        Args:
            base_url: GeckoTerminal API root
            pool_address: PEPU pool address
            network: GeckoTerminal network id of the pool
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.pool_address = pool_address
        self.network = network
        self.timeout = timeout
        self.transport = transport

    @property
    def pool_url(self) -> str:
        return f"{self.base_url}/networks/{self.network}/pools/{self.pool_address}"

    async def get_price(self) -> PriceSnapshot:
        """
        Fetch current PEPU market data.

        Raises:
            PriceFetchError: On HTTP failures or an unexpected response shape
        """
        headers = {"Accept": "application/json", "User-Agent": "Mozilla/5.0"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.pool_url, headers=headers)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Price API returned {e.response.status_code}: {e.response.text[:200]}")
            raise PriceFetchError(f"Failed to fetch PEPU price: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Error fetching PEPU price: {e}")
            raise PriceFetchError(f"Failed to fetch PEPU price: {e}") from e
        except ValueError as e:
            raise PriceFetchError("Failed to fetch PEPU price: response is not JSON") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        attributes = data.get("attributes") if isinstance(data, dict) else None
        if not isinstance(attributes, dict):
            raise PriceFetchError("Failed to fetch PEPU price: no attributes in API response")

        snapshot = normalize_price(attributes)
        logger.info(f"Fetched PEPU price {snapshot.price_usd} (variant={snapshot.variant})")
        return snapshot


def _millions(value: float) -> str:
    return f"{value / 1_000_000:.2f}M" if value > 0 else "N/A"


def _price(value: float) -> str:
    return f"{value:.6f}" if value else "N/A"


def format_price_response(snapshot: PriceSnapshot) -> str:
    """Full market summary sent for price questions."""
    change = snapshot.price_change_24h
    emoji = "📈" if change >= 0 else "📉"
    direction = "up" if change >= 0 else "down"

    return (
        "Hey! Here's the current PEPU price info:\n\n"
        f"💵 PEPU is currently trading at *${_price(snapshot.price_usd)}*\n"
        f"{emoji} It's {direction} *{abs(change):.2f}%* in the last 24 hours\n\n"
        "Here's some market context:\n"
        f"• Market cap is sitting at around *${_millions(snapshot.market_cap)}*\n"
        f"• 24-hour trading volume is *${_millions(snapshot.volume_24h)}*\n"
        f"• Current liquidity is *${_millions(snapshot.liquidity)}*\n\n"
        "_Live data from GeckoTerminal_"
    )


def format_price_blurb(snapshot: PriceSnapshot) -> str:
    """One-line price appended to answers about the token."""
    change = snapshot.price_change_24h
    emoji = "📈" if change >= 0 else "📉"
    return f"💵 *Current PEPU Price:* ${_price(snapshot.price_usd)} {emoji} {abs(change):.2f}% (24h)"
