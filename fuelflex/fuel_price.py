# --- fuelflex/fuel_price.py --------------------------------------------------
# Current fuel price per litre, mocked or fetched from a price feed.

from dataclasses import dataclass
from typing import Optional
import asyncio
import logging
import math
import random

import aiohttp

from .errors import FuelPriceUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FuelPrice:
    price: float
    currency: str


class MockFuelPriceProvider:
    """Fixed baseline with bounded random jitter, standing in for a live market.

    Prices stay within ``base_price +/- jitter`` and are rounded to cents.
    ``latency`` is an optional (min, max) delay in seconds to mimic a remote
    call.
    """

    def __init__(
        self,
        base_price: float = 95.0,
        jitter: float = 4.0,
        currency: str = "INR",
        rng: Optional[random.Random] = None,
        latency: Optional[tuple[float, float]] = None,
    ):
        if base_price - abs(jitter) <= 0:
            raise ValueError("base_price must stay positive after jitter")
        self.base_price = base_price
        self.jitter = abs(jitter)
        self.currency = currency
        self.rng = rng or random.Random()
        self.latency = latency

    async def get_fuel_price(self) -> FuelPrice:
        if self.latency:
            await asyncio.sleep(self.rng.uniform(*self.latency))
        price = round(self.base_price + self.rng.uniform(-self.jitter, self.jitter), 2)
        logger.warning("Using mock fuel price %.2f %s; integrate a real feed for accuracy", price, self.currency)
        return FuelPrice(price=price, currency=self.currency)


def parse_fuel_price(data: dict, default_currency: str) -> FuelPrice:
    try:
        price = float(data["price"])
    except (KeyError, TypeError, ValueError) as e:
        raise FuelPriceUnavailable("Fuel price feed returned no usable price", cause=e)
    if not math.isfinite(price) or price <= 0:
        raise FuelPriceUnavailable(f"Fuel price feed returned invalid price {price!r}")
    currency = str(data.get("currency") or default_currency).upper()
    return FuelPrice(price=price, currency=currency)


class HttpFuelPriceProvider:
    """Reads ``{"price": .., "currency": ..}`` from a JSON endpoint.

    Any transport error, non-200 status or malformed payload raises
    FuelPriceUnavailable; there is no silent fallback to a default price.
    """

    def __init__(self, url: str, currency: str = "INR"):
        self.url = url
        self.currency = currency

    async def get_fuel_price(self) -> FuelPrice:
        logger.info("Fetching fuel price from %s", self.url)
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(self.url, params={"currency": self.currency}) as response:
                    if response.status != 200:
                        raise FuelPriceUnavailable(f"Fuel price feed HTTP {response.status}")
                    data = await response.json()
        except aiohttp.ClientError as e:
            raise FuelPriceUnavailable(f"Fuel price feed request error: {e}", cause=e)
        except ValueError as e:
            raise FuelPriceUnavailable("Fuel price feed returned invalid JSON", cause=e)
        return parse_fuel_price(data, self.currency)
