"""Optional natural-language explanation of a computed price.

The explainer only narrates a CostBreakdown that was already computed; the
numeric price never comes from the model. Its output is accepted only when
it quotes the computed total, distance, fuel price and currency (see
``is_consistent``), otherwise the estimator falls back to the deterministic
template.
"""

from __future__ import annotations

from typing import Optional, Protocol
import asyncio
import logging
import re

from google import genai

from .fuel_price import FuelPrice
from .quote_engine import CostBreakdown

logger = logging.getLogger(__name__)

PROMPT = """You are an expert in logistics and transport pricing for India.

Explain the following transport price estimate to a customer as a short,
itemized breakdown. Do not change any number. State the final price exactly
as "{total} {currency}", and quote the distance and the fuel price per litre
as given below.

Input details:
- Distance: {distance_km:.2f} km
- Estimated travel time: {travel_time_hours:.1f} hours
- Load weight: {weight_kg:g} kg
- Vehicle profile: {vehicle_type}
- Current fuel price: {fuel_price:.2f} {currency} per litre

Computed cost components ({currency}):
- Fuel: {fuel_litres:.2f} litres, {fuel_cost:.2f}
- Driver wages: {driver_cost:.2f}
- Vehicle maintenance: {maintenance_cost:.2f}
- Loading and handling: {handling_cost:.2f}
- Fixed overhead: {overhead_cost:.2f}
- Profit margin ({margin_pct:.0f}%): {margin_amount:.2f}
- Final price: {total} {currency}

Mention that tolls and state taxes may apply and are not included.
"""


class Explainer(Protocol):
    async def explain(
        self, distance_km: float, weight_kg: float, fuel_price: FuelPrice, costs: CostBreakdown
    ) -> str: ...


def build_prompt(costs: CostBreakdown) -> str:
    return PROMPT.format(
        total=f"{costs.total:.0f}",
        currency=costs.currency,
        distance_km=costs.distance_km,
        travel_time_hours=costs.travel_time_hours,
        weight_kg=costs.weight_kg,
        vehicle_type=costs.vehicle_type.replace("_", " "),
        fuel_price=costs.fuel_price,
        fuel_litres=costs.fuel_litres,
        fuel_cost=costs.fuel_cost,
        driver_cost=costs.driver_cost,
        maintenance_cost=costs.maintenance_cost,
        handling_cost=costs.handling_cost,
        overhead_cost=costs.overhead_cost,
        margin_pct=costs.margin_rate * 100,
        margin_amount=costs.margin_amount,
    )


def _numbers(text: str) -> list[float]:
    # accept both 12345 and 12,345
    return [float(n.replace(",", "")) for n in re.findall(r"\d[\d,]*(?:\.\d+)?", text)]


def _quotes(numbers, value: float, tolerance: float) -> bool:
    return any(abs(n - value) <= tolerance for n in numbers)


def is_consistent(text: Optional[str], costs: CostBreakdown) -> bool:
    """True when ``text`` is non-empty and quotes the computed figures.

    The text must name the currency and carry the total, the distance
    (whole kilometres are enough) and the fuel price per litre.
    """
    if not isinstance(text, str) or not text.strip():
        return False
    if costs.currency not in text:
        return False
    numbers = _numbers(text)
    return (
        _quotes(numbers, costs.total, 0.005)
        and _quotes(numbers, costs.distance_km, 0.5)
        and _quotes(numbers, costs.fuel_price, 0.005)
    )


class GeminiExplainer:
    """Explainer backed by the google-genai client."""

    def __init__(self, api_key: Optional[str] = None, model: str = "gemini-2.0-flash", client=None):
        if client is None and not api_key:
            raise ValueError("GOOGLE_GENAI_API_KEY is required for the Gemini explainer")
        self.client = client or genai.Client(api_key=api_key)
        self.model = model

    async def explain(self, distance_km, weight_kg, fuel_price, costs):
        logger.debug("Requesting breakdown text from %s", self.model)
        # the client call blocks; keep it off the event loop
        response = await asyncio.to_thread(
            self.client.models.generate_content,
            model=self.model,
            contents=build_prompt(costs),
        )
        return response.text
