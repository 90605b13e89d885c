"""Price estimation orchestrator.

Composes a fuel-price lookup and a distance lookup into a PriceEstimate:

    validate -> (fuel price || distance) -> compute_costs -> explain

Validation happens before any provider is called. Both lookups run
concurrently, each under its own timeout; a failure in either aborts the
estimate with a typed EstimationError, no partial estimate is returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import asyncio
import logging
import math

from pydantic import BaseModel

from .distance import Coordinates, DistanceResult, GoogleDistanceMatrixProvider, HaversineDistanceProvider
from .errors import (
    DistanceUnavailable,
    EstimationError,
    EstimationInconsistent,
    FuelPriceUnavailable,
    InvalidInput,
)
from .explainer import Explainer, GeminiExplainer, is_consistent
from .fuel_price import FuelPrice, HttpFuelPriceProvider, MockFuelPriceProvider
from .quote_engine import CostBreakdown, compute_costs, render_breakdown

logger = logging.getLogger(__name__)


class PricingConfig(BaseModel):
    """Everything the estimator needs, passed in explicitly."""
    currency: str = "INR"
    avg_speed_kmh: float = 50.0
    fuel_base_price: float = 95.0
    fuel_jitter: float = 4.0
    fuel_price_url: Optional[str] = None
    google_maps_api_key: Optional[str] = None
    genai_api_key: Optional[str] = None
    genai_model: str = "gemini-2.0-flash"
    provider_timeout_s: float = 5.0
    explain_timeout_s: float = 10.0

    @classmethod
    def from_settings(cls, settings) -> "PricingConfig":
        return cls(
            currency=settings.FUELFLEX_CURRENCY,
            avg_speed_kmh=settings.FUELFLEX_AVG_SPEED_KMH,
            fuel_base_price=settings.FUELFLEX_FUEL_BASE_PRICE,
            fuel_jitter=settings.FUELFLEX_FUEL_JITTER,
            fuel_price_url=settings.FUELFLEX_FUEL_PRICE_URL,
            google_maps_api_key=settings.GOOGLE_MAPS_API_KEY,
            genai_api_key=settings.GOOGLE_GENAI_API_KEY,
            genai_model=settings.FUELFLEX_GENAI_MODEL,
            provider_timeout_s=settings.FUELFLEX_PROVIDER_TIMEOUT_S,
            explain_timeout_s=settings.FUELFLEX_EXPLAIN_TIMEOUT_S,
        )


@dataclass(frozen=True)
class EstimateRequest:
    pickup: Coordinates
    destination: Coordinates
    load_weight_kg: float
    vehicle_type: Optional[str] = None


@dataclass(frozen=True)
class PriceEstimate:
    estimated_price: float
    breakdown: str
    distance_km: float
    travel_time_hours: float
    currency: str
    distance_text: Optional[str] = None
    duration_text: Optional[str] = None
    fuel_price: Optional[float] = None
    vehicle_type: Optional[str] = None
    explanation_source: str = "template"
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, exc: EstimationError, currency: str) -> "PriceEstimate":
        """Zero-priced result tagged with the error code; never mistaken for a real quote."""
        return cls(
            estimated_price=0,
            breakdown=f"Error: {exc.user_message} ({exc.message})",
            distance_km=0.0,
            travel_time_hours=0.0,
            currency=currency,
            explanation_source="error",
            error=exc.code,
        )


def _finite(x) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool) and math.isfinite(x)


def validate_request(req: EstimateRequest) -> None:
    for label, point in (("pickup", req.pickup), ("destination", req.destination)):
        if not (_finite(point.latitude) and -90 <= point.latitude <= 90):
            raise InvalidInput(f"{label} latitude must be within [-90, 90], got {point.latitude!r}")
        if not (_finite(point.longitude) and -180 <= point.longitude <= 180):
            raise InvalidInput(f"{label} longitude must be within [-180, 180], got {point.longitude!r}")
    if not _finite(req.load_weight_kg) or req.load_weight_kg <= 0:
        raise InvalidInput(f"load weight must be a positive number of kg, got {req.load_weight_kg!r}")


class PriceEstimator:
    def __init__(self, fuel_provider, distance_provider, config: Optional[PricingConfig] = None,
                 explainer: Optional[Explainer] = None):
        self.fuel_provider = fuel_provider
        self.distance_provider = distance_provider
        self.config = config or PricingConfig()
        self.explainer = explainer

    async def _fuel_price(self) -> FuelPrice:
        try:
            fuel = await asyncio.wait_for(self.fuel_provider.get_fuel_price(), self.config.provider_timeout_s)
        except FuelPriceUnavailable:
            raise
        except asyncio.TimeoutError as e:
            raise FuelPriceUnavailable(f"fuel price lookup timed out after {self.config.provider_timeout_s}s", cause=e)
        except Exception as e:
            raise FuelPriceUnavailable(f"fuel price lookup failed: {e}", cause=e)
        if not _finite(fuel.price) or fuel.price <= 0:
            raise FuelPriceUnavailable(f"fuel price provider returned invalid price {fuel.price!r}")
        return fuel

    async def _distance(self, origin: Coordinates, destination: Coordinates) -> DistanceResult:
        try:
            result = await asyncio.wait_for(
                self.distance_provider.get_distance(origin, destination), self.config.provider_timeout_s
            )
        except DistanceUnavailable:
            raise
        except asyncio.TimeoutError as e:
            raise DistanceUnavailable(f"distance lookup timed out after {self.config.provider_timeout_s}s", cause=e)
        except Exception as e:
            raise DistanceUnavailable(f"distance lookup failed: {e}", cause=e)
        for value in (result.distance_km, result.travel_time_hours):
            if not _finite(value) or value < 0:
                raise DistanceUnavailable(f"distance provider returned invalid value {value!r}")
        return result

    async def _explain(self, fuel: FuelPrice, costs: CostBreakdown) -> tuple[str, str]:
        template = render_breakdown(costs)
        if self.explainer is None:
            return template, "template"
        try:
            text = await asyncio.wait_for(
                self.explainer.explain(costs.distance_km, costs.weight_kg, fuel, costs),
                self.config.explain_timeout_s,
            )
        except Exception:
            logger.warning("Explainer failed; using template breakdown", exc_info=True)
            return template, "template"
        if not is_consistent(text, costs):
            logger.warning("Explainer text does not quote the computed figures (total %s); using template breakdown", costs.total)
            return template, "template"
        return text.strip(), "model"

    async def estimate(self, req: EstimateRequest) -> PriceEstimate:
        validate_request(req)
        logger.info(
            "Estimating price %s -> %s, %.1f kg",
            req.pickup.as_param(), req.destination.as_param(), req.load_weight_kg,
        )

        fuel, dist = await asyncio.gather(
            self._fuel_price(), self._distance(req.pickup, req.destination), return_exceptions=True
        )
        # the fuel price failure wins when both lookups fail
        for outcome in (fuel, dist):
            if isinstance(outcome, BaseException):
                logger.error("Price estimation aborted: %s", outcome)
                raise outcome

        if fuel.currency != self.config.currency:
            logger.warning("Fuel price currency %s differs from pricing currency %s", fuel.currency, self.config.currency)

        costs = compute_costs(
            dist.distance_km, dist.travel_time_hours, req.load_weight_kg,
            fuel.price, fuel.currency, req.vehicle_type,
        )
        if not _finite(costs.total) or costs.total < 0:
            raise EstimationInconsistent(
                f"computed price {costs.total!r} from distance {dist.distance_km!r} km, "
                f"weight {req.load_weight_kg!r} kg, fuel {fuel.price!r} {fuel.currency}"
            )

        breakdown, source = await self._explain(fuel, costs)
        estimate = PriceEstimate(
            estimated_price=costs.total,
            breakdown=breakdown,
            distance_km=round(dist.distance_km, 2),
            travel_time_hours=round(dist.travel_time_hours, 2),
            currency=fuel.currency,
            distance_text=dist.distance_text,
            duration_text=dist.duration_text,
            fuel_price=fuel.price,
            vehicle_type=costs.vehicle_type,
            explanation_source=source,
        )
        logger.info("Estimated %s %s for %.2f km", estimate.estimated_price, estimate.currency, estimate.distance_km)
        return estimate


def build_estimator(config: PricingConfig) -> PriceEstimator:
    """Pick providers from config: remote services when configured, local ones otherwise."""
    if config.fuel_price_url:
        fuel_provider = HttpFuelPriceProvider(config.fuel_price_url, config.currency)
    else:
        fuel_provider = MockFuelPriceProvider(config.fuel_base_price, config.fuel_jitter, config.currency)

    if config.google_maps_api_key:
        distance_provider = GoogleDistanceMatrixProvider(config.google_maps_api_key)
    else:
        distance_provider = HaversineDistanceProvider(config.avg_speed_kmh)

    explainer = None
    if config.genai_api_key:
        explainer = GeminiExplainer(config.genai_api_key, config.genai_model)
    else:
        logger.info("No GOOGLE_GENAI_API_KEY set; breakdowns use the built-in template")

    return PriceEstimator(fuel_provider, distance_provider, config, explainer)
