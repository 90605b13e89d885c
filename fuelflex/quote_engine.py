# --- fuelflex/quote_engine.py -----------------------------------------------
# Transport cost policy; pure functions, no external APIs.

from dataclasses import dataclass
from typing import Optional
import math

# kmpl: truck fuel efficiency, mult: overhead multiplier, margin: profit margin
VEHICLE = {
    "small_truck":     {"kmpl": 12.0, "mult": 0.80, "margin": 0.18},
    "medium_truck":    {"kmpl": 7.0,  "mult": 1.00, "margin": 0.20},
    "large_truck":     {"kmpl": 4.0,  "mult": 1.35, "margin": 0.20},
    "van":             {"kmpl": 10.0, "mult": 0.85, "margin": 0.18},
    "container_truck": {"kmpl": 3.5,  "mult": 1.50, "margin": 0.22},
    "tanker":          {"kmpl": 3.5,  "mult": 1.45, "margin": 0.25},
    "other":           {"kmpl": 5.0,  "mult": 1.00, "margin": 0.20},
}
DEFAULT_VEHICLE = "other"

DRIVER_WAGE_PER_HOUR = 150.0
MAINTENANCE_PER_KM = 3.0
HANDLING_PER_KG = 0.75
FIXED_OVERHEAD = 500.0
MAX_LOAD_PENALTY = 0.25
FULL_PENALTY_KG = 40000.0

def _clamp(n, a, b): return max(a, min(b, n))

def _load_factor(weight_kg): return 1.0 + _clamp(weight_kg / FULL_PENALTY_KG, 0.0, MAX_LOAD_PENALTY)


@dataclass(frozen=True)
class CostBreakdown:
    distance_km: float
    travel_time_hours: float
    weight_kg: float
    vehicle_type: str
    fuel_price: float
    currency: str
    fuel_litres: float
    fuel_cost: float
    driver_cost: float
    maintenance_cost: float
    handling_cost: float
    overhead_cost: float
    operating_cost: float
    margin_rate: float
    margin_amount: float
    total: float


def compute_costs(
    distance_km, travel_time_hours, weight_kg, fuel_price, currency, vehicle_type: Optional[str] = None
) -> CostBreakdown:
    name = vehicle_type if vehicle_type in VEHICLE else DEFAULT_VEHICLE
    v = VEHICLE[name]
    load = _load_factor(weight_kg)

    litres = distance_km / v["kmpl"] * load
    fuel = litres * fuel_price
    driver = travel_time_hours * DRIVER_WAGE_PER_HOUR
    maintenance = distance_km * MAINTENANCE_PER_KM * load
    handling = weight_kg * HANDLING_PER_KG
    overhead = FIXED_OVERHEAD * v["mult"]

    operating = fuel + driver + maintenance + handling + overhead
    margin = operating * v["margin"]
    total = operating + margin
    if math.isfinite(total):
        total = round(total)

    return CostBreakdown(
        distance_km=distance_km,
        travel_time_hours=travel_time_hours,
        weight_kg=weight_kg,
        vehicle_type=name,
        fuel_price=fuel_price,
        currency=currency,
        fuel_litres=round(litres, 2),
        fuel_cost=round(fuel, 2),
        driver_cost=round(driver, 2),
        maintenance_cost=round(maintenance, 2),
        handling_cost=round(handling, 2),
        overhead_cost=round(overhead, 2),
        operating_cost=round(operating, 2),
        margin_rate=v["margin"],
        margin_amount=round(margin, 2),
        total=total,
    )


def format_amount(amount, currency):
    return f"{amount:,.2f} {currency}"


def render_breakdown(c: CostBreakdown) -> str:
    """Itemized, deterministic explanation of a CostBreakdown."""
    cur = c.currency
    lines = [
        f"Distance: {c.distance_km:.2f} km, about {c.travel_time_hours:.1f} h of driving",
        f"Vehicle profile: {c.vehicle_type.replace('_', ' ')}, load {c.weight_kg:g} kg",
        f"Fuel: {c.fuel_litres:.2f} L at {format_amount(c.fuel_price, cur)}/L = {format_amount(c.fuel_cost, cur)}",
        f"Driver wages: {c.travel_time_hours:.1f} h at {format_amount(DRIVER_WAGE_PER_HOUR, cur)}/h = {format_amount(c.driver_cost, cur)}",
        f"Maintenance and wear: {format_amount(c.maintenance_cost, cur)}",
        f"Loading and handling: {format_amount(c.handling_cost, cur)}",
        f"Fixed overhead: {format_amount(c.overhead_cost, cur)}",
        f"Operating cost: {format_amount(c.operating_cost, cur)}",
        f"Margin ({c.margin_rate:.0%}): {format_amount(c.margin_amount, cur)}",
        f"Estimated total: {c.total:,.0f} {cur}",
        "Tolls and state taxes may apply and are not included.",
    ]
    return "\n".join(lines)
