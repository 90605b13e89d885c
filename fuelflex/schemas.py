from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Literal, Optional, List

from .distance import Coordinates
from .estimator import EstimateRequest, PriceEstimate
from .models import BookingStatus

VehicleType = Literal[
    "small_truck", "medium_truck", "large_truck", "van", "container_truck", "tanker", "other"
]

class CamelModel(BaseModel):
    # JSON uses camelCase; Python code may still pass snake_case names
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class PriceRequest(CamelModel):
    pickup_latitude: float = Field(ge=-90, le=90)
    pickup_longitude: float = Field(ge=-180, le=180)
    destination_latitude: float = Field(ge=-90, le=90)
    destination_longitude: float = Field(ge=-180, le=180)
    load_weight_kg: float = Field(gt=0)
    vehicle_type: Optional[VehicleType] = None

    def to_estimate_request(self) -> EstimateRequest:
        return EstimateRequest(
            pickup=Coordinates(self.pickup_latitude, self.pickup_longitude),
            destination=Coordinates(self.destination_latitude, self.destination_longitude),
            load_weight_kg=self.load_weight_kg,
            vehicle_type=self.vehicle_type,
        )

class PriceResponse(CamelModel):
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

    @classmethod
    def from_estimate(cls, est: PriceEstimate) -> "PriceResponse":
        return cls(
            estimated_price=est.estimated_price,
            breakdown=est.breakdown,
            distance_km=est.distance_km,
            travel_time_hours=est.travel_time_hours,
            currency=est.currency,
            distance_text=est.distance_text,
            duration_text=est.duration_text,
            fuel_price=est.fuel_price,
            vehicle_type=est.vehicle_type,
            explanation_source=est.explanation_source,
        )

# --- bookings ---

class Location(CamelModel):
    address: str = Field(min_length=1)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

class BookingCreate(CamelModel):
    client_id: str = Field(min_length=1)
    goods_id: Optional[str] = None
    goods_type: str = Field(min_length=1)
    pickup: Location
    dropoff: Location
    weight_kg: float = Field(gt=0)
    vehicle_type: Optional[VehicleType] = None
    preferred_pickup_date: Optional[datetime] = None
    special_instructions: str = ""

    def to_estimate_request(self) -> EstimateRequest:
        return EstimateRequest(
            pickup=Coordinates(self.pickup.latitude, self.pickup.longitude),
            destination=Coordinates(self.dropoff.latitude, self.dropoff.longitude),
            load_weight_kg=self.weight_kg,
            vehicle_type=self.vehicle_type,
        )

class ActionLogOut(CamelModel):
    actor_id: str
    action: str
    created_at: datetime
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class BookingOut(CamelModel):
    id: int
    client_id: str
    goods_id: Optional[str] = None
    goods_type: str
    pickup_address: str
    pickup_lat: float
    pickup_lng: float
    dropoff_address: str
    dropoff_lat: float
    dropoff_lng: float
    weight_kg: float
    vehicle_type: Optional[str] = None
    preferred_pickup_date: Optional[datetime] = None
    special_instructions: str
    status: BookingStatus
    driver_id: Optional[str] = None
    estimated_cost: float
    currency: str
    estimated_distance_km: float
    estimated_duration_hours: float
    created_at: datetime
    updated_at: datetime
    action_logs: List[ActionLogOut] = []
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class StatusUpdate(CamelModel):
    status: Literal[
        "pending", "confirmed", "assigned", "in_transit", "delivered",
        "completed", "payment_due", "on_hold", "cancelled",
    ]
    actor_id: str = "system"
    driver_id: Optional[str] = None
