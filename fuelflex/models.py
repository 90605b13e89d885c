from sqlalchemy import Column, Integer, String, DateTime, Float, Enum, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum

from .database import Base

def _now():
    return datetime.now(timezone.utc)

class BookingStatus(str, enum.Enum):
    pending = "pending"              # awaiting confirmation or driver assignment
    confirmed = "confirmed"
    assigned = "assigned"            # driver assigned
    in_transit = "in_transit"
    delivered = "delivered"
    completed = "completed"
    payment_due = "payment_due"
    on_hold = "on_hold"
    cancelled = "cancelled"

class Booking(Base):
    __tablename__ = "bookings"
    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(String, nullable=False, index=True)
    goods_id = Column(String, nullable=True)
    goods_type = Column(String, nullable=False)
    pickup_address = Column(String, nullable=False)
    pickup_lat = Column(Float, nullable=False)
    pickup_lng = Column(Float, nullable=False)
    dropoff_address = Column(String, nullable=False)
    dropoff_lat = Column(Float, nullable=False)
    dropoff_lng = Column(Float, nullable=False)
    weight_kg = Column(Float, nullable=False)
    vehicle_type = Column(String, nullable=True)
    preferred_pickup_date = Column(DateTime, nullable=True)
    special_instructions = Column(Text, default="", nullable=False)
    status = Column(Enum(BookingStatus), default=BookingStatus.pending, nullable=False)
    driver_id = Column(String, nullable=True)  # set when the booking is assigned
    estimated_cost = Column(Float, default=0)
    currency = Column(String, default="INR", nullable=False)
    estimated_distance_km = Column(Float, default=0)
    estimated_duration_hours = Column(Float, default=0)
    created_at = Column(DateTime, default=_now)
    updated_at = Column(DateTime, default=_now, onupdate=_now)
    action_logs = relationship(
        "BookingLog", back_populates="booking", order_by="BookingLog.id", cascade="all, delete-orphan"
    )

class BookingLog(Base):
    __tablename__ = "booking_logs"
    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    actor_id = Column(String, nullable=False)
    action = Column(String, nullable=False)
    created_at = Column(DateTime, default=_now)
    booking = relationship("Booking", back_populates="action_logs")
