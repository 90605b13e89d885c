"""Transport booking routes.

A booking is priced on the server when it is created: the client's
coordinates and load go through the same estimator as
``/api/calculate-price`` and the result is stored with the booking. Status
changes follow ``ALLOWED_CHAIN`` and every change is written to the
booking's action log.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from .database import get_db
from .errors import EstimationError
from .estimator import PriceEstimator
from .models import Booking, BookingLog, BookingStatus
from .pricing import error_response, get_estimator
from .schemas import BookingCreate, BookingOut, StatusUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


ALLOWED_CHAIN: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.pending: {BookingStatus.confirmed, BookingStatus.on_hold, BookingStatus.cancelled},
    BookingStatus.confirmed: {BookingStatus.assigned, BookingStatus.on_hold, BookingStatus.cancelled},
    BookingStatus.assigned: {BookingStatus.in_transit, BookingStatus.on_hold, BookingStatus.cancelled},
    BookingStatus.in_transit: {BookingStatus.delivered, BookingStatus.on_hold},
    BookingStatus.on_hold: {BookingStatus.pending, BookingStatus.confirmed, BookingStatus.cancelled},
    BookingStatus.delivered: {BookingStatus.payment_due, BookingStatus.completed},
    BookingStatus.payment_due: {BookingStatus.completed},
    BookingStatus.completed: set(),
    BookingStatus.cancelled: set(),
}


def can_transition(current: BookingStatus, nxt: BookingStatus) -> bool:
    return nxt in ALLOWED_CHAIN.get(current, set())


def _get_or_404(db: Session, booking_id: int) -> Booking:
    booking = db.get(Booking, booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    db: Session = Depends(get_db),
    estimator: PriceEstimator = Depends(get_estimator),
):
    try:
        estimate = await estimator.estimate(payload.to_estimate_request())
    except EstimationError as e:
        logger.warning("Booking for client %s rejected, estimation failed: %s", payload.client_id, e.message)
        return error_response(e, estimator.config.currency)

    booking = Booking(
        client_id=payload.client_id,
        goods_id=payload.goods_id,
        goods_type=payload.goods_type,
        pickup_address=payload.pickup.address,
        pickup_lat=payload.pickup.latitude, pickup_lng=payload.pickup.longitude,
        dropoff_address=payload.dropoff.address,
        dropoff_lat=payload.dropoff.latitude, dropoff_lng=payload.dropoff.longitude,
        weight_kg=payload.weight_kg,
        vehicle_type=estimate.vehicle_type,
        preferred_pickup_date=payload.preferred_pickup_date,
        special_instructions=payload.special_instructions,
        status=BookingStatus.pending,
        estimated_cost=estimate.estimated_price,
        currency=estimate.currency,
        estimated_distance_km=estimate.distance_km,
        estimated_duration_hours=estimate.travel_time_hours,
    )
    booking.action_logs.append(BookingLog(actor_id=payload.client_id, action="Booking created"))
    db.add(booking)
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s created for client %s at %s %s", booking.id, booking.client_id,
                booking.estimated_cost, booking.currency)
    return booking


@router.get("", response_model=List[BookingOut])
def list_bookings(client_id: str, db: Session = Depends(get_db)):
    return (
        db.query(Booking)
        .filter(Booking.client_id == client_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: int, db: Session = Depends(get_db)):
    return _get_or_404(db, booking_id)


@router.patch("/{booking_id}/status", response_model=BookingOut)
def update_booking_status(booking_id: int, payload: StatusUpdate, db: Session = Depends(get_db)):
    booking = _get_or_404(db, booking_id)
    new_status = BookingStatus(payload.status)

    if not can_transition(booking.status, new_status):
        raise HTTPException(
            status_code=409,
            detail=f"Illegal transition {booking.status.value} -> {new_status.value}",
        )

    action = f"Status changed from {booking.status.value} to {new_status.value}"
    if new_status == BookingStatus.assigned:
        if not payload.driver_id:
            raise HTTPException(status_code=422, detail="driver_id is required to assign a booking")
        booking.driver_id = payload.driver_id
        action += f", driver {payload.driver_id}"

    old = booking.status
    booking.status = new_status
    booking.action_logs.append(BookingLog(actor_id=payload.actor_id, action=action))
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s moved %s -> %s by %s", booking.id, old.value, new_status.value, payload.actor_id)
    return booking
