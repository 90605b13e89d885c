"""
HTTP tests for transport bookings.

Run with: pytest tests/test_bookings.py -v
"""

import pytest

from fuelflex.bookings import ALLOWED_CHAIN, can_transition
from fuelflex.errors import DistanceUnavailable
from fuelflex.models import BookingStatus


def booking_body(**overrides):
    data = {
        "clientId": "buyer-1",
        "goodsType": "Fruits & Vegetables",
        "pickup": {"address": "Connaught Place, New Delhi", "latitude": 28.6139, "longitude": 77.2090},
        "dropoff": {"address": "Mumbai Central, Mumbai", "latitude": 19.0760, "longitude": 72.8777},
        "weightKg": 1000,
        "specialInstructions": "Keep refrigerated",
    }
    data.update(overrides)
    return data


@pytest.fixture
def booking(client):
    r = client.post("/bookings", json=booking_body())
    assert r.status_code == 201
    return r.json()


class TestCreateBooking:

    def test_priced_on_create(self, booking):
        assert booking["status"] == "pending"
        assert booking["estimatedCost"] == 4689
        assert booking["currency"] == "INR"
        assert booking["estimatedDistanceKm"] == 100.0
        assert booking["estimatedDurationHours"] == 2.0
        assert booking["vehicleType"] == "other"
        assert booking["pickupAddress"] == "Connaught Place, New Delhi"

    def test_action_log_written(self, booking):
        logs = booking["actionLogs"]
        assert len(logs) == 1
        assert logs[0]["action"] == "Booking created"
        assert logs[0]["actorId"] == "buyer-1"

    def test_estimation_failure_rejects_booking(self, client, distance):
        distance.exc = DistanceUnavailable("ZERO_RESULTS")
        r = client.post("/bookings", json=booking_body())
        assert r.status_code == 503
        assert r.json()["error"] == "DistanceUnavailable"
        assert client.get("/bookings", params={"client_id": "buyer-1"}).json() == []

    def test_invalid_weight(self, client, fuel):
        r = client.post("/bookings", json=booking_body(weightKg=0))
        assert r.status_code == 400
        assert fuel.calls == 0


class TestReadBookings:

    def test_get_by_id(self, client, booking):
        r = client.get(f"/bookings/{booking['id']}")
        assert r.status_code == 200
        assert r.json()["id"] == booking["id"]

    def test_missing(self, client):
        assert client.get("/bookings/9999").status_code == 404

    def test_list_by_client_newest_first(self, client, booking):
        second = client.post("/bookings", json=booking_body(goodsType="Electronics")).json()
        client.post("/bookings", json=booking_body(clientId="buyer-2"))

        r = client.get("/bookings", params={"client_id": "buyer-1"})
        ids = [b["id"] for b in r.json()]
        assert ids == [second["id"], booking["id"]]


class TestStatusUpdates:

    def test_allowed_transition(self, client, booking):
        r = client.patch(f"/bookings/{booking['id']}/status", json={"status": "confirmed", "actorId": "admin-1"})
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "confirmed"
        assert data["actionLogs"][-1]["action"] == "Status changed from pending to confirmed"
        assert data["actionLogs"][-1]["actorId"] == "admin-1"

    def test_illegal_transition(self, client, booking):
        r = client.patch(f"/bookings/{booking['id']}/status", json={"status": "delivered"})
        assert r.status_code == 409

    def test_cancelled_is_terminal(self, client, booking):
        url = f"/bookings/{booking['id']}/status"
        assert client.patch(url, json={"status": "cancelled"}).status_code == 200
        assert client.patch(url, json={"status": "pending"}).status_code == 409

    def test_full_lifecycle(self, client, booking):
        url = f"/bookings/{booking['id']}/status"
        for step in ("confirmed", "assigned", "in_transit", "delivered", "payment_due", "completed"):
            r = client.patch(url, json={"status": step, "driverId": "drv-1"})
            assert r.status_code == 200, step
        data = r.json()
        assert len(data["actionLogs"]) == 7
        assert data["driverId"] == "drv-1"

    def test_assign_requires_driver(self, client, booking):
        url = f"/bookings/{booking['id']}/status"
        client.patch(url, json={"status": "confirmed"})
        r = client.patch(url, json={"status": "assigned"})
        assert r.status_code == 422
        current = client.get(f"/bookings/{booking['id']}").json()
        assert current["status"] == "confirmed"
        assert current["driverId"] is None
        assert len(current["actionLogs"]) == 2

    def test_assign_records_driver(self, client, booking):
        url = f"/bookings/{booking['id']}/status"
        client.patch(url, json={"status": "confirmed"})
        r = client.patch(url, json={"status": "assigned", "driverId": "drv-7", "actorId": "admin-1"})
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "assigned"
        assert data["driverId"] == "drv-7"
        assert data["actionLogs"][-1]["action"] == "Status changed from confirmed to assigned, driver drv-7"

    def test_driver_ignored_outside_assignment(self, client, booking):
        r = client.patch(f"/bookings/{booking['id']}/status", json={"status": "confirmed", "driverId": "drv-7"})
        assert r.status_code == 200
        assert r.json()["driverId"] is None

    def test_unknown_status(self, client, booking):
        r = client.patch(f"/bookings/{booking['id']}/status", json={"status": "lost"})
        assert r.status_code == 400
        data = r.json()
        assert data["error"] == "InvalidInput"
        assert data["estimatedPrice"] == 0
        assert data["message"] == "Invalid request, check the listed fields."

    def test_missing_booking(self, client):
        assert client.patch("/bookings/9999/status", json={"status": "confirmed"}).status_code == 404


class TestTransitionTable:

    def test_every_status_listed(self):
        assert set(ALLOWED_CHAIN) == set(BookingStatus)

    def test_terminal_states(self):
        for status in (BookingStatus.completed, BookingStatus.cancelled):
            assert not any(can_transition(status, nxt) for nxt in BookingStatus)

    def test_on_hold_can_resume(self):
        assert can_transition(BookingStatus.in_transit, BookingStatus.on_hold)
        assert can_transition(BookingStatus.on_hold, BookingStatus.confirmed)
