"""
HTTP tests for the pricing routes.

Run with: pytest tests/test_api.py -v
"""

from fuelflex.errors import FuelPriceUnavailable


def body(**overrides):
    data = {
        "pickupLatitude": 28.6139,
        "pickupLongitude": 77.2090,
        "destinationLatitude": 19.0760,
        "destinationLongitude": 72.8777,
        "loadWeightKg": 1000,
    }
    data.update(overrides)
    return data


class TestHealth:

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["ok"] is True


class TestCalculatePrice:

    def test_success_shape(self, client):
        r = client.post("/api/calculate-price", json=body())
        assert r.status_code == 200
        data = r.json()
        assert data["estimatedPrice"] == 4689
        assert data["distanceKm"] == 100.0
        assert data["travelTimeHours"] == 2.0
        assert data["currency"] == "INR"
        assert data["explanationSource"] == "template"
        assert "4,689 INR" in data["breakdown"]

    def test_vehicle_type(self, client):
        r = client.post("/api/calculate-price", json=body(vehicleType="large_truck"))
        assert r.status_code == 200
        assert r.json()["vehicleType"] == "large_truck"
        assert r.json()["estimatedPrice"] == 5514

    def test_unknown_vehicle_type_rejected(self, client):
        r = client.post("/api/calculate-price", json=body(vehicleType="hovercraft"))
        assert r.status_code == 400

    def test_negative_weight_rejected_without_provider_calls(self, client, fuel, distance):
        r = client.post("/api/calculate-price", json=body(loadWeightKg=-5))
        assert r.status_code == 400
        assert r.json()["error"] == "InvalidInput"
        assert fuel.calls == 0
        assert distance.calls == 0

    def test_latitude_out_of_range(self, client, fuel):
        r = client.post("/api/calculate-price", json=body(pickupLatitude=95))
        assert r.status_code == 400
        data = r.json()
        assert data["error"] == "InvalidInput"
        assert data["stage"] == "validate"
        assert data["estimatedPrice"] == 0
        assert data["currency"] == "INR"
        assert data["breakdown"].startswith("Error:")
        assert data["message"] == "Invalid location or load details."
        assert data["details"][0]["loc"] == ["body", "pickupLatitude"]
        assert fuel.calls == 0

    def test_missing_field(self, client):
        data = body()
        del data["loadWeightKg"]
        r = client.post("/api/calculate-price", json=data)
        assert r.status_code == 400

    def test_non_numeric_field(self, client):
        r = client.post("/api/calculate-price", json=body(pickupLongitude="east"))
        assert r.status_code == 400

    def test_fuel_price_outage(self, client, fuel):
        fuel.exc = FuelPriceUnavailable("feed returned HTTP 502")
        r = client.post("/api/calculate-price", json=body())
        assert r.status_code == 503
        data = r.json()
        assert data["error"] == "FuelPriceUnavailable"
        assert data["stage"] == "fuel_price"
        assert data["retryable"] is True
        assert data["estimatedPrice"] == 0
        assert data["breakdown"].startswith("Error:")
        assert data["currency"] == "INR"

    def test_distance_outage(self, client, distance):
        distance.exc = RuntimeError("maps down")
        r = client.post("/api/calculate-price", json=body())
        assert r.status_code == 503
        assert r.json()["error"] == "DistanceUnavailable"

    def test_inconsistent_price(self, client, fuel):
        fuel.price = 1e308
        r = client.post("/api/calculate-price", json=body())
        assert r.status_code == 500
        assert r.json()["error"] == "EstimationInconsistent"

    def test_usage(self, client):
        r = client.get("/api/calculate-price")
        assert r.status_code == 200
        props = r.json()["schema"]["properties"]
        assert "pickupLatitude" in props
        assert "loadWeightKg" in props

