"""Shared fixtures: stub providers with call counters and an API client."""

import os

# must be set before fuelflex.settings is imported
os.environ["FUELFLEX_DATABASE_URL"] = "sqlite://"
os.environ["FUELFLEX_LOG_LEVEL"] = "WARNING"

import pytest

from fuelflex.distance import Coordinates, DistanceResult, calculate_distance
from fuelflex.estimator import PriceEstimator, PricingConfig
from fuelflex.fuel_price import FuelPrice


NEW_YORK = Coordinates(40.7128, -74.0060)
LOS_ANGELES = Coordinates(34.0522, -118.2437)
DELHI = Coordinates(28.6139, 77.2090)
MUMBAI = Coordinates(19.0760, 72.8777)


class StubFuelProvider:
    def __init__(self, price=100.0, currency="INR", exc=None):
        self.price = price
        self.currency = currency
        self.exc = exc
        self.calls = 0

    async def get_fuel_price(self):
        self.calls += 1
        if self.exc is not None:
            raise self.exc
        return FuelPrice(price=self.price, currency=self.currency)


class StubDistanceProvider:
    """Fixed result when ``result`` is given, haversine at 50 km/h otherwise."""

    def __init__(self, result=None, exc=None):
        self.result = result
        self.exc = exc
        self.calls = 0

    async def get_distance(self, origin, destination):
        self.calls += 1
        if self.exc is not None:
            raise self.exc
        if self.result is not None:
            return self.result
        return calculate_distance(origin, destination, 50.0)


@pytest.fixture
def fuel():
    return StubFuelProvider()


@pytest.fixture
def distance():
    return StubDistanceProvider(DistanceResult(distance_km=100.0, travel_time_hours=2.0))


@pytest.fixture
def estimator(fuel, distance):
    return PriceEstimator(fuel, distance, PricingConfig(provider_timeout_s=1.0, explain_timeout_s=1.0))


@pytest.fixture
def client(estimator):
    from fastapi.testclient import TestClient

    from fuelflex.database import Base, engine
    from fuelflex.main import app
    from fuelflex.pricing import get_estimator

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    app.dependency_overrides[get_estimator] = lambda: estimator
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
