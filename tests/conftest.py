"""
Shared fixtures: listing payloads in upstream wire format, a counting fake
upstream and a fixed clock.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from listings_api.core.cache import BucketCache
from listings_api.data.base import VIVAREAL_BOUNDING_BOX
from listings_api.schemas import Listing
from listings_api.services.geofence import GeoFence
from listings_api.services.populator import CachePopulator
from listings_api.services.properties_service import PropertiesService

# Well inside the trade region
INSIDE = (-23.557, -46.667)
# Sao Paulo, but outside the trade region
OUTSIDE = (-23.502, -46.620)

FIXED_NOW = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)


def listing_payload(
    id="L1",
    business_type="SALE",
    price="650000",
    usable_areas=70,
    condo_fee="",
    location=OUTSIDE,
    updated_at="2016-11-16T04:14:02Z",
):
    """One upstream record, shaped like the catalog (prices as strings)."""
    lat, lon = location
    return {
        "usableAreas": usable_areas,
        "listingType": "USED",
        "createdAt": "2016-11-16T04:14:02Z",
        "listingStatus": "ACTIVE",
        "id": id,
        "parkingSpaces": 1,
        "updatedAt": updated_at,
        "owner": False,
        "images": ["https://example.com/1.jpg"],
        "address": {
            "city": "São Paulo",
            "neighborhood": "Pinheiros",
            "geoLocation": {"precision": "ROOFTOP", "location": {"lon": lon, "lat": lat}},
        },
        "bathrooms": 2,
        "bedrooms": 2,
        "pricingInfos": {
            "yearlyIptu": "60",
            "price": price,
            "businessType": business_type,
            "monthlyCondoFee": condo_fee,
        },
    }


def make_listing(**kwargs) -> Listing:
    return Listing.model_validate(listing_payload(**kwargs))


class FakeSource:
    """Upstream double that counts fetches; optionally blocks until released."""

    def __init__(self, payloads=(), error=None, gate: asyncio.Event | None = None):
        self.payloads = list(payloads)
        self.error = error
        self.gate = gate
        self.calls = 0

    async def fetch_all(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return [Listing.model_validate(p) for p in self.payloads]


class FakeTimer:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def fence():
    return GeoFence.from_bounds(VIVAREAL_BOUNDING_BOX)


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
def cache(timer):
    return BucketCache(ttl_seconds=600, timer=timer)


@pytest.fixture
def populator(cache, fence):
    return CachePopulator(cache, fence, clock=lambda: FIXED_NOW)


@pytest.fixture
def make_service(cache, populator):
    def _make(source):
        return PropertiesService(source=source, cache=cache, populator=populator)
    return _make
