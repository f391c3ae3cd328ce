from typing import Protocol, List
from dataclasses import dataclass

from ..schemas import Listing

# ----- Data shapes (thin & explicit) -----

@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lon: float

@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

# Trade region where channel price adjustments apply
VIVAREAL_BOUNDING_BOX = BoundingBox(
    min_lat=-23.568704,
    min_lon=-46.693419,
    max_lat=-23.546686,
    max_lon=-46.641146,
)

# ----- Protocols (interfaces) -----

class ListingsSource(Protocol):
    async def fetch_all(self) -> List[Listing]: ...
