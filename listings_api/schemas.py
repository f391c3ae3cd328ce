from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .core.utils import parse_number

# Prices travel as strings upstream; parse once at ingestion, None if unusable.
ParsedNumber = Annotated[Optional[float], BeforeValidator(parse_number)]


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in code. Frozen so cached buckets stay immutable."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _null_is_missing(cls, data):
        # A null field decodes to its zero value, same as an absent one
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Location(WireModel):
    lat: float = 0.0
    lon: float = 0.0


class GeoLocation(WireModel):
    precision: str = ""
    location: Location = Field(default_factory=Location)


class Address(WireModel):
    city: str = ""
    neighborhood: str = ""
    geo_location: GeoLocation = Field(default_factory=GeoLocation)


class PricingInfos(WireModel):
    price: ParsedNumber = None
    monthly_condo_fee: ParsedNumber = None
    business_type: str = ""
    yearly_iptu: Optional[str] = None
    period: Optional[str] = None
    rental_total_price: Optional[str] = None


class Listing(WireModel):
    id: str = ""
    usable_areas: int = 0
    listing_type: str = ""
    listing_status: str = ""
    created_at: str = ""
    updated_at: str = ""
    parking_spaces: int = 0
    owner: bool = False
    images: list[str] = Field(default_factory=list)
    address: Address = Field(default_factory=Address)
    bathrooms: int = 0
    bedrooms: int = 0
    pricing_infos: PricingInfos = Field(default_factory=PricingInfos)

    @property
    def lat(self) -> float:
        return self.address.geo_location.location.lat

    @property
    def lon(self) -> float:
        return self.address.geo_location.location.lon

    @property
    def price(self) -> Optional[float]:
        return self.pricing_infos.price

    @property
    def business_type(self) -> str:
        return self.pricing_infos.business_type


class PageResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    listings: list[Listing] = Field(default_factory=list)
    page_number: int = Field(0, alias="pageNumber")
    page_size: int = Field(0, alias="pageSize")
    total_count: int = Field(0, alias="propertiestotalCount")


class ErrorBody(BaseModel):
    error: str
