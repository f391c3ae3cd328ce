"""Per-channel eligibility rules and the price adjustments that go with them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..core.utils import rfc3339
from ..schemas import Listing
from .geofence import GeoFence

SALE = "SALE"
RENTAL = "RENTAL"

ZAP = "zap"
VIVAREAL = "vivareal"

ZAP_MIN_SALE_PRICE = 600_000
ZAP_MIN_RENTAL_PRICE = 3_500
ZAP_MIN_SQUARE_METER_PRICE = 3_500

VIVAREAL_MIN_SALE_PRICE = 700_000
VIVAREAL_MIN_RENTAL_PRICE = 4_000
VIVAREAL_MAX_CONDO_FEE_RATIO = 0.3


def is_priced(listing: Listing) -> bool:
    return listing.price is not None


def has_valid_location(listing: Listing) -> bool:
    """(0, 0) is what upstream sends when it has no coordinates."""
    return not (listing.lat == 0 and listing.lon == 0)


def square_meter_acceptable(price: float, usable_areas: int) -> bool:
    # No usable area means no square-meter price to judge
    if usable_areas <= 0:
        return False
    return price / usable_areas > ZAP_MIN_SQUARE_METER_PRICE


def condo_fee_acceptable(monthly_condo_fee: Optional[float], price: float) -> bool:
    """An unknown condo fee does not count against the listing."""
    if monthly_condo_fee is None:
        return True
    return monthly_condo_fee < price * VIVAREAL_MAX_CONDO_FEE_RATIO


def is_zap_eligible(listing: Listing) -> bool:
    price = listing.price
    if listing.business_type == SALE:
        return price >= ZAP_MIN_SALE_PRICE
    if listing.business_type == RENTAL:
        return price >= ZAP_MIN_RENTAL_PRICE and square_meter_acceptable(price, listing.usable_areas)
    return False


def is_vivareal_eligible(listing: Listing) -> bool:
    price = listing.price
    if listing.business_type == SALE:
        return price >= VIVAREAL_MIN_SALE_PRICE
    if listing.business_type == RENTAL:
        return (
            price >= VIVAREAL_MIN_RENTAL_PRICE
            and condo_fee_acceptable(listing.pricing_infos.monthly_condo_fee, price)
        )
    return False


@dataclass(frozen=True)
class ChannelRule:
    """
    Who gets into a channel's bucket, and how prices inside the geofence are
    adjusted for that channel.
    """
    channel: str
    eligible: Callable[[Listing], bool]
    adjusted_business_type: str
    price_factor: float


ZAP_RULE = ChannelRule(ZAP, is_zap_eligible, adjusted_business_type=SALE, price_factor=0.9)
VIVAREAL_RULE = ChannelRule(VIVAREAL, is_vivareal_eligible, adjusted_business_type=RENTAL, price_factor=1.5)

CHANNEL_RULES: dict[str, ChannelRule] = {rule.channel: rule for rule in (ZAP_RULE, VIVAREAL_RULE)}


def adjust_price(listing: Listing, factor: float, now: datetime) -> Listing:
    """Copy of the listing with its price scaled and updatedAt refreshed."""
    pricing = listing.pricing_infos.model_copy(update={"price": listing.price * factor})
    return listing.model_copy(update={"pricing_infos": pricing, "updated_at": rfc3339(now)})


def apply_rule(rule: ChannelRule, listing: Listing, fence: GeoFence, now: datetime) -> Optional[Listing]:
    """
    Returns the listing as it should be stored in the rule's bucket, or None
    when the listing does not belong there. The input is never modified.
    """
    if not (is_priced(listing) and has_valid_location(listing)):
        return None
    if not rule.eligible(listing):
        return None
    if listing.business_type == rule.adjusted_business_type and fence.contains(listing.lat, listing.lon):
        return adjust_price(listing, rule.price_factor, now)
    return listing
