import pytest

from listings_api.services.eligibility import (
    VIVAREAL_RULE,
    ZAP_RULE,
    apply_rule,
    condo_fee_acceptable,
    is_vivareal_eligible,
    is_zap_eligible,
    square_meter_acceptable,
)

from conftest import FIXED_NOW, INSIDE, OUTSIDE, make_listing


@pytest.mark.parametrize("price,expected", [("600000", True), ("599999", False), ("1200000", True)])
def test_zap_sale_threshold(price, expected):
    assert is_zap_eligible(make_listing(business_type="SALE", price=price)) is expected


@pytest.mark.parametrize("price,expected", [("700000", True), ("699999", False)])
def test_vivareal_sale_threshold(price, expected):
    assert is_vivareal_eligible(make_listing(business_type="SALE", price=price)) is expected


def test_zap_rental_needs_square_meter_price():
    assert is_zap_eligible(make_listing(business_type="RENTAL", price="4000", usable_areas=1))
    assert not is_zap_eligible(make_listing(business_type="RENTAL", price="4000", usable_areas=2))
    assert not is_zap_eligible(make_listing(business_type="RENTAL", price="3499", usable_areas=0))


@pytest.mark.parametrize("price", ["3500", "10000", "99999999"])
def test_zap_rental_without_usable_area_is_never_eligible(price):
    assert not is_zap_eligible(make_listing(business_type="RENTAL", price=price, usable_areas=0))


def test_square_meter_acceptable():
    assert square_meter_acceptable(7001, 2)
    assert not square_meter_acceptable(7000, 2)
    assert not square_meter_acceptable(7000, 0)
    assert not square_meter_acceptable(7000, -1)


def test_vivareal_rental_condo_fee():
    assert is_vivareal_eligible(make_listing(business_type="RENTAL", price="4000", condo_fee="1000"))
    assert not is_vivareal_eligible(make_listing(business_type="RENTAL", price="4000", condo_fee="1300"))
    assert not is_vivareal_eligible(make_listing(business_type="RENTAL", price="3999", condo_fee="100"))


@pytest.mark.parametrize("condo_fee", ["", "n/a", None])
def test_unparseable_condo_fee_passes(condo_fee):
    assert is_vivareal_eligible(make_listing(business_type="RENTAL", price="4000", condo_fee=condo_fee))


def test_condo_fee_acceptable():
    assert condo_fee_acceptable(None, 100)
    assert condo_fee_acceptable(29.9, 100)
    assert not condo_fee_acceptable(31, 100)


def test_unknown_business_type_is_not_eligible():
    listing = make_listing(business_type="LEASE", price="9000000")
    assert not is_zap_eligible(listing)
    assert not is_vivareal_eligible(listing)


@pytest.mark.parametrize("rule", [ZAP_RULE, VIVAREAL_RULE])
@pytest.mark.parametrize("price", ["", "abc", "1.2.3", None, "NaN"])
def test_unparseable_price_is_rejected(fence, rule, price):
    assert apply_rule(rule, make_listing(price=price), fence, FIXED_NOW) is None


@pytest.mark.parametrize("rule", [ZAP_RULE, VIVAREAL_RULE])
def test_missing_location_is_rejected(fence, rule):
    listing = make_listing(business_type="SALE", price="5000000", location=(0, 0))
    assert apply_rule(rule, listing, fence, FIXED_NOW) is None


def test_zap_discounts_sale_inside_fence(fence):
    listing = make_listing(business_type="SALE", price="650000", location=INSIDE)
    accepted = apply_rule(ZAP_RULE, listing, fence, FIXED_NOW)
    assert accepted.price == pytest.approx(585000.0)
    assert accepted.updated_at == "2024-05-01T12:30:00Z"
    # the source listing is untouched
    assert listing.price == 650000.0
    assert listing.updated_at == "2016-11-16T04:14:02Z"


def test_zap_keeps_price_outside_fence(fence):
    listing = make_listing(business_type="SALE", price="650000", location=OUTSIDE)
    accepted = apply_rule(ZAP_RULE, listing, fence, FIXED_NOW)
    assert accepted is listing


def test_zap_does_not_adjust_rentals_inside_fence(fence):
    listing = make_listing(business_type="RENTAL", price="4000", usable_areas=1, location=INSIDE)
    assert apply_rule(ZAP_RULE, listing, fence, FIXED_NOW).price == 4000.0


def test_vivareal_raises_rental_inside_fence(fence):
    listing = make_listing(business_type="RENTAL", price="4000", condo_fee="100", location=INSIDE)
    accepted = apply_rule(VIVAREAL_RULE, listing, fence, FIXED_NOW)
    assert accepted.price == pytest.approx(6000.0)
    assert accepted.updated_at == "2024-05-01T12:30:00Z"


def test_vivareal_does_not_adjust_sales_inside_fence(fence):
    listing = make_listing(business_type="SALE", price="800000", location=INSIDE)
    assert apply_rule(VIVAREAL_RULE, listing, fence, FIXED_NOW).price == 800000.0
