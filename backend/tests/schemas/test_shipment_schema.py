from decimal import Decimal

import pytest
from pydantic import ValidationError

from ratehub.schemas.shipment import CommodityLine, Location, ShipmentRequest


def test_location_normalization():
    loc = Location(postal_code=" m5v 2t6 ", city="  Toronto ", state="on", country="ca")
    assert (loc.postal_code, loc.city, loc.state, loc.country) == ("M5V 2T6", "Toronto", "ON", "CA")
    assert loc.zip3 == "M5V"


@pytest.mark.parametrize("state", ["Georgia", "G1"])
def test_bad_state_rejected(state):
    with pytest.raises(ValidationError):
        Location(postal_code="30301", state=state)


def test_blank_city_and_state_become_none():
    loc = Location(postal_code="30301", city="  ", state=" ")
    assert loc.city is None and loc.state is None


@pytest.mark.parametrize("raw, expected", [(55, "55"), (" 70 ", "70"), (77.5, "77.5"), (Decimal("100"), "100")])
def test_freight_class_normalized(raw, expected):
    assert CommodityLine(weight=10, freight_class=raw).freight_class == expected


@pytest.mark.parametrize("weight", [0, -1])
def test_non_positive_weight_rejected(weight):
    with pytest.raises(ValidationError):
        CommodityLine(weight=weight, freight_class="70")


def test_total_weight_and_rating_class(make_shipment):
    request = make_shipment(commodities=[
        {"weight": "120.5", "freight_class": "85"},
        {"weight": 300, "freight_class": "70"},
        {"weight": 300, "freight_class": "100"},
    ])
    assert request.total_weight == Decimal("720.5")
    # 并列最重取第一行
    assert request.rating_class == "70"


def test_has_dimensions():
    assert not CommodityLine(weight=1, freight_class="50", length=1, width=1).has_dimensions
    assert CommodityLine(weight=1, freight_class="50", length=1, width=1, height=1).has_dimensions


def test_empty_shipment_has_no_rating_class(make_shipment):
    request = make_shipment(commodities=[])
    assert request.total_weight == 0
    assert request.rating_class is None


def test_unknown_payer_rejected(make_shipment):
    with pytest.raises(ValidationError):
        make_shipment(payer="broker")


def test_request_is_immutable(shipment):
    with pytest.raises(ValidationError):
        shipment.payer = "consignee"
