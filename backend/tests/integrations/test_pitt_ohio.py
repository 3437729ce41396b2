import json
from decimal import Decimal

import pytest

from ratehub.integrations.carriers import CarrierHttpClient, PittOhioAdapter
from ratehub.schemas.carrier import QuoteFailureKind

ENDPOINT = "https://pittohio.test/rate"


@pytest.fixture
def tariff(tariff_factory):
    return tariff_factory("pitt_ohio", "PITT-1", access_code="ACC", customer_number="778899")


def _adapter(session):
    return PittOhioAdapter(ENDPOINT, CarrierHttpClient(session=session))


def test_success_reads_net_charge(fake_session_cls, response_factory, tariff, shipment):
    session = fake_session_cls([response_factory(200, json.dumps({"errors": [], "rateQuote": {"netCharge": "412.3"}}))])

    result = _adapter(session).quote(tariff, shipment)

    assert result.cost == Decimal("412.30")
    call = session.calls[0]
    assert call["headers"]["X-Access-Code"] == "ACC"
    payload = json.loads(call["data"])
    assert payload["customerNumber"] == "778899"
    assert payload["origin"] == {"zip": "30301", "country": "US"}
    assert payload["items"] == [{"class": "70", "weight": "500", "pieces": 1}]


def test_canadian_postal_code_accepted(tariff, make_shipment):
    request = make_shipment(destination={"postal_code": "m5v 2t6", "city": "Toronto", "state": "ON", "country": "ca"})
    _adapter(None).validate(request)


@pytest.mark.parametrize(
    "destination",
    [
        {"postal_code": "9021", "city": "X", "state": "CA"},
        {"postal_code": "90210-1234", "city": "X", "state": "CA"},
        {"postal_code": "06000", "city": "Monterrey", "state": "NL", "country": "MX"},
    ],
)
def test_unsupported_postal_codes_are_validation(fake_session_cls, tariff, make_shipment, destination):
    session = fake_session_cls()
    result = _adapter(session).quote(tariff, make_shipment(destination=destination))
    assert result.failure is QuoteFailureKind.VALIDATION
    assert session.calls == []


@pytest.mark.parametrize(
    "status, body, kind",
    [
        (200, {"errors": [{"code": "E12", "message": "No service"}]}, QuoteFailureKind.REJECTED),
        (422, {"errors": ["bad class"]}, QuoteFailureKind.REJECTED),
        (200, {"errors": [], "rateQuote": {}}, QuoteFailureKind.INVALID_RESPONSE),
        (200, {"rateQuote": {"netCharge": "abc"}}, QuoteFailureKind.INVALID_RESPONSE),
        (503, {"rateQuote": {"netCharge": "10"}}, QuoteFailureKind.NETWORK),
        (418, {}, QuoteFailureKind.REJECTED),
    ],
)
def test_response_classification(fake_session_cls, response_factory, tariff, shipment, status, body, kind):
    session = fake_session_cls([response_factory(status, json.dumps(body))])
    assert _adapter(session).quote(tariff, shipment).failure is kind


def test_error_array_message(fake_session_cls, response_factory, tariff, shipment):
    body = json.dumps({"errors": [{"code": "E12", "message": "No service"}]})
    result = _adapter(fake_session_cls([response_factory(200, body)])).quote(tariff, shipment)
    assert "E12: No service" in result.message
