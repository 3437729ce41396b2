"""Shared fixtures: in-memory history DB, pricing context, shipment builders, fake HTTP session."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Iterable, List, Optional

import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ratehub.db.base import Base
from ratehub.db.model import QuoteHistory  # noqa: F401  确保模型注册到 Base.metadata
from ratehub.schemas.carrier import TariffAccount
from ratehub.schemas.shipment import ShipmentRequest
from ratehub.services.pricing.context import PricingContext


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: needs live carrier credentials / network")


@pytest.fixture
def session_factory():
    """Attach an in-memory SQLite session factory shared across threads."""
    engine = create_engine(
        "sqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    yield factory
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def ctx() -> PricingContext:
    return PricingContext(
        endpoints={
            "estes": "https://estes.test/rating",
            "aaa_cooper": "https://aaacooper.test/rate",
            "pitt_ohio": "https://pittohio.test/rate",
        },
        connect_timeout=1.0,
        read_timeout=2.0,
        run_timeout=5.0,
        max_workers=4,
        default_margin_pct=Decimal("20"),
        weight_tolerance_pct=Decimal("10"),
        history_window_months=12,
    )


def _shipment(
    origin_zip: str = "30301",
    dest_zip: str = "90210",
    weight: Any = 500,
    freight_class: Any = "70",
    **overrides,
) -> ShipmentRequest:
    data = {
        "origin": {"postal_code": origin_zip, "city": "Atlanta", "state": "GA"},
        "destination": {"postal_code": dest_zip, "city": "Beverly Hills", "state": "CA"},
        "commodities": [
            {"weight": weight, "freight_class": freight_class, "length": 48, "width": 40, "height": 40}
        ],
        "payer": "shipper",
    }
    data.update(overrides)
    return ShipmentRequest.model_validate(data)


@pytest.fixture
def make_shipment() -> Callable[..., ShipmentRequest]:
    return _shipment


@pytest.fixture
def shipment() -> ShipmentRequest:
    return _shipment()


def make_tariff(carrier_id: str, name: str, margin: Optional[str] = None, **credentials) -> TariffAccount:
    return TariffAccount(
        carrier_id=carrier_id,
        name=name,
        credentials=credentials,
        margin_pct=Decimal(margin) if margin is not None else None,
    )


@pytest.fixture
def tariff_factory() -> Callable[..., TariffAccount]:
    return make_tariff


def make_response(status: int = 200, body: Any = b"", content_type: str = "application/json") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = body.encode("utf-8") if isinstance(body, str) else body
    resp.headers["Content-Type"] = content_type
    resp.encoding = "utf-8"
    return resp


class FakeSession:
    """Stands in for requests.Session: replays queued responses / exceptions and records calls."""

    def __init__(self, outcomes: Iterable[Any] = ()) -> None:
        self.outcomes: List[Any] = list(outcomes)
        self.calls: List[dict] = []

    def post(self, url, data=None, headers=None, params=None, timeout=None):
        self.calls.append({"url": url, "data": data, "headers": headers, "params": params, "timeout": timeout})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self) -> None:
        pass


@pytest.fixture
def fake_session_cls():
    return FakeSession


@pytest.fixture
def response_factory():
    return make_response
