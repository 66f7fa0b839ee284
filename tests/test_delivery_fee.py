"""Delivery zone matching and fee quote tests."""

from datetime import datetime, time
from pathlib import Path
from zoneinfo import ZoneInfo

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from bakery.core.config import settings
from bakery.db import session as db_session
from bakery.db.base import Base
from bakery.main import app
from bakery.models import DeliverySchedule, DeliveryZone
from bakery.services.delivery_fee import (
    NO_ZONE_REASON,
    calculate_delivery_fee,
    normalize_zip,
    pickup_fee_quote,
    select_zone,
)

BOISE = ZoneInfo("America/Boise")
TUESDAY_NOON = datetime(2026, 6, 2, 12, 0, tzinfo=BOISE)


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _seed_zones(session: Session) -> dict[str, int]:
    zones = [
        DeliveryZone(name="Greater Boise", zip_codes=["83702", "83704", "83706"], fee_amount=800, priority=5),
        DeliveryZone(name="Downtown", zip_codes=["83702"], fee_amount=500, priority=10),
        DeliveryZone(name="North End", zip_codes=["83703"], fee_amount=600, priority=1),
        DeliveryZone(name="North End Promo", zip_codes=["83703"], fee_amount=300, priority=1),
        DeliveryZone(name="Retired", zip_codes=["83709"], fee_amount=100, priority=50, is_active=False),
    ]
    session.add_all(zones)
    session.commit()
    return {zone.name: zone.id for zone in zones}


def test_normalize_zip_trims_zip_plus_four() -> None:
    assert normalize_zip(" 83702-1234 ") == "83702"
    assert normalize_zip("83702") == "83702"
    assert normalize_zip(None) == ""


def test_highest_priority_zone_wins(tmp_path: Path) -> None:
    engine = _build_test_engine(tmp_path / "test_fee_priority.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    with testing_session_local() as session:
        ids = _seed_zones(session)
        quote = calculate_delivery_fee(session, "83702")

        assert quote.available
        assert quote.fee_amount == 500
        assert quote.applied_zone == {"id": ids["Downtown"], "name": "Downtown"}
        assert [candidate["name"] for candidate in quote.candidates] == ["Downtown", "Greater Boise"]
        assert quote.breakdown["zone_fee"] == 500
        assert quote.breakdown["adjustments"] == []


def test_priority_tie_goes_to_oldest_zone(tmp_path: Path) -> None:
    engine = _build_test_engine(tmp_path / "test_fee_tie.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    with testing_session_local() as session:
        ids = _seed_zones(session)
        quote = calculate_delivery_fee(session, "83703-0042")
        assert quote.fee_amount == 600
        assert quote.applied_zone["id"] == ids["North End"]

        zones = session.query(DeliveryZone).all()
        assert select_zone(zones, "83703").name == "North End"


def test_unknown_or_inactive_zip_is_unavailable_not_free(tmp_path: Path) -> None:
    engine = _build_test_engine(tmp_path / "test_fee_missing.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    with testing_session_local() as session:
        _seed_zones(session)
        for zip_code in ("99999", "83709", ""):
            quote = calculate_delivery_fee(session, zip_code)
            assert quote.available is False
            assert quote.applied_zone is None
            assert quote.fee_amount == 0
            assert quote.breakdown["adjustments"] == [{"reason": NO_ZONE_REASON, "amount": 0}]


def test_pickup_quote_is_free_and_available() -> None:
    quote = pickup_fee_quote()
    assert quote.available
    assert quote.fee_amount == 0
    assert quote.applied_zone is None
    assert quote.to_dict()["available"] is True


def test_delivery_fee_and_options_endpoints(tmp_path: Path, monkeypatch) -> None:
    engine = _build_test_engine(tmp_path / "test_fee_api.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    monkeypatch.setattr(settings, "business_timezone", "America/Boise")
    monkeypatch.setattr(settings, "delivery_lookahead_weeks", 2)
    monkeypatch.setattr("bakery.services.delivery_dates.business_now", lambda tz=None: TUESDAY_NOON)

    with testing_session_local() as session:
        _seed_zones(session)
        session.add(
            DeliverySchedule(
                name="Thursday delivery",
                day_of_week=4,
                cutoff_day=2,
                cutoff_time=time(23, 59),
                lead_time_days=2,
                delivery_time_window="9:00 AM - 1:00 PM",
            )
        )
        session.commit()

    with TestClient(app) as client:
        response = client.post("/api/v1/fulfillment/delivery-fee", json={"zip_code": "83702-1234"})
        assert response.status_code == 200
        body = response.json()
        assert body["fee_amount"] == 500
        assert body["applied_zone"]["name"] == "Downtown"
        assert body["available"] is True

        response = client.post("/api/v1/fulfillment/delivery-options", json={"zip_code": "83702"})
        assert response.status_code == 200
        body = response.json()
        assert body["available"] is True
        assert [item["date"] for item in body["dates"]] == ["2026-06-04", "2026-06-11"]
        assert body["fee"]["fee_amount"] == 500

        response = client.post("/api/v1/fulfillment/delivery-options", json={"zip_code": "10001"})
        assert response.status_code == 200
        body = response.json()
        assert body["available"] is False
        assert body["dates"] == []
        assert body["fee"]["applied_zone"] is None
