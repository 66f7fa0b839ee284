"""Delivery and pickup sub-status tests, including batch updates."""

from datetime import date
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from bakery.core.security import create_access_token
from bakery.db import session as db_session
from bakery.db.base import Base
from bakery.main import app
from bakery.models import AuditLog, Order, User
from bakery.services import fulfillment_status


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _add_order(session: Session, method: str) -> int:
    order = Order(
        customer_name="Sam Rivera",
        customer_email="sam@example.com",
        fulfillment_method=method,
        fulfillment_date=date(2026, 6, 6),
        subtotal=1200,
        total_amount=1272,
        status="confirmed",
        payment_status="paid",
        merchant_provider="stripe",
        delivery_status="pending" if method == "delivery" else None,
        pickup_status="pending" if method == "pickup" else None,
    )
    session.add(order)
    session.commit()
    return order.id


def _setup(tmp_path: Path, monkeypatch, name: str):
    engine = _build_test_engine(tmp_path / name)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)

    sent: list[tuple[int, str]] = []
    monkeypatch.setattr(
        fulfillment_status.email_service,
        "send_fulfillment_update",
        lambda order, new_status: sent.append((order.id, new_status)),
    )

    with testing_session_local() as session:
        admin = User(username="admin", password_hash="unused", role="ADMIN")
        session.add(admin)
        session.commit()
        headers = {"Authorization": f"Bearer {create_access_token({'sub': str(admin.id)})}"}
    return testing_session_local, headers, sent


def test_single_delivery_status_update_with_notification(tmp_path: Path, monkeypatch) -> None:
    testing_session_local, headers, sent = _setup(tmp_path, monkeypatch, "test_fulfillment_single.db")
    with testing_session_local() as session:
        delivery_id = _add_order(session, "delivery")
        pickup_id = _add_order(session, "pickup")

    with TestClient(app) as client:
        response = client.patch(
            f"/api/v1/admin/orders/{delivery_id}/delivery-status",
            json={"status": "out_for_delivery", "notify_customer": True},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["delivery_status"] == "out_for_delivery"
        # Sub-statuses never move the main order status.
        assert response.json()["status"] == "confirmed"

        wrong_method = client.patch(
            f"/api/v1/admin/orders/{pickup_id}/delivery-status",
            json={"status": "out_for_delivery"},
            headers=headers,
        )
        assert wrong_method.status_code == 422

        unknown_status = client.patch(
            f"/api/v1/admin/orders/{pickup_id}/pickup-status",
            json={"status": "delivered"},
            headers=headers,
        )
        assert unknown_status.status_code == 422

        quiet = client.patch(
            f"/api/v1/admin/orders/{pickup_id}/pickup-status",
            json={"status": "ready_for_pickup"},
            headers=headers,
        )
        assert quiet.status_code == 200
        assert quiet.json()["pickup_status"] == "ready_for_pickup"

    assert sent == [(delivery_id, "out_for_delivery")]


def test_batch_update_reports_partial_failures(tmp_path: Path, monkeypatch) -> None:
    testing_session_local, headers, sent = _setup(tmp_path, monkeypatch, "test_fulfillment_batch.db")
    with testing_session_local() as session:
        first = _add_order(session, "delivery")
        second = _add_order(session, "delivery")
        pickup = _add_order(session, "pickup")

    with TestClient(app) as client:
        response = client.post(
            "/api/v1/admin/orders/delivery-status/batch",
            json={"order_ids": [first, pickup, second, 9999, first], "status": "delivered", "notify_customer": True},
            headers=headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["updated"] == [first, second]
        assert [failure["order_id"] for failure in body["failed"]] == [pickup, 9999]
        assert body["failed"][0]["reason"] == f"Order {pickup} is not a delivery order"
        assert body["failed"][1]["reason"] == "Order 9999 not found"

        rejected = client.post(
            "/api/v1/admin/orders/pickup-status/batch",
            json={"order_ids": [pickup], "status": "teleported"},
            headers=headers,
        )
        assert rejected.status_code == 200
        assert rejected.json()["updated"] == []
        assert rejected.json()["failed"][0]["order_id"] == pickup

        empty = client.post(
            "/api/v1/admin/orders/pickup-status/batch",
            json={"order_ids": [], "status": "picked_up"},
            headers=headers,
        )
        assert empty.status_code == 422

    assert sent == [(first, "delivered"), (second, "delivered")]
    with testing_session_local() as session:
        assert session.get(Order, first).delivery_status == "delivered"
        assert session.get(Order, second).delivery_status == "delivered"
        assert session.get(Order, pickup).pickup_status == "pending"
        assert session.query(AuditLog).filter(AuditLog.action_type == "delivery_status_changed").count() == 2


def test_notification_failure_is_swallowed(tmp_path: Path, monkeypatch) -> None:
    testing_session_local, headers, _ = _setup(tmp_path, monkeypatch, "test_fulfillment_email.db")

    def _broken(order, new_status):
        raise RuntimeError("smtp down")

    monkeypatch.setattr(fulfillment_status.email_service, "send_fulfillment_update", _broken)
    with testing_session_local() as session:
        pickup_id = _add_order(session, "pickup")

    with TestClient(app) as client:
        response = client.patch(
            f"/api/v1/admin/orders/{pickup_id}/pickup-status",
            json={"status": "picked_up", "notify_customer": True},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["pickup_status"] == "picked_up"
