"""Order status flow tests for the admin order endpoints."""

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
from bakery.models import AuditLog, Order, OrderItem, Product, User
from bakery.services.order_status import can_transition


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _admin_headers(session: Session) -> dict[str, str]:
    admin = User(username="admin", password_hash="unused", role="ADMIN", email="admin@example.com")
    session.add(admin)
    session.commit()
    return {"Authorization": f"Bearer {create_access_token({'sub': str(admin.id)})}"}


def _add_order(session: Session, product: Product, method: str = "delivery", status: str = "confirmed", quantity: int = 2, payment_status: str = "paid") -> int:
    order = Order(
        customer_name="Jamie Baker",
        customer_email="jamie@example.com",
        fulfillment_method=method,
        fulfillment_date=date(2026, 6, 4),
        subtotal=product.price_cents * quantity,
        total_amount=product.price_cents * quantity,
        status=status,
        payment_status=payment_status,
        merchant_provider="stripe",
        delivery_status="pending" if method == "delivery" else None,
        pickup_status="pending" if method == "pickup" else None,
    )
    order.items = [OrderItem(product_id=product.id, name=product.name, quantity=quantity, price_at_purchase=product.price_cents)]
    session.add(order)
    session.commit()
    return order.id


def test_transition_rules() -> None:
    assert can_transition("pending", "confirmed")
    assert can_transition("confirmed", "in_production", "pickup")
    assert can_transition("in_production", "ready_for_pickup", "pickup")
    assert not can_transition("in_production", "ready_for_pickup", "delivery")
    assert not can_transition("in_production", "out_for_delivery", "pickup")
    assert not can_transition("confirmed", "completed")
    assert not can_transition("completed", "cancelled")
    assert not can_transition("cancelled", "confirmed")


def test_admin_can_progress_delivery_order(tmp_path: Path, monkeypatch) -> None:
    engine = _build_test_engine(tmp_path / "test_status_progress.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)

    with testing_session_local() as setup_session:
        headers = _admin_headers(setup_session)
        product = Product(name="Sourdough", price_cents=900, quantity_available=8)
        setup_session.add(product)
        setup_session.commit()
        order_id = _add_order(setup_session, product)

    with TestClient(app) as client:
        for new_status in ("in_production", "out_for_delivery", "completed"):
            response = client.patch(f"/api/v1/admin/orders/{order_id}/status", json={"status": new_status}, headers=headers)
            assert response.status_code == 200
            assert response.json()["status"] == new_status

        response = client.patch(f"/api/v1/admin/orders/{order_id}/status", json={"status": "cancelled"}, headers=headers)
        assert response.status_code == 422
        assert response.json()["error"]["message"] == "Cannot change order status from completed to cancelled"

        missing = client.patch("/api/v1/admin/orders/9999/status", json={"status": "confirmed"}, headers=headers)
        assert missing.status_code == 404

    with testing_session_local() as verify_session:
        order = verify_session.get(Order, order_id)
        assert order.completed_at is not None
        assert order.status_updated_at is not None
        changes = verify_session.query(AuditLog).filter(AuditLog.action_type == "order_status_changed").order_by(AuditLog.id).all()
        assert len(changes) == 3
        assert changes[-1].before_snapshot["status"] == "out_for_delivery"
        assert changes[-1].actor_identifier == "admin@example.com"


def test_pickup_order_cannot_go_out_for_delivery(tmp_path: Path, monkeypatch) -> None:
    engine = _build_test_engine(tmp_path / "test_status_pickup.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)

    with testing_session_local() as setup_session:
        headers = _admin_headers(setup_session)
        product = Product(name="Baguette", price_cents=500, quantity_available=5)
        setup_session.add(product)
        setup_session.commit()
        order_id = _add_order(setup_session, product, method="pickup", status="in_production")

    with TestClient(app) as client:
        response = client.patch(
            f"/api/v1/admin/orders/{order_id}/status",
            json={"status": "out_for_delivery"},
            headers=headers,
        )
        assert response.status_code == 422

        response = client.patch(
            f"/api/v1/admin/orders/{order_id}/status",
            json={"status": "ready_for_pickup", "admin_notes": "Shelf B"},
            headers=headers,
        )
        assert response.status_code == 200
        assert response.json()["admin_notes"] == "Shelf B"


def test_cancelling_order_restores_stock(tmp_path: Path, monkeypatch) -> None:
    engine = _build_test_engine(tmp_path / "test_status_cancel.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)

    with testing_session_local() as setup_session:
        headers = _admin_headers(setup_session)
        product = Product(name="Sourdough", price_cents=900, quantity_available=8)
        setup_session.add(product)
        setup_session.commit()
        product_id = product.id
        order_id = _add_order(setup_session, product, quantity=2)

    with TestClient(app) as client:
        response = client.patch(f"/api/v1/admin/orders/{order_id}/status", json={"status": "cancelled"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

        listed = client.get("/api/v1/admin/orders", params={"status": "cancelled"}, headers=headers)
        assert [item["id"] for item in listed.json()] == [order_id]
        assert client.get("/api/v1/admin/orders", params={"status": "confirmed"}, headers=headers).json() == []

    with testing_session_local() as verify_session:
        assert verify_session.get(Product, product_id).quantity_available == 10
        assert verify_session.get(Order, order_id).cancelled_at is not None


def test_failing_pending_order_restores_stock(tmp_path: Path, monkeypatch) -> None:
    engine = _build_test_engine(tmp_path / "test_status_payment_failed.db")
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)

    with testing_session_local() as setup_session:
        headers = _admin_headers(setup_session)
        product = Product(name="Sourdough", price_cents=900, quantity_available=6)
        setup_session.add(product)
        setup_session.commit()
        product_id = product.id
        order_id = _add_order(setup_session, product, status="pending", quantity=2, payment_status="pending")

    with TestClient(app) as client:
        response = client.patch(f"/api/v1/admin/orders/{order_id}/status", json={"status": "payment_failed"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["status"] == "payment_failed"
        assert response.json()["payment_status"] == "failed"

    with testing_session_local() as verify_session:
        assert verify_session.get(Product, product_id).quantity_available == 8
