"""Branch isolation and role enforcement across the HTTP API."""

from datetime import timedelta
from decimal import Decimal
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from tailor_shop.core.config import settings
from tailor_shop.core.security import get_password_hash
from tailor_shop.db import session as db_session
from tailor_shop.db.base import Base
from tailor_shop.main import app
from tailor_shop.models import Branch, Customer, Order, User
from tailor_shop.utils.time import local_today

PASSWORD = "secret123"


def _prepare_db(tmp_path: Path, monkeypatch):
    engine = create_engine(f"sqlite:///{tmp_path / 'access.db'}", connect_args={"check_same_thread": False})
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    return testing_session_local


def _seed(session_local) -> dict[str, int]:
    with session_local() as db:
        accra = Branch(name="Accra", location="Osu")
        kumasi = Branch(name="Kumasi", location="Adum")
        db.add_all([accra, kumasi])
        db.flush()
        hashed = get_password_hash(PASSWORD)
        db.add_all(
            [
                User(name="Admin", email="admin@shop.test", password_hash=hashed, role="ADMIN"),
                User(name="Kofi", email="kofi@shop.test", password_hash=hashed, role="STAFF", branch_id=accra.id),
                User(name="Yaw", email="yaw@shop.test", password_hash=hashed, role="STAFF", branch_id=kumasi.id),
                User(name="Esi", email="esi@shop.test", password_hash=hashed, role="VIEWER", branch_id=accra.id),
            ]
        )
        customer = Customer(full_name="Ama Mensah", phone_number="0241234567", branch_id=accra.id)
        db.add(customer)
        db.flush()
        order = Order(
            order_number="T-2024-0001",
            customer_id=customer.id,
            branch_id=accra.id,
            description="Kente suit",
            images=[],
            total_amount=Decimal("300.00"),
            order_date=local_today(),
            due_date=local_today() + timedelta(days=4),
        )
        db.add(order)
        db.commit()
        return {"accra": accra.id, "kumasi": kumasi.id, "customer": customer.id, "order": order.id}


def _login(client: TestClient, email: str) -> dict[str, str]:
    response = client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_login_and_me(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    _seed(session_local)

    with TestClient(app) as client:
        bad = client.post("/api/v1/auth/login", json={"email": "kofi@shop.test", "password": "nope"})
        headers = _login(client, "KOFI@shop.test")
        me = client.get("/api/v1/auth/me", headers=headers)
        anonymous = client.get("/api/v1/orders")

    assert bad.status_code == 401
    assert me.status_code == 200
    assert me.json()["role"] == "STAFF"
    assert me.json()["branch_name"] == "Accra"
    assert anonymous.status_code in {401, 403}


def test_other_branch_order_looks_missing(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    ids = _seed(session_local)

    with TestClient(app) as client:
        outsider = _login(client, "yaw@shop.test")
        owner = _login(client, "kofi@shop.test")
        admin = _login(client, "admin@shop.test")

        cross = client.get(f"/api/v1/orders/{ids['order']}", headers=outsider)
        missing = client.get("/api/v1/orders/9999", headers=outsider)
        own = client.get(f"/api/v1/orders/{ids['order']}", headers=owner)
        any_branch = client.get(f"/api/v1/orders/{ids['order']}", headers=admin)
        cross_customer = client.get(f"/api/v1/customers/{ids['customer']}", headers=outsider)
        cross_payment = client.post(
            "/api/v1/payments",
            json={"order_id": ids["order"], "amount": "10.00", "payment_method": "CASH"},
            headers=outsider,
        )
        outsider_list = client.get("/api/v1/orders", headers=outsider)
        outsider_customers = client.get("/api/v1/customers", headers=outsider)

    assert cross.status_code == 404
    assert cross.json() == missing.json() == {"detail": "Order not found"}
    assert own.status_code == 200
    assert own.json()["urgency"] == "warning-5"
    assert any_branch.status_code == 200
    assert cross_customer.status_code == 404
    assert cross_payment.status_code == 404
    assert outsider_list.json() == []
    assert outsider_customers.json() == []


def test_viewer_is_read_only(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    ids = _seed(session_local)

    with TestClient(app) as client:
        viewer = _login(client, "esi@shop.test")
        listing = client.get("/api/v1/orders", headers=viewer)
        create = client.post(
            "/api/v1/customers",
            json={"full_name": "Kwesi", "phone_number": "0200000000"},
            headers=viewer,
        )
        pay = client.post(
            "/api/v1/payments",
            json={"order_id": ids["order"], "amount": "10.00"},
            headers=viewer,
        )

    assert listing.status_code == 200
    assert len(listing.json()) == 1
    assert create.status_code == 403
    assert pay.status_code == 403


def test_customer_branch_assignment_rules(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    ids = _seed(session_local)

    with TestClient(app) as client:
        staff = _login(client, "kofi@shop.test")
        admin = _login(client, "admin@shop.test")

        redirected = client.post(
            "/api/v1/customers",
            json={"full_name": "Kwesi Appiah", "phone_number": "0207654321", "branch_id": ids["kumasi"]},
            headers=staff,
        )
        admin_without_branch = client.post(
            "/api/v1/customers",
            json={"full_name": "Efua", "phone_number": "0551112222"},
            headers=admin,
        )
        staff_move = client.patch(
            f"/api/v1/customers/{ids['customer']}",
            json={"branch_id": ids["kumasi"]},
            headers=staff,
        )
        admin_move = client.patch(
            f"/api/v1/customers/{ids['customer']}",
            json={"branch_id": ids["kumasi"]},
            headers=admin,
        )
        search = client.get("/api/v1/customers", params={"search": "appiah"}, headers=staff)

    assert redirected.status_code == 201
    assert redirected.json()["branch_id"] == ids["accra"]
    assert admin_without_branch.status_code == 400
    assert staff_move.status_code == 403
    assert admin_move.status_code == 200
    assert admin_move.json()["branch_id"] == ids["kumasi"]
    assert [row["full_name"] for row in search.json()] == ["Kwesi Appiah"]


def test_moving_a_customer_takes_their_orders_along(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    ids = _seed(session_local)

    with TestClient(app) as client:
        admin = _login(client, "admin@shop.test")
        accra_staff = _login(client, "kofi@shop.test")
        kumasi_staff = _login(client, "yaw@shop.test")

        moved = client.patch(
            f"/api/v1/customers/{ids['customer']}",
            json={"branch_id": ids["kumasi"]},
            headers=admin,
        )
        kumasi_customer = client.get(f"/api/v1/customers/{ids['customer']}", headers=kumasi_staff)
        kumasi_order = client.get(f"/api/v1/orders/{ids['order']}", headers=kumasi_staff)
        kumasi_list = client.get("/api/v1/orders", headers=kumasi_staff)
        accra_customer = client.get(f"/api/v1/customers/{ids['customer']}", headers=accra_staff)
        accra_order = client.get(f"/api/v1/orders/{ids['order']}", headers=accra_staff)
        accra_list = client.get("/api/v1/orders", headers=accra_staff)

    assert moved.status_code == 200
    assert [(order["order_number"], order["branch_id"]) for order in moved.json()["orders"]] == [
        ("T-2024-0001", ids["kumasi"])
    ]
    assert kumasi_customer.status_code == 200
    assert [order["branch_id"] for order in kumasi_customer.json()["orders"]] == [ids["kumasi"]]
    assert kumasi_order.status_code == 200
    assert [order["id"] for order in kumasi_list.json()] == [ids["order"]]
    assert accra_customer.status_code == 404
    assert accra_order.status_code == 404
    assert accra_list.json() == []

    with session_local() as db:
        order = db.get(Order, ids["order"])
        assert order.branch_id == db.get(Customer, ids["customer"]).branch_id == ids["kumasi"]


def test_user_management_is_admin_only(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    ids = _seed(session_local)

    with TestClient(app) as client:
        staff = _login(client, "kofi@shop.test")
        admin = _login(client, "admin@shop.test")

        staff_list = client.get("/api/v1/users", headers=staff)
        unassigned = client.post(
            "/api/v1/users",
            json={"name": "Adjoa", "email": "adjoa@shop.test", "password": "secret123", "role": "STAFF"},
            headers=admin,
        )
        created = client.post(
            "/api/v1/users",
            json={
                "name": "Adjoa",
                "email": "adjoa@shop.test",
                "password": "secret123",
                "role": "viewer",
                "branch_id": ids["kumasi"],
            },
            headers=admin,
        )
        users = client.get("/api/v1/users", headers=admin)
        admin_id = next(user["id"] for user in users.json() if user["email"] == "admin@shop.test")
        self_deactivate = client.patch(f"/api/v1/users/{admin_id}", json={"is_active": False}, headers=admin)
        logs = client.get("/api/v1/activity-logs", params={"entity": "USER"}, headers=admin)

    assert staff_list.status_code == 403
    assert unassigned.status_code == 400
    assert created.status_code == 201
    assert created.json()["role"] == "VIEWER"
    assert self_deactivate.status_code == 400
    assert [row["description"] for row in logs.json()] == ["Created viewer user Adjoa"]


def test_inactive_user_token_is_rejected(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    _seed(session_local)

    with TestClient(app) as client:
        headers = _login(client, "kofi@shop.test")
        with session_local() as db:
            user = db.query(User).filter(User.email == "kofi@shop.test").one()
            user.is_active = False
            db.commit()
        response = client.get("/api/v1/auth/me", headers=headers)

    assert response.status_code == 401


def test_branch_summary_is_gated(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    ids = _seed(session_local)

    with TestClient(app) as client:
        outsider = _login(client, "yaw@shop.test")
        owner = _login(client, "kofi@shop.test")
        denied = client.get(f"/api/v1/activity-logs/summary/branches/{ids['accra']}", headers=outsider)
        allowed = client.get(f"/api/v1/activity-logs/summary/branches/{ids['accra']}", headers=owner)
        branches = client.get("/api/v1/branches", headers=owner)
        create_branch = client.post("/api/v1/branches", json={"name": "Tamale"}, headers=owner)

    assert denied.status_code == 404
    assert allowed.status_code == 200
    assert allowed.json()["total_activities"] == 0
    accra = next(row for row in branches.json() if row["name"] == "Accra")
    assert (accra["user_count"], accra["customer_count"], accra["order_count"]) == (2, 1, 1)
    assert create_branch.status_code == 403


def test_reminder_run_requires_secret_or_admin(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    _seed(session_local)

    with TestClient(app) as client:
        staff = _login(client, "kofi@shop.test")
        admin = _login(client, "admin@shop.test")
        anonymous = client.post("/api/v1/notifications/reminders/run")
        wrong_secret = client.post("/api/v1/notifications/reminders/run", headers={"X-Cron-Secret": "guess"})
        as_staff = client.post("/api/v1/notifications/reminders/run", headers=staff)
        with_secret = client.post(
            "/api/v1/notifications/reminders/run",
            headers={"X-Cron-Secret": settings.cron_secret},
        )
        as_admin = client.post("/api/v1/notifications/reminders/run", headers=admin)

    assert anonymous.status_code == 401
    assert wrong_secret.status_code == 401
    assert as_staff.status_code == 401
    assert with_secret.status_code == 200
    assert with_secret.json()["total_orders"] == 1
    assert with_secret.json()["notifications_sent"] == 1
    assert as_admin.status_code == 200
