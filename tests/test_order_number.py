from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from tailor_shop.db.base import Base
from tailor_shop.models import Branch, Customer, Order
from tailor_shop.services.order_number import (
    OrderNumberExhaustedError,
    generate_order_number,
    latest_order_number,
    next_order_number,
)


def test_first_order_of_year_starts_at_one() -> None:
    assert next_order_number(None, 2024) == "T-2024-0001"


def test_sequence_increments_with_padding() -> None:
    assert next_order_number("T-2024-0042", 2024) == "T-2024-0043"
    assert next_order_number("T-2024-0999", 2024) == "T-2024-1000"


def test_year_rollover_restarts_sequence() -> None:
    assert next_order_number("T-2023-0157", 2024) == "T-2024-0001"
    assert next_order_number("T-2024-9999", 2025) == "T-2025-0001"


def test_sequence_exhaustion_is_an_error() -> None:
    with pytest.raises(OrderNumberExhaustedError):
        next_order_number("T-2024-9999", 2024)


def test_malformed_suffix_is_rejected() -> None:
    with pytest.raises(ValueError):
        next_order_number("T-2024-00x1", 2024)


def _session() -> Session:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    return Session(engine)


def _add_order(session: Session, customer: Customer, number: str) -> None:
    session.add(
        Order(
            order_number=number,
            customer_id=customer.id,
            branch_id=customer.branch_id,
            description="Suit",
            images=[],
            total_amount=100,
            status="PENDING",
            order_date=date(2024, 1, 2),
            due_date=date(2024, 1, 20),
        )
    )


def test_generate_uses_latest_number_of_the_year() -> None:
    with _session() as session:
        branch = Branch(name="Accra Central", location="Accra")
        session.add(branch)
        session.flush()
        customer = Customer(full_name="Ama Mensah", phone_number="0241234567", branch_id=branch.id)
        session.add(customer)
        session.flush()
        _add_order(session, customer, "T-2023-0500")
        _add_order(session, customer, "T-2024-0009")
        _add_order(session, customer, "T-2024-0010")
        session.commit()

        assert latest_order_number(session, 2024) == "T-2024-0010"
        assert generate_order_number(session, 2024) == "T-2024-0011"
        assert generate_order_number(session, 2025) == "T-2025-0001"
