from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from tailor_shop.db.base import Base
from tailor_shop.models import Branch, Customer, Order, Payment
from tailor_shop.services import payment_service
from tailor_shop.services.payment_service import (
    ConcurrentPaymentError,
    InvalidPaymentAmountError,
    PaymentExceedsBalanceError,
    normalize_payment_method,
    record_payment,
    validate_payment,
)


def _payments(*amounts: str) -> list[SimpleNamespace]:
    return [SimpleNamespace(amount=Decimal(amount)) for amount in amounts]


def test_paying_exact_balance_is_allowed() -> None:
    assert validate_payment(Decimal("450.00"), _payments("200.00", "100.00"), Decimal("150.00")) == Decimal("0.00")


def test_one_cent_over_balance_is_rejected() -> None:
    with pytest.raises(PaymentExceedsBalanceError) as excinfo:
        validate_payment(Decimal("450.00"), _payments("200.00", "100.00"), Decimal("150.01"))
    assert "150.00" in str(excinfo.value)


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), "abc", Decimal("NaN")])
def test_non_positive_or_invalid_amounts_are_rejected(amount) -> None:
    with pytest.raises(InvalidPaymentAmountError):
        validate_payment(Decimal("100.00"), [], amount)


def test_payment_method_normalization() -> None:
    assert normalize_payment_method("momo") == "MOMO"
    assert normalize_payment_method(None) == "CASH"
    with pytest.raises(ValueError):
        normalize_payment_method("cheque")


def _session_local() -> sessionmaker:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def _seed_order(session_local: sessionmaker) -> int:
    with session_local() as session:
        branch = Branch(name="Kumasi", location="Adum")
        session.add(branch)
        session.flush()
        customer = Customer(full_name="Kwame Boateng", phone_number="0201112223", branch_id=branch.id)
        session.add(customer)
        session.flush()
        order = Order(
            order_number="T-2024-0001",
            customer_id=customer.id,
            branch_id=branch.id,
            description="Kaftan",
            images=[],
            total_amount=Decimal("450.00"),
            order_date=date(2024, 5, 1),
            due_date=date(2024, 5, 18),
        )
        session.add(order)
        session.commit()
        return order.id


def test_record_payment_returns_new_balance_and_persists() -> None:
    session_local = _session_local()
    order_id = _seed_order(session_local)

    with session_local() as session:
        payment, new_balance = record_payment(
            session,
            order_id=order_id,
            amount=Decimal("200.00"),
            payment_method="cash",
            payment_date=datetime(2024, 5, 2, 10, 0, tzinfo=timezone.utc),
            created_by=None,
        )
        assert payment.id is not None
        assert payment.payment_method == "CASH"
        assert new_balance == Decimal("250.00")

        _, new_balance = record_payment(session, order_id=order_id, amount=Decimal("100.00"), payment_method="MOMO")
        assert new_balance == Decimal("150.00")

    with session_local() as session:
        amounts = session.scalars(select(Payment.amount).where(Payment.order_id == order_id)).all()
        assert sorted(amounts) == [Decimal("100.00"), Decimal("200.00")]


def test_record_payment_over_balance_writes_nothing() -> None:
    session_local = _session_local()
    order_id = _seed_order(session_local)

    with session_local() as session:
        with pytest.raises(PaymentExceedsBalanceError):
            record_payment(session, order_id=order_id, amount=Decimal("450.01"))

    with session_local() as session:
        assert session.scalars(select(Payment)).all() == []


def test_record_payment_for_unknown_order() -> None:
    session_local = _session_local()
    with session_local() as session:
        with pytest.raises(LookupError):
            record_payment(session, order_id=999, amount=Decimal("1.00"))


@pytest.mark.parametrize("amount", [Decimal("0.001"), Decimal("10.005"), "0.009"])
def test_amounts_finer_than_a_cent_are_rejected(amount) -> None:
    with pytest.raises(InvalidPaymentAmountError):
        validate_payment(Decimal("100.00"), [], amount)


def test_trailing_zeros_beyond_cents_are_accepted() -> None:
    assert validate_payment(Decimal("100.00"), [], Decimal("25.500")) == Decimal("74.50")


def test_record_payment_rejects_sub_cent_amount_and_writes_nothing() -> None:
    session_local = _session_local()
    order_id = _seed_order(session_local)

    with session_local() as session:
        with pytest.raises(InvalidPaymentAmountError):
            record_payment(session, order_id=order_id, amount=Decimal("0.001"))

    with session_local() as session:
        assert session.scalars(select(Payment)).all() == []


def test_payment_committed_by_another_session_mid_record_is_a_conflict(tmp_path, monkeypatch) -> None:
    engine = create_engine(f"sqlite:///{tmp_path / 'payments.db'}", future=True)
    Base.metadata.create_all(bind=engine)
    session_local = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    order_id = _seed_order(session_local)

    checked_validate = payment_service.validate_payment

    def validate_then_compete(total_amount, payments, new_amount):
        result = checked_validate(total_amount, payments, new_amount)
        with session_local() as other:
            other.add(
                Payment(
                    order_id=order_id,
                    amount=Decimal("300.00"),
                    payment_date=datetime(2024, 5, 3, 9, 0, tzinfo=timezone.utc),
                    payment_method="MOMO",
                )
            )
            other.commit()
        return result

    monkeypatch.setattr(payment_service, "validate_payment", validate_then_compete)

    with session_local() as session:
        with pytest.raises(ConcurrentPaymentError):
            record_payment(session, order_id=order_id, amount=Decimal("200.00"))

    with session_local() as session:
        amounts = session.scalars(select(Payment.amount).where(Payment.order_id == order_id)).all()
        assert amounts == [Decimal("300.00")]
