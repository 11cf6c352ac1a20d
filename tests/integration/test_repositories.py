"""Integration tests for the schedule repository against SQLite"""

import pytest
from dataclasses import replace
from datetime import date
from decimal import Decimal
from sqlalchemy.orm import Session
from agrigrow_lending.domain.amortization import build_schedule
from agrigrow_lending.domain.exceptions import InstallmentNotFoundError, InvalidStatusTransitionError
from agrigrow_lending.domain.models import InstallmentStatus, LoanTerms, PaymentMethod
from agrigrow_lending.domain.overdue import newly_overdue, reclassify
from agrigrow_lending.domain.repayments import find_installment, record_payment
from agrigrow_lending.infrastructure.database.models import LoanSchedule
from agrigrow_lending.infrastructure.database.repositories import ScheduleRepository


@pytest.fixture
def repo(db: Session) -> ScheduleRepository:
    """Repository holding LOAN-1: 100,000 at 10% over 6 months from 2024-01-01"""
    repo = ScheduleRepository(db)
    terms = LoanTerms(Decimal("100000"), Decimal("10"), 6, date(2024, 1, 1))
    repo.create_schedule("LOAN-1", terms, build_schedule("LOAN-1", terms))
    db.commit()
    return repo


def _pay(repo: ScheduleRepository, schedule, sequence: int, reference: str):
    updated = record_payment(
        schedule,
        sequence,
        paid_date=date(2024, 3, 10),
        payment_method=PaymentMethod.MOBILE_MONEY,
        transaction_reference=reference,
    )
    repo.mark_paid(find_installment(updated, sequence))


def test_stale_sweep_does_not_overwrite_payment(db: Session, repo: ScheduleRepository):
    """A sweep working from a snapshot taken before a payment leaves the paid row alone"""
    snapshot = repo.get_schedule("LOAN-1")

    _pay(repo, snapshot, 1, "MM-1")
    db.commit()

    stale = reclassify(snapshot, date(2024, 3, 15))
    marked = [inst for inst in newly_overdue(snapshot, stale) if repo.mark_overdue(inst)]
    db.commit()

    assert [inst.sequence for inst in marked] == [2]

    stored = repo.get_schedule("LOAN-1")
    assert stored[0].status == InstallmentStatus.PAID
    assert stored[0].transaction_reference == "MM-1"
    assert stored[0].payment_method == PaymentMethod.MOBILE_MONEY
    assert stored[0].paid_date == date(2024, 3, 10)
    assert stored[1].status == InstallmentStatus.OVERDUE


def test_mark_overdue_only_touches_pending(db: Session, repo: ScheduleRepository):
    schedule = reclassify(repo.get_schedule("LOAN-1"), date(2024, 3, 15))

    assert repo.mark_overdue(schedule[0]) is True
    db.commit()
    assert repo.mark_overdue(schedule[0]) is False


def test_second_payment_from_stale_read_conflicts(db: Session, repo: ScheduleRepository):
    """Two payments that both read the installment as pending: only the first is stored"""
    first_read = repo.get_schedule("LOAN-1")
    second_read = repo.get_schedule("LOAN-1")

    _pay(repo, first_read, 1, "MM-1")
    db.commit()

    with pytest.raises(InvalidStatusTransitionError):
        _pay(repo, second_read, 1, "MM-2")
    db.rollback()

    assert repo.get_schedule("LOAN-1")[0].transaction_reference == "MM-1"


def test_pay_overdue_installment(db: Session, repo: ScheduleRepository):
    schedule = reclassify(repo.get_schedule("LOAN-1"), date(2024, 3, 15))
    repo.mark_overdue(schedule[0])
    db.commit()

    _pay(repo, repo.get_schedule("LOAN-1"), 1, "MM-late")
    db.commit()

    assert repo.get_schedule("LOAN-1")[0].status == InstallmentStatus.PAID


def test_mark_paid_unknown_installment(repo: ScheduleRepository):
    schedule = repo.get_schedule("LOAN-1")
    paid = find_installment(
        record_payment(schedule, 1, paid_date=date(2024, 3, 10), payment_method=PaymentMethod.CASH),
        1,
    )

    with pytest.raises(InstallmentNotFoundError):
        repo.mark_paid(replace(paid, sequence=99))


def test_rate_stored_exactly(db: Session):
    """Rates with many decimal places are kept digit for digit"""
    rate = Decimal("10.00000000000000000001")
    terms = LoanTerms(Decimal("5000"), rate, 3, date(2024, 1, 1))
    ScheduleRepository(db).create_schedule("LOAN-RATE", terms, build_schedule("LOAN-RATE", terms))
    db.commit()

    stored = db.get(LoanSchedule, "LOAN-RATE")
    assert Decimal(stored.annual_interest_rate_percent) == rate
