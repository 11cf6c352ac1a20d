"""Unit tests for payment recording, reminders and schedule summary"""

import pytest
from datetime import date
from decimal import Decimal
from agrigrow_lending.domain.amortization import generate_schedule
from agrigrow_lending.domain.events import payment_recorded_event, payment_reminder_event, schedule_created_event
from agrigrow_lending.domain.exceptions import InstallmentNotFoundError, InvalidStatusTransitionError
from agrigrow_lending.domain.models import InstallmentStatus, PaymentMethod
from agrigrow_lending.domain.overdue import reclassify
from agrigrow_lending.domain.repayments import record_payment, summarize_schedule, upcoming_installments


@pytest.fixture
def schedule():
    """Three installments of 10,000.00 due Feb-Apr 2024"""
    return generate_schedule("loan-1", 30000, 0, 3, date(2024, 1, 1))


def test_record_payment_marks_installment_paid(schedule):
    updated = record_payment(schedule, 2, date(2024, 2, 28), PaymentMethod.BANK, "TRX-42")

    paid = updated[1]
    assert paid.status == InstallmentStatus.PAID
    assert paid.paid_date == date(2024, 2, 28)
    assert paid.payment_method == PaymentMethod.BANK
    assert paid.transaction_reference == "TRX-42"
    assert updated[0] is schedule[0]
    assert schedule[1].status == InstallmentStatus.PENDING


def test_record_payment_accepts_method_value(schedule):
    updated = record_payment(schedule, 1, date(2024, 2, 1), "cash")

    assert updated[0].payment_method == PaymentMethod.CASH
    assert updated[0].transaction_reference is None


def test_record_payment_twice_is_rejected(schedule):
    updated = record_payment(schedule, 1, date(2024, 2, 1), PaymentMethod.CASH)

    with pytest.raises(InvalidStatusTransitionError):
        record_payment(updated, 1, date(2024, 2, 2), PaymentMethod.CASH)


def test_record_payment_unknown_installment(schedule):
    with pytest.raises(InstallmentNotFoundError):
        record_payment(schedule, 4, date(2024, 2, 1), PaymentMethod.CASH)


def test_record_payment_on_overdue_installment(schedule):
    overdue = reclassify(schedule, date(2024, 2, 10))
    updated = record_payment(overdue, 1, date(2024, 2, 10), PaymentMethod.MOBILE_MONEY, "MM-7")

    assert updated[0].status == InstallmentStatus.PAID


def test_upcoming_installments_three_day_window(schedule):
    assert [inst.sequence for inst in upcoming_installments(schedule, date(2024, 1, 29))] == [1]
    assert upcoming_installments(schedule, date(2024, 1, 28)) == []
    # Due today is not upcoming
    assert upcoming_installments(schedule, date(2024, 2, 1)) == []


def test_upcoming_installments_skips_paid(schedule):
    updated = record_payment(schedule, 1, date(2024, 1, 30), PaymentMethod.CASH)

    assert upcoming_installments(updated, date(2024, 1, 30)) == []


def test_upcoming_installments_custom_window(schedule):
    found = upcoming_installments(schedule, date(2024, 1, 15), window_days=60)

    assert [inst.sequence for inst in found] == [1, 2]


def test_summarize_schedule(schedule):
    updated = record_payment(schedule, 1, date(2024, 2, 1), PaymentMethod.CASH)
    updated = reclassify(updated, date(2024, 3, 5))

    summary = summarize_schedule(updated)

    assert summary.total_due == Decimal("30000.00")
    assert summary.total_paid == Decimal("10000.00")
    assert summary.outstanding == Decimal("20000.00")
    assert (summary.paid_count, summary.overdue_count, summary.pending_count) == (1, 1, 1)
    assert summary.next_installment.sequence == 2


def test_summarize_fully_paid_schedule(schedule):
    updated = schedule
    for seq in (1, 2, 3):
        updated = record_payment(updated, seq, date(2024, 4, 1), PaymentMethod.BANK)

    summary = summarize_schedule(updated)

    assert summary.outstanding == Decimal("0.00")
    assert summary.next_installment is None


def test_event_payloads_are_plain_data(schedule):
    created = schedule_created_event("loan-1", schedule)
    assert created["event"] == "SCHEDULE_CREATED"
    assert created["installment_count"] == 3
    assert created["total_amount"] == "30000.00"
    assert created["first_due_date"] == "2024-02-01"

    paid = record_payment(schedule, 1, date(2024, 2, 1), PaymentMethod.MOBILE_MONEY, "MM-1")[0]
    recorded = payment_recorded_event(paid)
    assert recorded["payment_method"] == "mobile_money"
    assert recorded["amount"] == "10000.00"

    reminder = payment_reminder_event(schedule[1], date(2024, 2, 28))
    assert reminder["days_until_due"] == 2
    assert reminder["due_date"] == "2024-03-01"
