"""Unit tests for the overdue sweep"""

import pytest
from datetime import date
from agrigrow_lending.domain.amortization import generate_schedule
from agrigrow_lending.domain.models import InstallmentStatus, PaymentMethod
from agrigrow_lending.domain.overdue import is_overdue, newly_overdue, reclassify, reclassify_many
from agrigrow_lending.domain.repayments import record_payment


@pytest.fixture
def schedule():
    """Six installments due on the 1st, Feb through Jul 2024"""
    return generate_schedule("loan-1", 60000, 12, 6, date(2024, 1, 1))


def test_reclassify_day_before_due_stays_pending(schedule):
    swept = reclassify(schedule, date(2024, 1, 31))

    assert all(inst.status == InstallmentStatus.PENDING for inst in swept)


def test_reclassify_day_after_due_marks_overdue(schedule):
    swept = reclassify(schedule, date(2024, 2, 2))

    assert swept[0].status == InstallmentStatus.OVERDUE
    assert all(inst.status == InstallmentStatus.PENDING for inst in swept[1:])


def test_reclassify_on_due_date_is_not_overdue(schedule):
    swept = reclassify(schedule, date(2024, 2, 1))

    assert swept[0].status == InstallmentStatus.PENDING


def test_reclassify_is_idempotent(schedule):
    as_of = date(2024, 4, 15)
    once = reclassify(schedule, as_of)
    twice = reclassify(once, as_of)

    assert twice == once
    assert [inst.status for inst in once].count(InstallmentStatus.OVERDUE) == 3


def test_reclassify_never_touches_paid(schedule):
    paid = record_payment(schedule, 1, date(2024, 2, 1), PaymentMethod.MOBILE_MONEY, "MM-001")
    swept = reclassify(paid, date(2030, 1, 1))

    assert swept[0].status == InstallmentStatus.PAID
    assert swept[0] is paid[0]
    assert all(inst.status == InstallmentStatus.OVERDUE for inst in swept[1:])


def test_reclassify_does_not_mutate_input(schedule):
    reclassify(schedule, date(2030, 1, 1))

    assert all(inst.status == InstallmentStatus.PENDING for inst in schedule)


def test_reclassify_passes_unchanged_installments_through(schedule):
    swept = reclassify(schedule, date(2024, 2, 2))

    assert all(new is old for old, new in zip(schedule[1:], swept[1:]))


def test_reclassify_keeps_existing_overdue(schedule):
    first = reclassify(schedule, date(2024, 3, 2))
    # An earlier as-of date never reverts overdue back to pending
    second = reclassify(first, date(2024, 1, 1))

    assert second[0].status == InstallmentStatus.OVERDUE
    assert second[1].status == InstallmentStatus.OVERDUE


def test_is_overdue():
    inst = generate_schedule("loan-2", 1000, 0, 1, date(2024, 1, 1))[0]

    assert is_overdue(inst, date(2024, 2, 2)) is True
    assert is_overdue(inst, date(2024, 2, 1)) is False


def test_reclassify_many_sweeps_each_loan_independently(schedule):
    later = generate_schedule("loan-2", 1000, 0, 2, date(2024, 6, 1))

    swept = reclassify_many({"loan-1": schedule, "loan-2": later}, date(2024, 3, 15))

    assert set(swept) == {"loan-1", "loan-2"}
    assert [inst.status for inst in swept["loan-1"]][:3] == [
        InstallmentStatus.OVERDUE,
        InstallmentStatus.OVERDUE,
        InstallmentStatus.PENDING,
    ]
    assert all(inst.status == InstallmentStatus.PENDING for inst in swept["loan-2"])


def test_newly_overdue_reports_only_changes(schedule):
    first = reclassify(schedule, date(2024, 2, 15))
    second = reclassify(first, date(2024, 3, 15))

    assert [inst.sequence for inst in newly_overdue(schedule, first)] == [1]
    assert [inst.sequence for inst in newly_overdue(first, second)] == [2]
    assert newly_overdue(second, reclassify(second, date(2024, 3, 15))) == []
