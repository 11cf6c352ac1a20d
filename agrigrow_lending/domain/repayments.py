"""Repayment recording, reminders and progress summary for a schedule"""

from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional, Sequence

from agrigrow_lending.domain.exceptions import InstallmentNotFoundError, InvalidStatusTransitionError
from agrigrow_lending.domain.models import Installment, InstallmentStatus, PaymentMethod, ScheduleSummary

DEFAULT_REMINDER_WINDOW_DAYS = 3


def find_installment(schedule: Sequence[Installment], sequence: int) -> Installment:
    for inst in schedule:
        if inst.sequence == sequence:
            return inst
    raise InstallmentNotFoundError(f"Installment {sequence} not found")


def record_payment(
    schedule: Sequence[Installment],
    sequence: int,
    paid_date: date,
    payment_method: PaymentMethod,
    transaction_reference: Optional[str] = None,
) -> List[Installment]:
    """
    Mark one installment as paid and return the updated schedule.

    Pending and overdue installments can be paid; paid is terminal.

    Raises:
        InstallmentNotFoundError: No installment with this sequence
        InvalidStatusTransitionError: Installment is already paid
    """
    target = find_installment(schedule, sequence)
    if target.status == InstallmentStatus.PAID:
        raise InvalidStatusTransitionError(f"Installment {sequence} is already paid")

    paid = replace(
        target,
        status=InstallmentStatus.PAID,
        paid_date=paid_date,
        payment_method=PaymentMethod(payment_method),
        transaction_reference=transaction_reference,
    )
    return [paid if inst.sequence == sequence else inst for inst in schedule]


def upcoming_installments(
    schedule: Sequence[Installment],
    as_of_date: date,
    window_days: int = DEFAULT_REMINDER_WINDOW_DAYS,
) -> List[Installment]:
    """Pending installments due after as_of_date and within window_days of it"""
    horizon = as_of_date + timedelta(days=window_days)
    return [
        inst
        for inst in schedule
        if inst.status == InstallmentStatus.PENDING and as_of_date < inst.due_date <= horizon
    ]


def summarize_schedule(schedule: Sequence[Installment]) -> ScheduleSummary:
    """Totals and status counts; next_installment is the earliest unpaid one"""
    total_due = sum((inst.amount for inst in schedule), Decimal("0.00"))
    total_paid = sum(
        (inst.amount for inst in schedule if inst.status == InstallmentStatus.PAID),
        Decimal("0.00"),
    )
    unpaid = sorted(
        (inst for inst in schedule if inst.status != InstallmentStatus.PAID),
        key=lambda inst: inst.due_date,
    )

    return ScheduleSummary(
        total_due=total_due,
        total_paid=total_paid,
        outstanding=total_due - total_paid,
        pending_count=sum(1 for inst in schedule if inst.status == InstallmentStatus.PENDING),
        paid_count=sum(1 for inst in schedule if inst.status == InstallmentStatus.PAID),
        overdue_count=sum(1 for inst in schedule if inst.status == InstallmentStatus.OVERDUE),
        next_installment=unpaid[0] if unpaid else None,
    )
