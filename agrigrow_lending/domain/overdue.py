"""Overdue sweep - time-based reclassification of pending installments"""

from dataclasses import replace
from datetime import date
from typing import Dict, List, Mapping, Sequence

from agrigrow_lending.domain.models import Installment, InstallmentStatus


def is_overdue(installment: Installment, as_of_date: date) -> bool:
    """Pending and due strictly before as_of_date"""
    return installment.status == InstallmentStatus.PENDING and installment.due_date < as_of_date


def reclassify(schedule: Sequence[Installment], as_of_date: date) -> List[Installment]:
    """
    Mark pending installments past their due date as overdue.

    Pure function of (schedule, as_of_date): paid and already-overdue
    installments, and pending ones not yet due, are returned unchanged.
    Applying it twice with the same date gives the same result.
    """
    return [
        replace(inst, status=InstallmentStatus.OVERDUE) if is_overdue(inst, as_of_date) else inst
        for inst in schedule
    ]


def reclassify_many(
    schedules: Mapping[str, Sequence[Installment]],
    as_of_date: date,
) -> Dict[str, List[Installment]]:
    """Sweep many loans; each loan's schedule is reclassified independently"""
    return {loan_id: reclassify(schedule, as_of_date) for loan_id, schedule in schedules.items()}


def newly_overdue(before: Sequence[Installment], after: Sequence[Installment]) -> List[Installment]:
    """Installments a sweep moved to overdue (the delta to persist)"""
    return [
        new
        for old, new in zip(before, after)
        if old.status != InstallmentStatus.OVERDUE and new.status == InstallmentStatus.OVERDUE
    ]
