"""Plain-data notification payloads (no user-facing prose)"""

from datetime import date
from typing import Any, Dict, Sequence

from agrigrow_lending.domain.models import Installment

SCHEDULE_CREATED = "SCHEDULE_CREATED"
PAYMENT_RECORDED = "PAYMENT_RECORDED"
PAYMENT_REMINDER = "PAYMENT_REMINDER"


def schedule_created_event(loan_id: str, schedule: Sequence[Installment]) -> Dict[str, Any]:
    return {
        "event": SCHEDULE_CREATED,
        "loan_id": loan_id,
        "installment_count": len(schedule),
        "total_amount": str(sum(inst.amount for inst in schedule)),
        "first_due_date": schedule[0].due_date.isoformat() if schedule else None,
        "installments": [
            {"sequence": inst.sequence, "due_date": inst.due_date.isoformat(), "amount": str(inst.amount)}
            for inst in schedule
        ],
    }


def payment_recorded_event(installment: Installment) -> Dict[str, Any]:
    return {
        "event": PAYMENT_RECORDED,
        "loan_id": installment.loan_id,
        "sequence": installment.sequence,
        "amount": str(installment.amount),
        "due_date": installment.due_date.isoformat(),
        "paid_date": installment.paid_date.isoformat() if installment.paid_date else None,
        "payment_method": installment.payment_method.value if installment.payment_method else None,
        "transaction_reference": installment.transaction_reference,
    }


def payment_reminder_event(installment: Installment, as_of_date: date) -> Dict[str, Any]:
    return {
        "event": PAYMENT_REMINDER,
        "loan_id": installment.loan_id,
        "sequence": installment.sequence,
        "amount": str(installment.amount),
        "due_date": installment.due_date.isoformat(),
        "days_until_due": (installment.due_date - as_of_date).days,
    }
