"""Batch servicing endpoints - overdue sweep and payment reminders"""

import logging
from datetime import date
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from agrigrow_lending.api.v1.schemas import (
    ReminderItem,
    ReminderRequest,
    ReminderResponse,
    SweepRequest,
    SweepResponse,
)
from agrigrow_lending.api.dependencies import get_notification_client, get_request_id, get_today
from agrigrow_lending.config import settings
from agrigrow_lending.infrastructure.database.session import get_db
from agrigrow_lending.infrastructure.database.repositories import ScheduleRepository
from agrigrow_lending.infrastructure.clients.notifier import NotificationClient
from agrigrow_lending.domain.events import payment_reminder_event
from agrigrow_lending.domain.overdue import newly_overdue, reclassify_many
from agrigrow_lending.domain.repayments import upcoming_installments
from agrigrow_lending.infrastructure.observability.metrics import overdue_marked_counter
from agrigrow_lending.infrastructure.observability.logging import log_sweep

router = APIRouter()


@router.post("/sweep", response_model=SweepResponse)
def run_overdue_sweep(
    request_body: SweepRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Mark pending installments past their due date as overdue, for every loan.

    Only installments whose status actually changed are written back, and
    only while still pending in the database, so re-running with the same
    date is a no-op and a payment recorded mid-sweep is kept.
    """
    request_id = get_request_id(request)
    as_of_date = request_body.as_of_date or today
    repo = ScheduleRepository(db)

    try:
        before = repo.get_all_schedules()
        after = reclassify_many(before, as_of_date)

        marked = 0
        for loan_id, schedule in after.items():
            for inst in newly_overdue(before[loan_id], schedule):
                if repo.mark_overdue(inst):
                    marked += 1

        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Overdue sweep failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    overdue_marked_counter.inc(marked)
    log_sweep(request_id, as_of_date.isoformat(), len(before), marked)

    return SweepResponse(as_of_date=as_of_date, loans_checked=len(before), installments_marked_overdue=marked)


@router.post("/reminders", response_model=ReminderResponse)
def send_payment_reminders(
    request_body: ReminderRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    notifier: NotificationClient = Depends(get_notification_client),
):
    """Queue payment_reminder events for pending installments due within the window"""
    as_of_date = request_body.as_of_date or today
    window_days = request_body.window_days if request_body.window_days is not None else settings.reminder_window_days

    reminders = []
    for schedule in ScheduleRepository(db).get_all_schedules().values():
        for inst in upcoming_installments(schedule, as_of_date, window_days):
            event = payment_reminder_event(inst, as_of_date)
            background_tasks.add_task(notifier.dispatch, event)
            reminders.append(
                ReminderItem(
                    loan_id=inst.loan_id,
                    sequence=inst.sequence,
                    due_date=inst.due_date,
                    amount=inst.amount,
                    days_until_due=event["days_until_due"],
                )
            )

    return ReminderResponse(as_of_date=as_of_date, reminders=reminders)
