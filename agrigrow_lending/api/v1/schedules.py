"""Repayment schedule endpoints - create, fetch, record payments"""

import time
import logging
from datetime import date
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from agrigrow_lending.api.v1.schemas import (
    InstallmentSchema,
    PaymentRequest,
    ScheduleRequest,
    ScheduleResponse,
    SummarySchema,
)
from agrigrow_lending.api.dependencies import get_notification_client, get_request_id, get_today
from agrigrow_lending.infrastructure.database.session import get_db
from agrigrow_lending.infrastructure.database.repositories import ScheduleRepository
from agrigrow_lending.infrastructure.clients.notifier import NotificationClient
from agrigrow_lending.domain.amortization import build_schedule
from agrigrow_lending.domain.events import payment_recorded_event, schedule_created_event
from agrigrow_lending.domain.exceptions import (
    InstallmentNotFoundError,
    InvalidStatusTransitionError,
    InvalidTermsError,
    ScheduleExistsError,
    ScheduleNotFoundError,
)
from agrigrow_lending.domain.models import LoanTerms
from agrigrow_lending.domain.repayments import find_installment, record_payment, summarize_schedule
from agrigrow_lending.infrastructure.observability.metrics import payment_recorded_counter, schedule_created_counter
from agrigrow_lending.infrastructure.observability.logging import log_schedule_created

router = APIRouter()


def _schedule_response(loan_id: str, schedule) -> ScheduleResponse:
    return ScheduleResponse(
        loan_id=loan_id,
        installments=[InstallmentSchema.from_domain(inst) for inst in schedule],
        summary=SummarySchema.from_domain(summarize_schedule(schedule)),
    )


@router.post("/loans/{loan_id}/schedule", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
def create_schedule(
    loan_id: str,
    request_body: ScheduleRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    notifier: NotificationClient = Depends(get_notification_client),
):
    """
    Generate and store the repayment schedule for an approved loan.

    Flow:
    1. Validate terms and amortize
    2. Persist schedule + installments
    3. Send async schedule_created event to the notification service
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        terms = LoanTerms(
            principal=request_body.principal,
            annual_interest_rate_percent=request_body.annual_interest_rate_percent,
            term_months=request_body.term_months,
            start_date=request_body.start_date,
        )
        schedule = build_schedule(loan_id, terms)

        ScheduleRepository(db).create_schedule(loan_id, terms, schedule)
        db.commit()

    except InvalidTermsError as e:
        db.rollback()
        logging.warning(f"Invalid loan terms: {e}", extra={"request_id": request_id, "loan_id": loan_id})
        raise HTTPException(status_code=422, detail=str(e))

    except ScheduleExistsError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id, "loan_id": loan_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    event = schedule_created_event(loan_id, schedule)
    background_tasks.add_task(notifier.dispatch, event)

    schedule_created_counter.inc()
    duration_ms = (time.time() - start_time) * 1000
    log_schedule_created(request_id, loan_id, len(schedule), event["total_amount"], duration_ms)

    return _schedule_response(loan_id, schedule)


@router.get("/loans/{loan_id}/schedule", response_model=ScheduleResponse)
def get_schedule(loan_id: str, db: Session = Depends(get_db)):
    """Retrieve the stored schedule with its repayment summary"""
    try:
        schedule = ScheduleRepository(db).get_schedule(loan_id)
    except ScheduleNotFoundError:
        raise HTTPException(status_code=404, detail="Schedule not found")

    return _schedule_response(loan_id, schedule)


@router.post("/loans/{loan_id}/installments/{sequence}/payment", response_model=InstallmentSchema)
def create_payment(
    loan_id: str,
    sequence: int,
    request_body: PaymentRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    notifier: NotificationClient = Depends(get_notification_client),
):
    """
    Record a repayment against one installment.

    Pending and overdue installments can be paid; paying twice is a conflict.
    """
    request_id = get_request_id(request)
    repo = ScheduleRepository(db)

    try:
        schedule = repo.get_schedule(loan_id)
        updated = record_payment(
            schedule,
            sequence,
            paid_date=request_body.paid_date or today,
            payment_method=request_body.payment_method,
            transaction_reference=request_body.transaction_reference,
        )
        paid = find_installment(updated, sequence)
        repo.mark_paid(paid)
        db.commit()

    except (ScheduleNotFoundError, InstallmentNotFoundError) as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidStatusTransitionError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id, "loan_id": loan_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    payment_recorded_counter.labels(method=paid.payment_method.value).inc()
    logging.info(
        "Payment recorded",
        extra={"request_id": request_id, "loan_id": loan_id, "sequence": sequence, "step": "payment_recorded"},
    )
    background_tasks.add_task(notifier.dispatch, payment_recorded_event(paid))

    return InstallmentSchema.from_domain(paid)
