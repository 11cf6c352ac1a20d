"""Data access layer for repayment schedules and risk assessments"""

from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy.orm import Session
from agrigrow_lending.infrastructure.database.models import LoanSchedule, LoanInstallment, RiskAssessmentRecord
from agrigrow_lending.domain.exceptions import (
    InstallmentNotFoundError,
    InvalidStatusTransitionError,
    ScheduleExistsError,
    ScheduleNotFoundError,
)
from agrigrow_lending.domain.models import (
    Installment,
    InstallmentStatus,
    LoanTerms,
    PaymentMethod,
    RiskAssessment,
)
from agrigrow_lending.utils.money import from_cents, to_cents


def _to_domain(row: LoanInstallment) -> Installment:
    return Installment(
        loan_id=row.loan_id,
        sequence=row.sequence,
        due_date=row.due_date,
        amount=from_cents(row.amount_cents),
        principal_portion=from_cents(row.principal_cents),
        interest_portion=from_cents(row.interest_cents),
        status=InstallmentStatus(row.status),
        paid_date=row.paid_date,
        payment_method=PaymentMethod(row.payment_method) if row.payment_method else None,
        transaction_reference=row.transaction_reference,
    )


class ScheduleRepository:
    """Repository for repayment schedules keyed by loan id"""

    def __init__(self, db: Session):
        self.db = db

    def exists(self, loan_id: str) -> bool:
        return self.db.get(LoanSchedule, loan_id) is not None

    def create_schedule(self, loan_id: str, terms: LoanTerms, installments: Sequence[Installment]) -> LoanSchedule:
        """
        Persist a freshly generated schedule with all its installments.

        Raises:
            ScheduleExistsError: A schedule is already stored for loan_id
        """
        if self.exists(loan_id):
            raise ScheduleExistsError(f"Schedule already exists for loan {loan_id}")

        db_schedule = LoanSchedule(
            loan_id=loan_id,
            principal_cents=to_cents(terms.principal),
            annual_interest_rate_percent=str(terms.annual_interest_rate_percent),
            term_months=terms.term_months,
            start_date=terms.start_date,
        )
        self.db.add(db_schedule)
        self.db.flush()

        for inst in installments:
            self.db.add(
                LoanInstallment(
                    loan_id=loan_id,
                    sequence=inst.sequence,
                    due_date=inst.due_date,
                    amount_cents=to_cents(inst.amount),
                    principal_cents=to_cents(inst.principal_portion),
                    interest_cents=to_cents(inst.interest_portion),
                    status=inst.status.value,
                )
            )

        self.db.flush()
        return db_schedule

    def get_schedule(self, loan_id: str) -> List[Installment]:
        """
        Fetch the current schedule in installment order.

        Raises:
            ScheduleNotFoundError: Nothing stored for loan_id
        """
        if not self.exists(loan_id):
            raise ScheduleNotFoundError(f"No schedule for loan {loan_id}")

        rows = (
            self.db.query(LoanInstallment)
            .filter(LoanInstallment.loan_id == loan_id)
            .order_by(LoanInstallment.sequence)
            .all()
        )
        return [_to_domain(row) for row in rows]

    def list_loan_ids(self) -> List[str]:
        return [loan_id for (loan_id,) in self.db.query(LoanSchedule.loan_id).order_by(LoanSchedule.loan_id).all()]

    def get_all_schedules(self) -> Dict[str, List[Installment]]:
        return {loan_id: self.get_schedule(loan_id) for loan_id in self.list_loan_ids()}

    def _installment_query(self, loan_id: str, sequence: int):
        return self.db.query(LoanInstallment).filter(
            LoanInstallment.loan_id == loan_id,
            LoanInstallment.sequence == sequence,
        )

    def mark_overdue(self, installment: Installment) -> bool:
        """
        Flip one installment to overdue if it is still pending in the database.

        Returns:
            False when the stored row moved on (e.g. paid since the sweep read it)
        """
        rowcount = (
            self._installment_query(installment.loan_id, installment.sequence)
            .filter(LoanInstallment.status == InstallmentStatus.PENDING.value)
            .update({LoanInstallment.status: InstallmentStatus.OVERDUE.value})
        )
        return rowcount == 1

    def mark_paid(self, installment: Installment) -> None:
        """
        Write a payment onto an installment that is not already paid.

        The status check and the write are one UPDATE, so two concurrent
        payments cannot both succeed.

        Raises:
            InstallmentNotFoundError: No such installment
            InvalidStatusTransitionError: Installment already paid
        """
        query = self._installment_query(installment.loan_id, installment.sequence)
        rowcount = query.filter(LoanInstallment.status != InstallmentStatus.PAID.value).update(
            {
                LoanInstallment.status: InstallmentStatus.PAID.value,
                LoanInstallment.paid_date: installment.paid_date,
                LoanInstallment.payment_method: installment.payment_method.value if installment.payment_method else None,
                LoanInstallment.transaction_reference: installment.transaction_reference,
            }
        )
        if rowcount == 1:
            return

        if query.first() is None:
            raise InstallmentNotFoundError(
                f"Installment {installment.sequence} not found for loan {installment.loan_id}"
            )
        raise InvalidStatusTransitionError(
            f"Installment {installment.sequence} of loan {installment.loan_id} is already paid"
        )


class AssessmentRepository:
    """Repository for risk assessments"""

    def __init__(self, db: Session):
        self.db = db

    def create_assessment(
        self,
        loan_id: str,
        assessment: RiskAssessment,
        inputs: Optional[Dict[str, Any]] = None,
    ) -> RiskAssessmentRecord:
        """Persist an assessment; inputs are stored for audit only"""
        record = RiskAssessmentRecord(
            loan_id=loan_id,
            score=assessment.score,
            tier=assessment.tier.value,
            factors=[factor.value for factor in assessment.factors],
            inputs=inputs,
        )
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return record

    def get_assessments_by_loan(self, loan_id: str, limit: int = 10) -> List[RiskAssessmentRecord]:
        """Fetch recent assessments for a loan"""
        return (
            self.db.query(RiskAssessmentRecord)
            .filter(RiskAssessmentRecord.loan_id == loan_id)
            .order_by(RiskAssessmentRecord.created_at.desc())
            .limit(limit)
            .all()
        )
