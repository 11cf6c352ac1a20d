"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field

from agrigrow_lending.domain.models import (
    Installment,
    InstallmentStatus,
    PaymentMethod,
    RiskAssessment,
    RiskFactor,
    RiskTier,
    ScheduleSummary,
)


class ScheduleRequest(BaseModel):
    """Request body for POST /v1/loans/{loan_id}/schedule"""

    principal: Decimal = Field(..., description="Amount lent")
    annual_interest_rate_percent: Decimal = Field(..., description="e.g. 10 for 10% p.a.")
    term_months: int = Field(..., description="Number of monthly installments")
    start_date: date = Field(..., description="Approval date; first payment falls one month later")


class InstallmentSchema(BaseModel):
    """Single installment in a repayment schedule"""

    sequence: int
    due_date: date
    amount: Decimal
    principal_portion: Decimal
    interest_portion: Decimal
    status: InstallmentStatus
    paid_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    transaction_reference: Optional[str] = None

    @classmethod
    def from_domain(cls, inst: Installment) -> "InstallmentSchema":
        return cls(
            sequence=inst.sequence,
            due_date=inst.due_date,
            amount=inst.amount,
            principal_portion=inst.principal_portion,
            interest_portion=inst.interest_portion,
            status=inst.status,
            paid_date=inst.paid_date,
            payment_method=inst.payment_method,
            transaction_reference=inst.transaction_reference,
        )


class SummarySchema(BaseModel):
    """Repayment progress for a schedule"""

    total_due: Decimal
    total_paid: Decimal
    outstanding: Decimal
    pending_count: int
    paid_count: int
    overdue_count: int
    next_due_date: Optional[date] = None
    next_amount: Optional[Decimal] = None

    @classmethod
    def from_domain(cls, summary: ScheduleSummary) -> "SummarySchema":
        nxt = summary.next_installment
        return cls(
            total_due=summary.total_due,
            total_paid=summary.total_paid,
            outstanding=summary.outstanding,
            pending_count=summary.pending_count,
            paid_count=summary.paid_count,
            overdue_count=summary.overdue_count,
            next_due_date=nxt.due_date if nxt else None,
            next_amount=nxt.amount if nxt else None,
        )


class ScheduleResponse(BaseModel):
    """Response for schedule endpoints"""

    loan_id: str
    installments: List[InstallmentSchema]
    summary: SummarySchema


class PaymentRequest(BaseModel):
    """Request body for recording an installment payment"""

    payment_method: PaymentMethod
    transaction_reference: Optional[str] = Field(None, max_length=128)
    paid_date: Optional[date] = Field(None, description="Defaults to today")


class SweepRequest(BaseModel):
    """Request body for POST /v1/sweep"""

    as_of_date: Optional[date] = Field(None, description="Defaults to today")


class SweepResponse(BaseModel):
    as_of_date: date
    loans_checked: int
    installments_marked_overdue: int


class ReminderRequest(BaseModel):
    """Request body for POST /v1/reminders"""

    as_of_date: Optional[date] = Field(None, description="Defaults to today")
    window_days: Optional[int] = Field(None, ge=0, description="Defaults to configured window")


class ReminderItem(BaseModel):
    loan_id: str
    sequence: int
    due_date: date
    amount: Decimal
    days_until_due: int


class ReminderResponse(BaseModel):
    as_of_date: date
    reminders: List[ReminderItem]


class RiskAssessmentRequest(BaseModel):
    """Request body for POST /v1/risk/assessment"""

    loan_id: Optional[str] = Field(None, min_length=1, description="Persist the assessment against this loan")
    has_collateral: bool
    has_previous_loan: bool
    has_irrigation: bool
    has_insurance: bool = False
    crop_type: str
    loan_amount: Decimal = Field(
        ...,
        description="Loan per hectare >= 300,000 adds 20 (exactly 300,000 included), > 200,000 adds 10, < 100,000 subtracts 10",
    )
    farm_size_hectares: Decimal = Field(..., description="Must not be negative")
    estimated_revenue: Decimal = Field(
        ..., description="Loan-to-revenue > 0.7 adds 15, > 0.5 adds 5, < 0.3 subtracts 10"
    )


class RiskAssessmentResponse(BaseModel):
    score: int
    tier: RiskTier
    factors: List[RiskFactor]

    @classmethod
    def from_domain(cls, assessment: RiskAssessment) -> "RiskAssessmentResponse":
        return cls(score=assessment.score, tier=assessment.tier, factors=list(assessment.factors))


class AssessmentHistoryItem(BaseModel):
    """Single stored assessment"""

    assessment_id: str
    score: int
    tier: RiskTier
    factors: List[RiskFactor]
    created_at: str


class AssessmentHistoryResponse(BaseModel):
    loan_id: str
    assessments: List[AssessmentHistoryItem]
