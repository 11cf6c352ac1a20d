"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from agrigrow_lending.domain.exceptions import InvalidTermsError, InvalidFactorsError
from agrigrow_lending.utils.money import to_decimal


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class PaymentMethod(str, Enum):
    MOBILE_MONEY = "mobile_money"
    BANK = "bank"
    CASH = "cash"


class RiskTier(str, Enum):
    """Discrete risk category; upper score bound of each tier is inclusive"""

    VERY_LOW = "very_low"  # <= 20
    LOW = "low"  # <= 40
    MODERATE = "moderate"  # <= 60
    HIGH = "high"  # <= 80
    VERY_HIGH = "very_high"  # > 80


class RiskFactor(str, Enum):
    """Negative risk contributors, declared in evaluation order"""

    NO_COLLATERAL = "no-collateral"
    EXISTING_LOAN = "existing-loan"
    CROP_IRRIGATION_MISMATCH = "crop-irrigation-mismatch"


@dataclass(frozen=True)
class LoanTerms:
    """Immutable terms fixed when a loan is approved"""

    principal: Decimal
    annual_interest_rate_percent: Decimal
    term_months: int
    start_date: date

    def __post_init__(self):
        try:
            principal = to_decimal(self.principal)
            rate = to_decimal(self.annual_interest_rate_percent)
        except ValueError as e:
            raise InvalidTermsError(str(e)) from e

        if principal <= 0:
            raise InvalidTermsError(f"Principal must be positive, got {principal}")
        if rate < 0 or rate > 100:
            raise InvalidTermsError(f"Annual interest rate must be within 0-100%, got {rate}")
        if isinstance(self.term_months, bool) or not isinstance(self.term_months, int):
            raise InvalidTermsError(f"Term must be a whole number of months, got {self.term_months!r}")
        if self.term_months <= 0:
            raise InvalidTermsError(f"Term must be positive, got {self.term_months}")
        if not isinstance(self.start_date, date):
            raise InvalidTermsError(f"Start date must be a date, got {self.start_date!r}")

        # Frozen dataclass: store normalized values
        object.__setattr__(self, "principal", principal)
        object.__setattr__(self, "annual_interest_rate_percent", rate)


@dataclass(frozen=True)
class Installment:
    """Single payment in a repayment schedule"""

    loan_id: str
    sequence: int
    due_date: date
    amount: Decimal
    principal_portion: Decimal
    interest_portion: Decimal
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    transaction_reference: Optional[str] = None


@dataclass(frozen=True)
class RiskFactors:
    """Farm and loan attributes feeding the risk score"""

    has_collateral: bool
    has_previous_loan: bool
    has_irrigation: bool
    crop_type: str
    loan_amount: Decimal
    farm_size_hectares: Decimal
    estimated_revenue: Decimal
    has_insurance: bool = False

    def __post_init__(self):
        for name in ("loan_amount", "farm_size_hectares", "estimated_revenue"):
            try:
                value = to_decimal(getattr(self, name))
            except ValueError as e:
                raise InvalidFactorsError(f"{name}: {e}") from e
            if value < 0:
                raise InvalidFactorsError(f"{name} must not be negative, got {value}")
            object.__setattr__(self, name, value)


@dataclass(frozen=True)
class RiskAssessment:
    """Output of risk scoring: bounded score, tier and ordered factor list"""

    score: int
    tier: RiskTier
    factors: Tuple[RiskFactor, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ScheduleSummary:
    """Repayment progress derived from a schedule"""

    total_due: Decimal
    total_paid: Decimal
    outstanding: Decimal
    pending_count: int
    paid_count: int
    overdue_count: int
    next_installment: Optional[Installment]
