"""Fixed-payment amortization schedule for approved loans"""

from datetime import date
from decimal import Decimal, localcontext
from typing import List

from agrigrow_lending.domain.models import Installment, InstallmentStatus, LoanTerms
from agrigrow_lending.utils.date_utils import add_months
from agrigrow_lending.utils.money import money

MONTHS_PER_YEAR = 12
ANNUITY_PRECISION = 60
NEGLIGIBLE_RATE = Decimal("1E-20")


def monthly_rate(terms: LoanTerms) -> Decimal:
    """Annual percentage rate -> monthly fraction (10% -> 0.008333...)"""
    return terms.annual_interest_rate_percent / Decimal(100) / MONTHS_PER_YEAR


def calculate_monthly_payment(terms: LoanTerms) -> Decimal:
    """
    Unrounded fixed monthly payment for the terms.

    Standard annuity formula:
        P * r * (1 + r)^n / ((1 + r)^n - 1)

    A zero rate falls back to an even split of the principal, since the
    formula divides by zero there. So does a rate whose total interest
    (r * n) is far below a cent on any realistic principal.
    """
    rate = monthly_rate(terms)
    if rate * terms.term_months < NEGLIGIBLE_RATE:
        return terms.principal / terms.term_months

    # (1 + r)^n - 1 cancels most leading digits for small r
    with localcontext() as ctx:
        ctx.prec = ANNUITY_PRECISION
        growth = (1 + rate) ** terms.term_months
        return terms.principal * rate * growth / (growth - 1)


def generate_schedule(
    loan_id: str,
    principal,
    annual_interest_rate_percent,
    term_months: int,
    start_date: date,
) -> List[Installment]:
    """
    Generate the monthly repayment schedule for an approved loan.

    Requirements:
    - One installment per month, term_months in total
    - Installment i is due start_date + i calendar months (day clamped to month end)
    - Amounts rounded half-up to 2 decimals
    - Final installment repays the exact remaining principal, absorbing
      rounding drift so the schedule sums to principal + interest

    Args:
        loan_id: Loan the schedule belongs to
        principal: Amount lent
        annual_interest_rate_percent: e.g. 10 for 10% p.a.
        term_months: Number of monthly installments
        start_date: Approval/disbursement date; first payment is one month later

    Raises:
        InvalidTermsError: principal <= 0, term_months <= 0, or rate outside 0-100

    Example:
        120,000 at 0% over 12 months -> 12 x 10,000.00
    """
    terms = LoanTerms(
        principal=principal,
        annual_interest_rate_percent=annual_interest_rate_percent,
        term_months=term_months,
        start_date=start_date,
    )
    return build_schedule(loan_id, terms)


def build_schedule(loan_id: str, terms: LoanTerms) -> List[Installment]:
    """Amortize already-validated terms (see generate_schedule)"""
    rate = monthly_rate(terms)
    payment = calculate_monthly_payment(terms)
    remaining = terms.principal

    installments = []
    for i in range(1, terms.term_months + 1):
        interest = remaining * rate
        principal_portion = payment - interest

        # Last installment clears whatever principal is left
        if i == terms.term_months:
            principal_portion = remaining

        remaining -= principal_portion

        amount = money(principal_portion + interest)
        interest_rounded = money(interest)

        installments.append(
            Installment(
                loan_id=loan_id,
                sequence=i,
                due_date=add_months(terms.start_date, i),
                amount=amount,
                principal_portion=amount - interest_rounded,
                interest_portion=interest_rounded,
                status=InstallmentStatus.PENDING,
            )
        )

    return installments


def total_interest(terms: LoanTerms) -> Decimal:
    """Interest over the life of the loan: n * payment - principal (unrounded)"""
    return calculate_monthly_payment(terms) * terms.term_months - terms.principal
