"""Risk scoring engine - core business logic for loan risk assessment"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Tuple

from agrigrow_lending.domain.models import RiskAssessment, RiskFactor, RiskFactors, RiskTier

BASELINE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100

# Crops that fail without irrigation in the dry season
IRRIGATION_DEPENDENT_CROPS = frozenset({"rice", "tomato"})

# Upper inclusive bound of each tier, lowest first
TIER_BOUNDARIES: Tuple[Tuple[int, RiskTier], ...] = (
    (20, RiskTier.VERY_LOW),
    (40, RiskTier.LOW),
    (60, RiskTier.MODERATE),
    (80, RiskTier.HIGH),
)

_ONE = Decimal(1)


def is_irrigation_dependent(crop_type: str) -> bool:
    return crop_type.strip().lower() in IRRIGATION_DEPENDENT_CROPS


def loan_per_hectare_delta(factors: RiskFactors) -> int:
    """
    Loan size relative to farm size.

    Thresholds (first match wins, high to low):
    - >= 300,000 per hectare: +20
    - > 200,000 per hectare: +10
    - < 100,000 per hectare: -10
    Farm size is floored at 1 hectare.
    """
    per_hectare = factors.loan_amount / max(factors.farm_size_hectares, _ONE)
    if per_hectare >= 300_000:
        return 20
    if per_hectare > 200_000:
        return 10
    if per_hectare < 100_000:
        return -10
    return 0


def loan_to_revenue_delta(factors: RiskFactors) -> int:
    """
    Loan size relative to expected harvest revenue.

    Thresholds (first match wins, high to low):
    - > 0.7: +15
    - > 0.5: +5
    - < 0.3: -10
    Revenue is floored at 1.
    """
    ratio = factors.loan_amount / max(factors.estimated_revenue, _ONE)
    if ratio > Decimal("0.7"):
        return 15
    if ratio > Decimal("0.5"):
        return 5
    if ratio < Decimal("0.3"):
        return -10
    return 0


def calculate_risk_score(factors: RiskFactors) -> Tuple[int, List[RiskFactor]]:
    """
    Additive risk score from a neutral baseline of 50 (0 = safest, 100 = riskiest).

    Returns the clamped score and the contributing factors in evaluation
    order. Missing collateral is listed as a factor but carries no points;
    only having collateral moves the score.
    """
    delta = loan_per_hectare_delta(factors) + loan_to_revenue_delta(factors)
    contributing: List[RiskFactor] = []

    # Irrigation
    irrigation_mismatch = False
    if factors.has_irrigation:
        delta -= 10
    elif is_irrigation_dependent(factors.crop_type):
        delta += 15
        irrigation_mismatch = True

    # Collateral
    if factors.has_collateral:
        delta -= 15
    else:
        contributing.append(RiskFactor.NO_COLLATERAL)

    # Insurance
    if factors.has_insurance:
        delta -= 10

    # Existing obligations
    if factors.has_previous_loan:
        delta += 5
        contributing.append(RiskFactor.EXISTING_LOAN)

    if irrigation_mismatch:
        contributing.append(RiskFactor.CROP_IRRIGATION_MISMATCH)

    raw = Decimal(BASELINE_SCORE + delta).to_integral_value(rounding=ROUND_HALF_UP)
    score = max(MIN_SCORE, min(MAX_SCORE, int(raw)))
    return score, contributing


def bucket(score: int) -> RiskTier:
    """
    Map a score to its risk tier.

    Tiers (upper bound inclusive):
    - 0-20:   very_low
    - 21-40:  low
    - 41-60:  moderate
    - 61-80:  high
    - 81-100: very_high
    """
    for upper, tier in TIER_BOUNDARIES:
        if score <= upper:
            return tier
    return RiskTier.VERY_HIGH


def score(factors: RiskFactors) -> RiskAssessment:
    """
    Main entry point: score risk inputs and classify them.

    Deterministic: the same RiskFactors always give the same assessment.
    Validation happens when RiskFactors is constructed (InvalidFactorsError).
    """
    risk_score, contributing = calculate_risk_score(factors)
    return RiskAssessment(score=risk_score, tier=bucket(risk_score), factors=tuple(contributing))
