"""Risk assessment endpoints - score inputs and fetch a loan's assessment history"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from agrigrow_lending.api.v1.schemas import (
    AssessmentHistoryItem,
    AssessmentHistoryResponse,
    RiskAssessmentRequest,
    RiskAssessmentResponse,
)
from agrigrow_lending.api.dependencies import get_request_id
from agrigrow_lending.infrastructure.database.session import get_db
from agrigrow_lending.infrastructure.database.repositories import AssessmentRepository
from agrigrow_lending.domain.exceptions import InvalidFactorsError
from agrigrow_lending.domain.models import RiskFactors
from agrigrow_lending.domain.scoring import score
from agrigrow_lending.infrastructure.observability.metrics import record_assessment
from agrigrow_lending.infrastructure.observability.logging import log_assessment

router = APIRouter()


@router.post("/risk/assessment", response_model=RiskAssessmentResponse)
def assess_risk(
    request_body: RiskAssessmentRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Score farm and loan attributes.

    Returns score, tier and the ordered factor list; narrative text is left
    to downstream consumers. Stored when loan_id is given.

    Loan per hectare of exactly 300,000 already falls in the top band (+20).
    """
    request_id = get_request_id(request)
    inputs = request_body.model_dump(mode="json", exclude={"loan_id"})

    try:
        factors = RiskFactors(**request_body.model_dump(exclude={"loan_id"}))
    except InvalidFactorsError as e:
        raise HTTPException(status_code=422, detail=str(e))

    assessment = score(factors)

    if request_body.loan_id:
        try:
            AssessmentRepository(db).create_assessment(request_body.loan_id, assessment, inputs=inputs)
            db.commit()
        except Exception as e:
            db.rollback()
            logging.error(
                f"Failed to store assessment: {e}",
                extra={"request_id": request_id, "loan_id": request_body.loan_id},
            )
            raise HTTPException(status_code=500, detail="Internal server error")

    record_assessment(assessment.tier.value)
    log_assessment(
        request_id,
        request_body.loan_id,
        assessment.score,
        assessment.tier.value,
        [factor.value for factor in assessment.factors],
    )

    return RiskAssessmentResponse.from_domain(assessment)


@router.get("/loans/{loan_id}/assessments", response_model=AssessmentHistoryResponse)
def get_assessment_history(loan_id: str, db: Session = Depends(get_db)):
    """
    Retrieve recent risk assessments for a loan.

    Returns:
        Newest first, at most 20
    """
    records = AssessmentRepository(db).get_assessments_by_loan(loan_id, limit=20)

    items = [
        AssessmentHistoryItem(
            assessment_id=str(r.id),
            score=r.score,
            tier=r.tier,
            factors=r.factors,
            created_at=r.created_at.isoformat(),
        )
        for r in records
    ]

    return AssessmentHistoryResponse(loan_id=loan_id, assessments=items)
