"""SQLAlchemy ORM models for schedules, installments and risk assessments"""

import uuid
from sqlalchemy import Column, String, BigInteger, Integer, DateTime, Date, ForeignKey, Text, JSON, UniqueConstraint, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class LoanSchedule(Base):
    """Repayment schedule header, one per approved loan"""

    __tablename__ = "loan_schedule"

    loan_id = Column(Text, primary_key=True)
    principal_cents = Column(BigInteger, nullable=False)
    annual_interest_rate_percent = Column(Text, nullable=False)  # Decimal as text, exact
    term_months = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    installments = relationship(
        "LoanInstallment",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="LoanInstallment.sequence",
    )


class LoanInstallment(Base):
    """Individual installment within a repayment schedule"""

    __tablename__ = "loan_installment"
    __table_args__ = (UniqueConstraint("loan_id", "sequence", name="uq_installment_loan_sequence"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    loan_id = Column(Text, ForeignKey("loan_schedule.loan_id", ondelete="CASCADE"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    principal_cents = Column(BigInteger, nullable=False)
    interest_cents = Column(BigInteger, nullable=False)
    status = Column(String(16), nullable=False, default="pending")
    paid_date = Column(Date, nullable=True)
    payment_method = Column(String(32), nullable=True)
    transaction_reference = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    schedule = relationship("LoanSchedule", back_populates="installments")


class RiskAssessmentRecord(Base):
    """Stored risk assessment for a loan application"""

    __tablename__ = "risk_assessment"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    loan_id = Column(Text, nullable=False, index=True)
    score = Column(Integer, nullable=False)
    tier = Column(String(16), nullable=False)
    factors = Column(JSON, nullable=False)
    inputs = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
