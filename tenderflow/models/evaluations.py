from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from tenderflow.models.base import Base, JSONType, utcnow


class PreFeasibilityEvaluation(Base):
    __tablename__ = "pre_feasibility_evaluations"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    document_id = Column(String, ForeignKey("tender_documents.id", ondelete="CASCADE"), nullable=False, unique=True)
    legal_pass = Column(Boolean, nullable=False)
    bid_bond_pass = Column(Boolean, nullable=False)
    finance_pass = Column(Boolean, nullable=False)
    notes = Column(Text)
    overall_pass = Column(Boolean, nullable=False)
    evaluated_by = Column(String)
    evaluated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    document = relationship("TenderDocument", back_populates="pre_feasibility")


class TechnicalEvaluation(Base):
    __tablename__ = "technical_evaluations"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    document_id = Column(String, ForeignKey("tender_documents.id", ondelete="CASCADE"), nullable=False, unique=True)
    score = Column(Float, nullable=False)
    max_score = Column(Float, nullable=False, default=100)
    criteria = Column(JSONType)  # {criterion_id: 0-100}
    comments = Column(Text)
    evaluated_by = Column(String)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    document = relationship("TenderDocument", back_populates="technical_eval")


class FinancialEvaluation(Base):
    __tablename__ = "financial_evaluations"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    document_id = Column(String, ForeignKey("tender_documents.id", ondelete="CASCADE"), nullable=False, unique=True)
    score = Column(Float, nullable=False)
    max_score = Column(Float, nullable=False, default=100)
    criteria = Column(JSONType)
    comments = Column(Text)
    commercial_terms = Column(Text)
    payment_terms = Column(Text)
    warranty_terms = Column(Text)
    price_score = Column(Float)
    estimated_budget = Column(Float)
    evaluated_by = Column(String)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    document = relationship("TenderDocument", back_populates="financial_eval")


class ApprovalRequest(Base):
    __tablename__ = "approval_requests"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    document_id = Column(String, ForeignKey("tender_documents.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String, nullable=False)
    comments = Column(Text)
    approver_role = Column(String)
    approver_id = Column(String)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    document = relationship("TenderDocument", back_populates="approvals")


class ScoringConfig(Base):
    __tablename__ = "scoring_configs"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    document_id = Column(String, ForeignKey("tender_documents.id", ondelete="CASCADE"), nullable=False, unique=True)
    tech_weight = Column(Float, nullable=False, default=0.4)
    personnel_weight = Column(Float, nullable=False, default=0.2)
    experience_weight = Column(Float, nullable=False, default=0.4)

    document = relationship("TenderDocument", back_populates="scoring_config")
