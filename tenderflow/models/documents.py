import uuid

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import relationship

from tenderflow.models.base import Base, JSONType, utcnow
from tenderflow.models.bidding import BiddingConfig, TenderLineItem
from tenderflow.models.enums import ProcessingStatus, WorkflowStage
from tenderflow.models.evaluations import (
    ApprovalRequest,
    FinancialEvaluation,
    PreFeasibilityEvaluation,
    ScoringConfig,
    TechnicalEvaluation,
)


class TenderDocument(Base):
    __tablename__ = "tender_documents"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    original_file_name = Column(String)
    storage_path = Column(String)
    mime_type = Column(String)
    file_size = Column(Integer)
    document_type = Column(String)
    estimated_budget = Column(Float)
    vendor_name = Column(String)
    uploaded_by = Column(String, index=True)
    analysis = Column(JSONType)  # raw AI provider result
    status = Column(String, nullable=False, default=ProcessingStatus.PENDING.value)
    error_message = Column(Text)

    workflow_stage = Column(String, nullable=False, default=WorkflowStage.PRE_FEASIBILITY.value, index=True)
    is_tech_locked = Column(Boolean, nullable=False, default=False)
    is_proc_locked = Column(Boolean, nullable=False, default=False)
    assignee_tech_id = Column(String)
    assignee_proc_id = Column(String)
    tech_criteria = Column(JSONType)  # [{id, label, weight}]
    proc_criteria = Column(JSONType)

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    pre_feasibility = relationship(
        PreFeasibilityEvaluation, back_populates="document", uselist=False,
        cascade="all, delete-orphan", lazy="selectin"
    )
    technical_eval = relationship(
        TechnicalEvaluation, back_populates="document", uselist=False,
        cascade="all, delete-orphan", lazy="selectin"
    )
    financial_eval = relationship(
        FinancialEvaluation, back_populates="document", uselist=False,
        cascade="all, delete-orphan", lazy="selectin"
    )
    scoring_config = relationship(
        ScoringConfig, back_populates="document", uselist=False,
        cascade="all, delete-orphan", lazy="selectin"
    )
    approvals = relationship(
        ApprovalRequest, back_populates="document",
        cascade="all, delete-orphan", lazy="selectin", order_by=ApprovalRequest.id
    )
    bidding_config = relationship(
        BiddingConfig, back_populates="document", uselist=False,
        cascade="all, delete-orphan", lazy="selectin"
    )
    line_items = relationship(
        TenderLineItem, back_populates="document",
        cascade="all, delete-orphan", lazy="selectin", order_by=TenderLineItem.position
    )

    __mapper_args__ = {"version_id_col": version}
