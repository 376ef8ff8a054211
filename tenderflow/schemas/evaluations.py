from pydantic import Field
from typing import Annotated, Dict, Optional
from datetime import datetime

from tenderflow.models.enums import EvaluationType
from tenderflow.schemas.base import CamelModel

Percent = Annotated[float, Field(ge=0, le=100)]


class PreFeasibilityIn(CamelModel):
    legal_pass: bool
    bid_bond_pass: bool
    finance_pass: bool
    notes: str = ""
    overall_pass: bool


class TechnicalEvaluationIn(CamelModel):
    score: Optional[Percent] = None
    max_score: float = 100
    criteria: Dict[str, Percent] = {}
    comments: str = ""
    lock_score: bool = False


class FinancialEvaluationIn(CamelModel):
    score: Optional[Percent] = None
    criteria: Dict[str, Percent] = {}
    comments: str = ""
    commercial_terms: str = ""
    payment_terms: str = ""
    warranty_terms: str = ""
    price_score: Optional[Percent] = None
    estimated_budget: Optional[float] = Field(None, ge=0)
    lock_score: bool = False


class ApprovalIn(CamelModel):
    status: str = "APPROVED"
    comments: str = ""
    approver_role: Optional[str] = None


class UnlockIn(CamelModel):
    evaluation_type: EvaluationType


class PreFeasibilityOut(CamelModel):
    id: int
    document_id: str
    legal_pass: bool
    bid_bond_pass: bool
    finance_pass: bool
    notes: Optional[str] = None
    overall_pass: bool
    evaluated_by: Optional[str] = None
    evaluated_at: datetime


class TechnicalEvaluationOut(CamelModel):
    id: int
    document_id: str
    score: float
    max_score: float
    criteria: Optional[Dict[str, float]] = None
    comments: Optional[str] = None
    evaluated_by: Optional[str] = None
    updated_at: datetime


class FinancialEvaluationOut(TechnicalEvaluationOut):
    commercial_terms: Optional[str] = None
    payment_terms: Optional[str] = None
    warranty_terms: Optional[str] = None
    price_score: Optional[float] = None
    estimated_budget: Optional[float] = None


class ApprovalOut(CamelModel):
    id: int
    document_id: str
    status: str
    comments: Optional[str] = None
    approver_role: Optional[str] = None
    approver_id: Optional[str] = None
    created_at: datetime
