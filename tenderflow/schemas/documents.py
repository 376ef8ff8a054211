from pydantic import Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime

from tenderflow.schemas.base import CamelModel
from tenderflow.schemas.bidding import BiddingConfigOut, LineItemOut


class Criterion(CamelModel):
    id: str = Field(..., min_length=1)
    label: str = ""
    weight: float = Field(..., ge=0, le=100, description="Weight in percent")


class CriteriaSetup(CamelModel):
    tech_criteria: Optional[List[Criterion]] = None
    proc_criteria: Optional[List[Criterion]] = None
    assignee_tech_id: Optional[str] = None
    assignee_proc_id: Optional[str] = None

    @field_validator("tech_criteria", "proc_criteria")
    @classmethod
    def check_unique_ids(cls, criteria: Optional[List[Criterion]]) -> Optional[List[Criterion]]:
        if criteria is None:
            return criteria
        seen = set()
        for criterion in criteria:
            if criterion.id in seen:
                raise ValueError(f"duplicate criterion id '{criterion.id}'")
            seen.add(criterion.id)
        return criteria


class ScoringConfigIn(CamelModel):
    tech_weight: float = Field(0.4, ge=0, le=1)
    personnel_weight: float = Field(0.2, ge=0, le=1)
    experience_weight: float = Field(0.4, ge=0, le=1)


class ScoringConfigOut(ScoringConfigIn):
    pass


class DocumentStatus(CamelModel):
    id: str
    status: str
    workflow_stage: str
    is_tech_locked: bool
    is_proc_locked: bool
    version: int
    error_message: Optional[str] = None


class DocumentDetail(DocumentStatus):
    title: str
    original_file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    document_type: Optional[str] = None
    estimated_budget: Optional[float] = None
    vendor_name: Optional[str] = None
    analysis: Optional[Dict[str, Any]] = None
    uploaded_by: Optional[str] = None
    assignee_tech_id: Optional[str] = None
    assignee_proc_id: Optional[str] = None
    tech_criteria: List[Criterion] = []
    proc_criteria: List[Criterion] = []
    line_items: List[LineItemOut] = []
    bidding_config: Optional[BiddingConfigOut] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("tech_criteria", "proc_criteria", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value or []


class UploadResponse(CamelModel):
    status: str
    documents: List[DocumentStatus]


class DocumentUpdate(CamelModel):
    title: str = Field(..., min_length=1, max_length=500)


class DocumentSummary(DocumentStatus):
    title: str
    document_type: Optional[str] = None
    vendor_name: Optional[str] = None
    uploaded_by: Optional[str] = None
    created_at: datetime


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class DocumentList(CamelModel):
    documents: List[DocumentSummary]
    pagination: Pagination
