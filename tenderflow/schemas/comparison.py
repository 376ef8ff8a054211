from typing import List, Optional

from tenderflow.schemas.base import CamelModel
from tenderflow.schemas.bidding import BiddingConfigOut
from tenderflow.schemas.documents import ScoringConfigOut


class ScoreBreakdown(CamelModel):
    technical: float
    financial: float
    experience: float


class RankEntry(CamelModel):
    id: str
    title: str
    vendor_name: Optional[str] = None
    document_type: Optional[str] = None
    workflow_stage: str
    total_score: float
    feasibility_score: float
    breakdown: ScoreBreakdown
    weights: ScoringConfigOut
    bidding_config: Optional[BiddingConfigOut] = None


class RankingResponse(CamelModel):
    results: List[RankEntry]
    total: int
