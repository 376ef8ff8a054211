from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class AnalysisResult(BaseModel):
    """Structured extraction returned by the AI provider."""
    document_type: Optional[str] = None
    vendor_name: Optional[str] = None
    estimated_budget: Optional[float] = None
    risk_level: Optional[str] = None
    recommended_total: Optional[float] = None
    line_items: List[Dict[str, Any]] = []
    compliance: List[Dict[str, Any]] = []
    raw: Dict[str, Any] = {}
