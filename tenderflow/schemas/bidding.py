from pydantic import Field
from typing import Optional
from datetime import datetime

from tenderflow.schemas.base import CamelModel


class LineItemOut(CamelModel):
    id: int
    position: int
    name: str
    unit: Optional[str] = None
    quantity: Optional[float] = None
    estimated_price: Optional[float] = None
    total_price: Optional[float] = None
    notes: Optional[str] = None
    is_manual: bool = False


class LineItemUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    unit: Optional[str] = None
    quantity: Optional[float] = Field(None, ge=0)
    estimated_price: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class BiddingConfigIn(CamelModel):
    risk_premium_percent: float = Field(0, ge=0, le=100)
    profit_margin_percent: float = Field(0, ge=0, le=100)
    total_adjusted_bid: Optional[float] = Field(None, ge=0, description="Derived from the AI recommended total when omitted")


class BiddingConfigOut(BiddingConfigIn):
    updated_by: Optional[str] = None
    updated_at: Optional[datetime] = None
