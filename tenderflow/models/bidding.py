from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from tenderflow.models.base import Base, utcnow


class TenderLineItem(Base):
    __tablename__ = "tender_line_items"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    document_id = Column(String, ForeignKey("tender_documents.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    name = Column(String, nullable=False)
    unit = Column(String)
    quantity = Column(Float)
    estimated_price = Column(Float)
    total_price = Column(Float)
    notes = Column(Text)
    is_manual = Column(Boolean, nullable=False, default=False)  # edited by a person after extraction
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    document = relationship("TenderDocument", back_populates="line_items")


class BiddingConfig(Base):
    __tablename__ = "bidding_configs"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    document_id = Column(String, ForeignKey("tender_documents.id", ondelete="CASCADE"), nullable=False, unique=True)
    risk_premium_percent = Column(Float, nullable=False, default=0)
    profit_margin_percent = Column(Float, nullable=False, default=0)
    total_adjusted_bid = Column(Float)
    updated_by = Column(String)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    document = relationship("TenderDocument", back_populates="bidding_config")
