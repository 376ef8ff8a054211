from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession
from tenderflow.crud.evaluations import _upsert_by_document
from tenderflow.models.bidding import BiddingConfig, TenderLineItem
from tenderflow.models.documents import TenderDocument
from tenderflow.core.logging_config import logger


def replace_line_items(document: TenderDocument, items: List[Dict[str, Any]]) -> None:
    """Swaps extracted items in, keeping rows a person already edited."""
    manual = [item for item in document.line_items if item.is_manual]
    document.line_items = manual + [TenderLineItem(**item) for item in items]
    logger.debug(f"Document {document.id}: {len(items)} extracted line items, {len(manual)} manual kept")


def find_line_item(document: TenderDocument, item_id: int) -> TenderLineItem | None:
    return next((item for item in document.line_items if item.id == item_id), None)


async def upsert_bidding_config(db: AsyncSession, document_id: str, payload: Dict[str, Any]) -> BiddingConfig:
    return await _upsert_by_document(db, BiddingConfig, document_id, payload)
