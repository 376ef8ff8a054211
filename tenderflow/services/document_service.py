"""Document listing, renaming and manual corrections of extracted data."""
import math
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from tenderflow.core.errors import ForbiddenError, NotFoundError, ValidationError
from tenderflow.core.logging_config import logger
from tenderflow.core.security import Principal
from tenderflow.crud.bidding import find_line_item, upsert_bidding_config
from tenderflow.crud.documents import list_documents as list_document_rows
from tenderflow.db.unit_of_work import unit_of_work
from tenderflow.models.base import utcnow
from tenderflow.models.bidding import BiddingConfig, TenderLineItem
from tenderflow.models.documents import TenderDocument
from tenderflow.models.enums import Role
from tenderflow.schemas.bidding import BiddingConfigIn, LineItemUpdate
from tenderflow.schemas.documents import DocumentList, DocumentSummary, DocumentUpdate, Pagination
from tenderflow.services.workflow_service import ANY_ROLE, PROCUREMENT_ROLES, load_document, require_role

MAX_PAGE_SIZE = 100


def _assignee_column(principal: Principal):
    if principal.role == Role.PROCUREMENT:
        return TenderDocument.assignee_proc_id
    return TenderDocument.assignee_tech_id


def visibility_filter(principal: Principal):
    """Admins see everything. Evaluators see what they uploaded, what they
    are assigned to, and what has no assignee for their role yet."""
    if principal.is_admin:
        return None
    assignee = _assignee_column(principal)
    return or_(TenderDocument.uploaded_by == principal.id, assignee == principal.id, assignee.is_(None))


def can_view(document: TenderDocument, principal: Principal) -> bool:
    if principal.is_admin:
        return True
    assignee = getattr(document, _assignee_column(principal).key)
    return document.uploaded_by == principal.id or not assignee or assignee == principal.id


async def list_documents(
    db: AsyncSession,
    principal: Principal,
    page: int = 1,
    limit: int = 20,
    status: Optional[str] = None,
    document_type: Optional[str] = None,
) -> DocumentList:
    require_role(principal, ANY_ROLE, "list documents")
    if page < 1:
        raise ValidationError.for_field("page", "must be at least 1")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValidationError.for_field("limit", f"must be between 1 and {MAX_PAGE_SIZE}")

    documents, total = await list_document_rows(
        db,
        offset=(page - 1) * limit,
        limit=limit,
        status=status,
        document_type=document_type,
        visibility=visibility_filter(principal),
    )
    return DocumentList(
        documents=[DocumentSummary.model_validate(document) for document in documents],
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit)),
    )


async def update_document(
    db: AsyncSession,
    document_id: str,
    payload: DocumentUpdate,
    principal: Principal,
    expected_version: Optional[int] = None,
) -> TenderDocument:
    require_role(principal, ANY_ROLE, "rename documents")
    async with unit_of_work(db, f"update {document_id}"):
        document = await load_document(db, document_id, expected_version)
        if not can_view(document, principal):
            logger.warning(f"User {principal.id} may not rename document {document_id}")
            raise ForbiddenError(f"You cannot change tender document {document_id}")
        document.title = payload.title
        await db.flush()

    logger.info(f"Document {document_id} renamed by {principal.id}")
    return document


async def update_line_item(
    db: AsyncSession,
    document_id: str,
    item_id: int,
    payload: LineItemUpdate,
    principal: Principal,
    expected_version: Optional[int] = None,
) -> TenderLineItem:
    """Applies a manual correction to one extracted line item."""
    require_role(principal, PROCUREMENT_ROLES, "edit line items")
    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes and changes["name"] is None:
        raise ValidationError.for_field("name", "cannot be empty")

    async with unit_of_work(db, f"line item {item_id} of {document_id}"):
        document = await load_document(db, document_id, expected_version)
        item = find_line_item(document, item_id)
        if item is None:
            raise NotFoundError(f"Line item {item_id} not found on tender document {document_id}")

        for key, value in changes.items():
            setattr(item, key, value)
        item.is_manual = True
        if item.quantity is not None and item.estimated_price is not None:
            item.total_price = item.quantity * item.estimated_price
        else:
            item.total_price = None
        document.updated_at = utcnow()
        await db.flush()

    logger.info(f"Line item {item_id} of {document_id} edited by {principal.id}")
    return item


def bid_base(document: TenderDocument) -> Optional[float]:
    """The AI recommended total, else the sum of the priced line items."""
    recommended = (document.analysis or {}).get("recommended_total")
    if recommended is not None:
        return float(recommended)
    totals = [item.total_price for item in document.line_items if item.total_price is not None]
    return sum(totals) if totals else None


def adjusted_bid(base: Optional[float], risk_premium_percent: float, profit_margin_percent: float) -> Optional[float]:
    if base is None:
        return None
    return round(base * (1 + risk_premium_percent / 100 + profit_margin_percent / 100), 2)


async def save_bidding_config(
    db: AsyncSession,
    document_id: str,
    payload: BiddingConfigIn,
    principal: Principal,
    expected_version: Optional[int] = None,
) -> BiddingConfig:
    require_role(principal, PROCUREMENT_ROLES, "configure bidding")
    async with unit_of_work(db, f"bidding config {document_id}"):
        document = await load_document(db, document_id, expected_version)
        data = payload.model_dump()
        if data["total_adjusted_bid"] is None:
            data["total_adjusted_bid"] = adjusted_bid(
                bid_base(document), payload.risk_premium_percent, payload.profit_margin_percent,
            )
        data["updated_by"] = principal.id
        config = await upsert_bidding_config(db, document_id, data)
        document.updated_at = utcnow()
        await db.flush()

    logger.info(f"Bidding config for {document_id} saved by {principal.id}: bid={config.total_adjusted_bid}")
    return config
