from typing import List, Optional, Tuple

from sqlalchemy import desc, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from tenderflow.models.documents import TenderDocument
from tenderflow.core.logging_config import logger


async def get_document(db: AsyncSession, document_id: str) -> TenderDocument | None:
    """Loads a document with its evaluation records (selectin relationships)."""
    result = await db.execute(select(TenderDocument).filter(TenderDocument.id == document_id))
    document = result.scalars().first()
    if not document:
        logger.warning(f"Document {document_id} not found")
    return document


async def create_document(db: AsyncSession, **fields) -> TenderDocument:
    document = TenderDocument(**fields)
    db.add(document)
    await db.flush()
    logger.info(f"Created document {document.id} ({document.original_file_name})")
    return document


async def delete_document(db: AsyncSession, document: TenderDocument) -> None:
    await db.delete(document)
    await db.flush()
    logger.info(f"Deleted document {document.id}")


async def list_documents(
    db: AsyncSession,
    offset: int,
    limit: int,
    status: Optional[str] = None,
    document_type: Optional[str] = None,
    visibility=None,
) -> Tuple[List[TenderDocument], int]:
    """One page of documents, newest first, and the total matching the filters."""
    query = select(TenderDocument)
    if status:
        query = query.where(TenderDocument.status == status)
    if document_type:
        query = query.where(TenderDocument.document_type == document_type)
    if visibility is not None:
        query = query.where(visibility)

    total_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(total_query)
    total = total_result.scalar()

    query = query.order_by(desc(TenderDocument.created_at), TenderDocument.id).offset(offset).limit(limit)
    result = await db.execute(query)
    documents = result.scalars().all()
    logger.info(f"Listing {len(documents)} documents, total={total}")
    return documents, total
