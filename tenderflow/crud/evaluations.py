from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from tenderflow.models.enums import EvaluationType
from tenderflow.models.evaluations import (
    ApprovalRequest,
    FinancialEvaluation,
    PreFeasibilityEvaluation,
    ScoringConfig,
    TechnicalEvaluation,
)
from tenderflow.core.logging_config import logger

EVALUATION_MODELS = {
    EvaluationType.PRE_FEASIBILITY: PreFeasibilityEvaluation,
    EvaluationType.TECHNICAL: TechnicalEvaluation,
    EvaluationType.FINANCIAL: FinancialEvaluation,
}


async def _upsert_by_document(db: AsyncSession, model, document_id: str, payload: Dict[str, Any]):
    result = await db.execute(select(model).filter(model.document_id == document_id))
    record = result.scalars().first()
    if record:
        for key, value in payload.items():
            setattr(record, key, value)
        logger.debug(f"Updating {model.__tablename__} record for document {document_id}")
    else:
        record = model(document_id=document_id, **payload)
        logger.debug(f"Creating {model.__tablename__} record for document {document_id}")
    db.add(record)
    await db.flush()
    return record


async def upsert_evaluation(db: AsyncSession, document_id: str, evaluation_type: EvaluationType, payload: Dict[str, Any]):
    """One record per (document, evaluation type). Flushes, the caller commits."""
    return await _upsert_by_document(db, EVALUATION_MODELS[evaluation_type], document_id, payload)


async def upsert_scoring_config(db: AsyncSession, document_id: str, payload: Dict[str, Any]) -> ScoringConfig:
    return await _upsert_by_document(db, ScoringConfig, document_id, payload)


async def append_approval(db: AsyncSession, document_id: str, payload: Dict[str, Any]) -> ApprovalRequest:
    approval = ApprovalRequest(document_id=document_id, **payload)
    db.add(approval)
    await db.flush()
    return approval

