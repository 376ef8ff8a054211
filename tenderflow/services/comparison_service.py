import asyncio
from typing import Iterable, List

from sqlalchemy.ext.asyncio import async_sessionmaker

from tenderflow.core.logging_config import logger
from tenderflow.crud.company import get_latest_profile
from tenderflow.crud.documents import get_document
from tenderflow.db.database import AsyncSessionLocal
from tenderflow.db.unit_of_work import unit_of_work
from tenderflow.models.company import CompanyProfile
from tenderflow.models.documents import TenderDocument
from tenderflow.schemas.bidding import BiddingConfigOut
from tenderflow.schemas.comparison import RankEntry, ScoreBreakdown
from tenderflow.schemas.documents import ScoringConfigOut
from tenderflow.services.experience_calculator import experience_score, feasibility_score
from tenderflow.services.score_aggregator import resolve_weights, total_score


def build_entry(document: TenderDocument, company: CompanyProfile | None) -> RankEntry:
    weights = resolve_weights(document.scoring_config)
    tech = document.technical_eval.score if document.technical_eval else 0.0
    financial = document.financial_eval.score if document.financial_eval else 0.0
    return RankEntry(
        id=document.id,
        title=document.title,
        vendor_name=document.vendor_name,
        document_type=document.document_type,
        workflow_stage=document.workflow_stage,
        total_score=total_score(tech, financial, weights["tech_weight"]),
        feasibility_score=feasibility_score(document, company),
        breakdown=ScoreBreakdown(
            technical=tech,
            financial=financial,
            experience=experience_score(document, company),
        ),
        weights=ScoringConfigOut(**weights),
        bidding_config=BiddingConfigOut.model_validate(document.bidding_config) if document.bidding_config else None,
    )


async def _load_company(session_factory: async_sessionmaker) -> CompanyProfile | None:
    async with session_factory() as db:
        async with unit_of_work(db, "load company profile", commit=False):
            return await get_latest_profile(db)


async def _score_document(session_factory: async_sessionmaker, document_id: str, company) -> RankEntry | None:
    async with session_factory() as db:
        async with unit_of_work(db, f"score {document_id}", commit=False):
            document = await get_document(db, document_id)
            if not document:
                logger.info(f"Skipping unknown document {document_id} in ranking")
                return None
            return build_entry(document, company)


async def rank(document_ids: Iterable[str], session_factory: async_sessionmaker = AsyncSessionLocal) -> List[RankEntry]:
    """Scores each document concurrently, in input order, skipping unknown ids.

    Order is not a ranking; callers sort by ``total_score``.
    """
    unique_ids = list(dict.fromkeys(document_ids))
    if not unique_ids:
        return []

    company = await _load_company(session_factory)
    results = await asyncio.gather(*(_score_document(session_factory, document_id, company) for document_id in unique_ids))
    entries = [entry for entry in results if entry is not None]
    logger.info(f"Ranked {len(entries)} of {len(unique_ids)} requested documents")
    return entries
