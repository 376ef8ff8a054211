from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import async_sessionmaker
from tenderflow.api.deps import get_current_principal
from tenderflow.core.logging_config import logger
from tenderflow.core.security import Principal
from tenderflow.db.database import get_session_factory
from tenderflow.schemas.comparison import RankingResponse
from tenderflow.services.comparison_service import rank

router = APIRouter()


@router.get(
    "",
    response_model=RankingResponse,
    summary="Compare tender documents",
    description="Scores the given documents and returns them ranked by total score, highest first. Unknown ids are skipped.",
)
async def compare_documents(
    ids: str = Query(..., description="Comma separated document ids"),
    session_factory: async_sessionmaker = Depends(get_session_factory),
    principal: Principal = Depends(get_current_principal),
):
    id_list = [document_id.strip() for document_id in ids.split(",") if document_id.strip()]
    if not id_list:
        raise HTTPException(status_code=400, detail="No document ids provided")

    logger.info(f"Comparing {len(id_list)} documents for {principal.id}")
    entries = await rank(id_list, session_factory=session_factory)
    entries.sort(key=lambda entry: entry.total_score, reverse=True)
    return {"results": entries, "total": len(entries)}
