from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from tenderflow.api.deps import get_current_principal
from tenderflow.core.logging_config import logger
from tenderflow.core.security import Principal
from tenderflow.crud.company import get_latest_profile
from tenderflow.db.database import get_db
from tenderflow.schemas.company import CompanyProfile

router = APIRouter()


@router.get("/profile", response_model=CompanyProfile)
async def get_profile(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    profile = await get_latest_profile(db)
    if not profile:
        logger.warning("No company profile configured")
        raise HTTPException(status_code=404, detail="Company profile not found")
    return profile
