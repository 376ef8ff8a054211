from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from tenderflow.models.company import CompanyProfile


async def get_latest_profile(db: AsyncSession) -> CompanyProfile | None:
    """Latest company profile with finances, experience and personnel."""
    result = await db.execute(
        select(CompanyProfile).order_by(CompanyProfile.created_at.desc(), CompanyProfile.id.desc()).limit(1)
    )
    return result.scalars().first()
