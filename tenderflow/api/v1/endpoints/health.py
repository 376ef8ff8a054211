from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import text
from tenderflow.db.database import get_db
from tenderflow.db.unit_of_work import unit_of_work

router = APIRouter()


@router.get("/")
async def health(db: AsyncSession = Depends(get_db)):
    async with unit_of_work(db, "health check", commit=False):
        await db.execute(text("SELECT 1"))
    return {"status": "ok"}
