import os
import tempfile
from datetime import date

_workdir = tempfile.mkdtemp(prefix="tenderflow-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_workdir}/tenderflow-test.db"
os.environ["JWT_SECRET"] = "tenderflow-test-secret-0123456789abcdef"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["STORAGE_PATH"] = os.path.join(_workdir, "uploads")
os.environ["AI_API_BASE_URL"] = ""
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["TELEGRAM_CHAT_ID"] = ""
os.environ["LOG_FILE"] = ""

import pytest

from tenderflow.core.security import Principal
from tenderflow.crud.documents import create_document, get_document
from tenderflow.db.database import AsyncSessionLocal, engine
from tenderflow.models.base import Base
from tenderflow.models.company import CompanyExperience, CompanyFinance, CompanyProfile
from tenderflow.models.enums import Role, WorkflowStage

ADMIN = Principal(id="admin-1", role=Role.ADMIN)
TECH_USER = Principal(id="tech-1", role=Role.TECHNICAL)
OTHER_TECH_USER = Principal(id="tech-2", role=Role.TECHNICAL)
PROC_USER = Principal(id="proc-1", role=Role.PROCUREMENT)

TECH_CRITERIA = [
    {"id": "c1", "label": "Methodology", "weight": 50},
    {"id": "c2", "label": "Team", "weight": 50},
]


@pytest.fixture
async def session_factory():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield AsyncSessionLocal
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def make_document(session_factory):
    async def _make(**fields):
        fields.setdefault("title", "Road resurfacing tender")
        fields.setdefault("original_file_name", "tender.pdf")
        fields.setdefault("mime_type", "application/pdf")
        async with session_factory() as db:
            document = await create_document(db, **fields)
            await db.commit()
            return document
    return _make


@pytest.fixture
async def tech_document(make_document):
    return await make_document(
        workflow_stage=WorkflowStage.TECHNICAL_EVALUATION.value,
        tech_criteria=TECH_CRITERIA,
        assignee_tech_id=TECH_USER.id,
        assignee_proc_id=PROC_USER.id,
    )


@pytest.fixture
def reload(session_factory):
    async def _reload(document_id):
        async with session_factory() as db:
            return await get_document(db, document_id)
    return _reload


@pytest.fixture
def make_company(session_factory):
    async def _make(contract_values=(), finances=()):
        company = CompanyProfile(name="Acme Construction")
        company.experience = [
            CompanyExperience(project_title=f"Project {i}", value=value, completion_date=date(2020 + i, 1, 1))
            for i, value in enumerate(contract_values)
        ]
        company.finances = [CompanyFinance(year=year, revenue=revenue) for year, revenue in finances]
        async with session_factory() as db:
            db.add(company)
            await db.commit()
        return company
    return _make
