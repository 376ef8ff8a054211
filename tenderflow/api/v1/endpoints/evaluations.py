from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from tenderflow.api.deps import get_current_principal, get_expected_version
from tenderflow.core.security import Principal
from tenderflow.db.database import get_db
from tenderflow.schemas.documents import DocumentStatus
from tenderflow.schemas.evaluations import (
    ApprovalIn,
    ApprovalOut,
    FinancialEvaluationIn,
    FinancialEvaluationOut,
    PreFeasibilityIn,
    PreFeasibilityOut,
    TechnicalEvaluationIn,
    TechnicalEvaluationOut,
    UnlockIn,
)
from tenderflow.services import workflow_service

router = APIRouter()


@router.post("/{document_id}/pre-feasibility", response_model=PreFeasibilityOut)
async def submit_pre_feasibility(
    document_id: str,
    payload: PreFeasibilityIn,
    db: AsyncSession = Depends(get_db),
    expected_version: Optional[int] = Depends(get_expected_version),
    principal: Principal = Depends(get_current_principal),
):
    return await workflow_service.submit_pre_feasibility(db, document_id, payload, principal, expected_version)


@router.post("/{document_id}/technical-eval", response_model=TechnicalEvaluationOut)
async def submit_technical_evaluation(
    document_id: str,
    payload: TechnicalEvaluationIn,
    db: AsyncSession = Depends(get_db),
    expected_version: Optional[int] = Depends(get_expected_version),
    principal: Principal = Depends(get_current_principal),
):
    return await workflow_service.submit_technical_evaluation(db, document_id, payload, principal, expected_version)


@router.post("/{document_id}/financial-eval", response_model=FinancialEvaluationOut)
async def submit_financial_evaluation(
    document_id: str,
    payload: FinancialEvaluationIn,
    db: AsyncSession = Depends(get_db),
    expected_version: Optional[int] = Depends(get_expected_version),
    principal: Principal = Depends(get_current_principal),
):
    return await workflow_service.submit_financial_evaluation(db, document_id, payload, principal, expected_version)


@router.post("/{document_id}/approve", response_model=ApprovalOut)
async def submit_approval(
    document_id: str,
    payload: ApprovalIn,
    db: AsyncSession = Depends(get_db),
    expected_version: Optional[int] = Depends(get_expected_version),
    principal: Principal = Depends(get_current_principal),
):
    return await workflow_service.submit_approval(db, document_id, payload, principal, expected_version)


@router.post("/{document_id}/unlock", response_model=DocumentStatus)
async def unlock_evaluation(
    document_id: str,
    payload: UnlockIn,
    response: Response,
    db: AsyncSession = Depends(get_db),
    expected_version: Optional[int] = Depends(get_expected_version),
    principal: Principal = Depends(get_current_principal),
):
    document = await workflow_service.unlock_evaluation(db, document_id, payload.evaluation_type, principal, expected_version)
    response.headers["ETag"] = str(document.version)
    return document
