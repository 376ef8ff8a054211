from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from tenderflow.api.deps import (
    analyzer_dependency,
    get_current_principal,
    get_expected_version,
    storage_dependency,
)
from tenderflow.core.logging_config import logger
from tenderflow.core.security import Principal
from tenderflow.db.database import get_db
from tenderflow.schemas.bidding import BiddingConfigIn, BiddingConfigOut, LineItemOut, LineItemUpdate
from tenderflow.schemas.documents import (
    CriteriaSetup,
    DocumentDetail,
    DocumentList,
    DocumentStatus,
    DocumentUpdate,
    ScoringConfigIn,
    ScoringConfigOut,
    UploadResponse,
)
from tenderflow.services.document_service import (
    MAX_PAGE_SIZE,
    list_documents,
    save_bidding_config,
    update_document,
    update_line_item,
)
from tenderflow.services.processing_service import process_document, remove_document, upload_document
from tenderflow.services.workflow_service import configure_scoring, load_document, setup_criteria

router = APIRouter()


@router.post(
    "/upload",
    response_model=UploadResponse,
    summary="Upload tender documents",
    description="Stores the files, creates one document per file at PRE_FEASIBILITY and starts AI analysis in the background.",
)
async def upload_documents(
    background_tasks: BackgroundTasks,
    files: List[UploadFile] = File(...),
    title: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    storage=Depends(storage_dependency),
    analyzer=Depends(analyzer_dependency),
    principal: Principal = Depends(get_current_principal),
):
    logger.info(f"Received {len(files)} files from {principal.id}")
    documents = []
    for upload in files:
        content = await upload.read()
        document = await upload_document(
            db, storage, upload.filename, content, upload.content_type, principal,
            title=title if len(files) == 1 else None,
        )
        background_tasks.add_task(process_document, document.id, storage, analyzer)
        documents.append(DocumentStatus.model_validate(document))
    return UploadResponse(status="success", documents=documents)


@router.get(
    "/list",
    response_model=DocumentList,
    summary="List tender documents",
    description="Newest first. Evaluators only see documents they uploaded, are assigned to, or that have no assignee yet.",
)
async def list_tender_documents(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    status: Optional[str] = Query(None, description="Processing status filter"),
    document_type: Optional[str] = Query(None, alias="documentType", description="Document type filter"),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    logger.info(f"Listing documents for {principal.id}: page={page}, limit={limit}, status={status}, type={document_type}")
    return await list_documents(db, principal, page, limit, status, document_type)


@router.get("/{document_id}", response_model=DocumentDetail)
async def get_document_detail(
    document_id: str,
    response: Response,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    document = await load_document(db, document_id)
    response.headers["ETag"] = str(document.version)
    return document


@router.get("/{document_id}/status", response_model=DocumentStatus)
async def get_document_status(
    document_id: str,
    response: Response,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    document = await load_document(db, document_id)
    response.headers["ETag"] = str(document.version)
    return document


@router.delete("/{document_id}")
async def delete_document(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    storage=Depends(storage_dependency),
    principal: Principal = Depends(get_current_principal),
):
    await remove_document(db, storage, document_id, principal)
    return {"status": "success"}


@router.post("/{document_id}/setup-criteria", response_model=DocumentDetail)
async def setup_document_criteria(
    document_id: str,
    payload: CriteriaSetup,
    response: Response,
    db: AsyncSession = Depends(get_db),
    expected_version: Optional[int] = Depends(get_expected_version),
    principal: Principal = Depends(get_current_principal),
):
    document = await setup_criteria(db, document_id, payload, principal, expected_version)
    response.headers["ETag"] = str(document.version)
    return document


@router.put("/{document_id}/scoring-config", response_model=ScoringConfigOut)
async def set_scoring_config(
    document_id: str,
    payload: ScoringConfigIn,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return await configure_scoring(db, document_id, payload, principal)


@router.patch("/{document_id}", response_model=DocumentDetail)
async def rename_document(
    document_id: str,
    payload: DocumentUpdate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    expected_version: Optional[int] = Depends(get_expected_version),
    principal: Principal = Depends(get_current_principal),
):
    document = await update_document(db, document_id, payload, principal, expected_version)
    response.headers["ETag"] = str(document.version)
    return document


@router.put("/{document_id}/line-items/{item_id}", response_model=LineItemOut)
async def edit_line_item(
    document_id: str,
    item_id: int,
    payload: LineItemUpdate,
    db: AsyncSession = Depends(get_db),
    expected_version: Optional[int] = Depends(get_expected_version),
    principal: Principal = Depends(get_current_principal),
):
    return await update_line_item(db, document_id, item_id, payload, principal, expected_version)


@router.post("/{document_id}/bidding-config", response_model=BiddingConfigOut)
async def set_bidding_config(
    document_id: str,
    payload: BiddingConfigIn,
    db: AsyncSession = Depends(get_db),
    expected_version: Optional[int] = Depends(get_expected_version),
    principal: Principal = Depends(get_current_principal),
):
    return await save_bidding_config(db, document_id, payload, principal, expected_version)
