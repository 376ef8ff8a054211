from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tenderflow.core.config import settings
from tenderflow.core.errors import ConflictError, DependencyFailure, ValidationError
from tenderflow.core.logging_config import logger
from tenderflow.core.security import Principal
from tenderflow.crud.bidding import replace_line_items
from tenderflow.crud.documents import create_document, delete_document, get_document
from tenderflow.db.database import AsyncSessionLocal
from tenderflow.db.unit_of_work import unit_of_work
from tenderflow.models.documents import TenderDocument
from tenderflow.models.enums import ProcessingStatus, WorkflowStage
from tenderflow.services.ai_service import parse_line_items
from tenderflow.services.notifications import send_telegram_alert
from tenderflow.services.processing_state_machine import ProcessingStateMachine
from tenderflow.services.workflow_service import ADMIN_ONLY, TECHNICAL_ROLES, load_document, require_role
from tenderflow.services.workflow_state_machine import WorkflowStateMachine

ALLOWED_MIME_TYPES = {"application/pdf", "image/jpeg", "image/png", "image/tiff"}


def validate_upload(file_name: str, content: bytes, mime_type: Optional[str]) -> None:
    if not file_name:
        raise ValidationError.for_field("file", "file name is missing")
    if mime_type not in ALLOWED_MIME_TYPES:
        raise ValidationError.for_field("file", f"file type {mime_type} not allowed")
    if not content:
        raise ValidationError.for_field("file", "file is empty")
    if len(content) > settings.MAX_UPLOAD_MB * 1024 * 1024:
        raise ValidationError.for_field("file", f"file exceeds {settings.MAX_UPLOAD_MB} MB")


async def upload_document(
    db: AsyncSession,
    storage,
    file_name: str,
    content: bytes,
    mime_type: Optional[str],
    principal: Principal,
    title: Optional[str] = None,
) -> TenderDocument:
    require_role(principal, TECHNICAL_ROLES, "upload documents")
    validate_upload(file_name, content, mime_type)

    storage_path = await storage.store(file_name, content)
    async with unit_of_work(db, f"upload {file_name}"):
        document = await create_document(
            db,
            title=title or file_name.rsplit(".", 1)[0],
            original_file_name=file_name,
            storage_path=storage_path,
            mime_type=mime_type,
            file_size=len(content),
            uploaded_by=principal.id,
            status=ProcessingStatus.PENDING.value,
            workflow_stage=WorkflowStage.PRE_FEASIBILITY.value,
            is_tech_locked=False,
            is_proc_locked=False,
        )
    logger.info(f"Document {document.id} uploaded by {principal.id}")
    return document


async def process_document(
    document_id: str,
    storage,
    analyzer,
    session_factory: async_sessionmaker = AsyncSessionLocal,
) -> TenderDocument | None:
    """Background processing: PENDING -> PROCESSING -> COMPLETED, any failure -> FAILED.

    The analysis runs outside any transaction. Its result is written in a
    fresh session that re-reads the document, so evaluation work committed
    while the provider was busy is kept.
    """
    async with session_factory() as db:
        async with unit_of_work(db, f"start processing {document_id}"):
            document = await get_document(db, document_id)
            if not document:
                logger.error(f"Document {document_id} not found for processing")
                return None
            if document.status != ProcessingStatus.PENDING.value:
                logger.warning(f"Document {document_id} is {document.status}, not processing it again")
                return document
            sm = ProcessingStateMachine(document)
            await sm.start_processing()
            document.status = sm.state

    local_file = None
    try:
        result = None
        if analyzer is None:
            logger.warning(f"No AI provider configured, skipping analysis of {document_id}")
        else:
            local_file = await storage.retrieve(document.storage_path)
            result = await analyzer.analyze(document, local_file)
        document = await _record_analysis(session_factory, document_id, result)
        logger.info(f"Document {document_id} processed, type={document.document_type}")
        return document

    except Exception as e:
        logger.error(f"Error processing document {document_id}: {str(e)}")
        await _mark_failed(session_factory, document_id, e)
        raise

    finally:
        if local_file is not None:
            await storage.release(local_file)


async def _record_analysis(session_factory: async_sessionmaker, document_id: str, result) -> TenderDocument:
    for attempt in (1, 2):
        try:
            async with session_factory() as db:
                async with unit_of_work(db, f"record analysis of {document_id}"):
                    document = await load_document(db, document_id)
                    sm = ProcessingStateMachine(document)
                    await sm.complete()
                    document.status = sm.state
                    if result is not None:
                        document.analysis = result.model_dump(mode="json")
                        document.document_type = result.document_type or document.document_type
                        document.vendor_name = result.vendor_name or document.vendor_name
                        if result.estimated_budget is not None:
                            document.estimated_budget = result.estimated_budget
                        replace_line_items(document, parse_line_items(result.line_items))
                return document
        except ConflictError:
            if attempt == 2:
                raise
            logger.warning(f"Document {document_id} changed while recording its analysis, retrying")


async def _mark_failed(session_factory: async_sessionmaker, document_id: str, error: Exception) -> None:
    async with session_factory() as db:
        async with unit_of_work(db, f"fail processing of {document_id}"):
            document = await load_document(db, document_id)
            sm = ProcessingStateMachine(document)
            await sm.encounter_error()
            document.status = sm.state
            document.error_message = str(error)
            workflow = WorkflowStateMachine(document)
            if workflow.can("fail_processing"):
                await workflow.fail_processing()
                workflow.apply()
    await send_telegram_alert(document, f"Processing failed: {str(error)}")


async def remove_document(db: AsyncSession, storage, document_id: str, principal: Principal) -> None:
    require_role(principal, ADMIN_ONLY, "delete documents")
    async with unit_of_work(db, f"delete {document_id}"):
        document = await load_document(db, document_id)
        storage_path = document.storage_path
        await delete_document(db, document)

    if storage_path:
        try:
            await storage.delete(storage_path)
        except DependencyFailure as e:
            logger.warning(f"Document {document_id} deleted but its file was not: {e}")
