"""Evaluation workflow operations.

Each operation reads the document, runs every guard (role, assignee, stage,
lock, payload), and only then upserts the evaluation record and moves the
stage, all inside one ``unit_of_work`` transaction.
"""
from typing import Iterable, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tenderflow.core.errors import (
    EvaluationLockedError,
    ForbiddenError,
    InvalidStageError,
    NotFoundError,
    ConflictError,
    ValidationError,
)
from tenderflow.core.logging_config import logger
from tenderflow.core.security import Principal, authorize
from tenderflow.crud.documents import get_document
from tenderflow.crud.evaluations import append_approval, upsert_evaluation, upsert_scoring_config
from tenderflow.db.unit_of_work import unit_of_work
from tenderflow.models.base import utcnow
from tenderflow.models.documents import TenderDocument
from tenderflow.models.enums import (
    EVALUATION_STAGES,
    ApprovalStatus,
    EvaluationType,
    ProcessingStatus,
    Role,
    WorkflowStage,
)
from tenderflow.models.evaluations import (
    ApprovalRequest,
    FinancialEvaluation,
    PreFeasibilityEvaluation,
    ScoringConfig,
    TechnicalEvaluation,
)
from tenderflow.schemas.documents import CriteriaSetup, ScoringConfigIn
from tenderflow.schemas.evaluations import (
    ApprovalIn,
    FinancialEvaluationIn,
    PreFeasibilityIn,
    TechnicalEvaluationIn,
)
from tenderflow.services.notifications import send_telegram_alert
from tenderflow.services.score_aggregator import weighted_score
from tenderflow.services.workflow_state_machine import WorkflowStateMachine

ANY_ROLE = (Role.ADMIN, Role.TECHNICAL, Role.PROCUREMENT)
TECHNICAL_ROLES = (Role.ADMIN, Role.TECHNICAL)
PROCUREMENT_ROLES = (Role.ADMIN, Role.PROCUREMENT)
ADMIN_ONLY = (Role.ADMIN,)


def require_role(principal: Principal, roles: Iterable[Role], action: str) -> None:
    if not authorize(principal, roles):
        logger.warning(f"User {principal.id} ({principal.role.value}) denied: {action}")
        raise ForbiddenError(f"Role {principal.role.value} is not allowed to {action}")


def require_assignee(principal: Principal, assignee_id: Optional[str], label: str) -> None:
    if principal.is_admin or not assignee_id or assignee_id == principal.id:
        return
    logger.warning(f"User {principal.id} is not the designated {label} evaluator")
    raise ForbiddenError(f"You are not the designated {label} evaluator for this tender")


async def load_document(db: AsyncSession, document_id: str, expected_version: Optional[int] = None) -> TenderDocument:
    document = await get_document(db, document_id)
    if not document:
        raise NotFoundError(f"Tender document {document_id} not found")
    if expected_version is not None and document.version != expected_version:
        raise ConflictError(
            f"Tender document {document_id} is at version {document.version}, not {expected_version}"
        )
    return document


def require_trigger(machine: WorkflowStateMachine, trigger: str) -> None:
    if not machine.can(trigger):
        raise InvalidStageError(f"Cannot {trigger.replace('_', ' ')} while document is in stage {machine.state}")


def require_evaluation_stage(document: TenderDocument) -> None:
    if document.workflow_stage not in [stage.value for stage in EVALUATION_STAGES]:
        raise InvalidStageError(f"Evaluations are not accepted while document is in stage {document.workflow_stage}")


def resolve_score(
    configured: Optional[List[Mapping]],
    values: Mapping[str, float],
    score: Optional[float],
    fallback: Optional[float] = None,
) -> float:
    """Explicit score wins, then the weighted criteria values, then ``fallback``."""
    configured = configured or []
    known = {criterion["id"] for criterion in configured}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValidationError(
            f"Unknown criteria: {', '.join(unknown)}",
            [{"field": f"criteria.{criterion_id}", "message": "not configured for this document"} for criterion_id in unknown],
        )
    if score is not None:
        return score
    if values:
        return weighted_score(configured, values)
    if fallback is not None:
        return fallback
    raise ValidationError.for_field("score", "required when no criteria values are submitted")


async def submit_pre_feasibility(
    db: AsyncSession,
    document_id: str,
    payload: PreFeasibilityIn,
    principal: Principal,
    expected_version: Optional[int] = None,
) -> PreFeasibilityEvaluation:
    require_role(principal, ANY_ROLE, "submit pre-feasibility")
    async with unit_of_work(db, f"pre-feasibility {document_id}"):
        document = await load_document(db, document_id, expected_version)
        machine = WorkflowStateMachine(document)
        trigger = "pass_pre_feasibility" if payload.overall_pass else "fail_pre_feasibility"
        require_trigger(machine, trigger)

        data = payload.model_dump(exclude_unset=True)
        data.update(evaluated_by=principal.id, evaluated_at=utcnow())
        evaluation = await upsert_evaluation(db, document_id, EvaluationType.PRE_FEASIBILITY, data)

        await machine.trigger(trigger)
        machine.apply()
        if not payload.overall_pass:
            document.status = ProcessingStatus.FAILED.value
            document.error_message = "Pre-feasibility gate failed"
        await db.flush()

    logger.info(f"Pre-feasibility for {document_id} submitted by {principal.id}: overall_pass={payload.overall_pass}")
    return evaluation


async def submit_technical_evaluation(
    db: AsyncSession,
    document_id: str,
    payload: TechnicalEvaluationIn,
    principal: Principal,
    expected_version: Optional[int] = None,
) -> TechnicalEvaluation:
    require_role(principal, TECHNICAL_ROLES, "submit technical evaluations")
    async with unit_of_work(db, f"technical evaluation {document_id}"):
        document = await load_document(db, document_id, expected_version)
        require_assignee(principal, document.assignee_tech_id, "technical")
        require_evaluation_stage(document)
        if document.is_tech_locked:
            raise EvaluationLockedError(f"Technical evaluation of {document_id} is locked")

        score = resolve_score(document.tech_criteria, payload.criteria, payload.score)
        data = payload.model_dump(exclude_unset=True, exclude={"lock_score", "score"})
        if payload.score is not None and "criteria" not in payload.model_fields_set:
            data["criteria"] = None  # an explicit score replaces earlier per-criterion values
        data.update(score=score, evaluated_by=principal.id)
        document.updated_at = utcnow()
        evaluation = await upsert_evaluation(db, document_id, EvaluationType.TECHNICAL, data)

        if payload.lock_score:
            document.is_tech_locked = True
            machine = WorkflowStateMachine(document)
            await machine.lock_technical()
            machine.apply()
        await db.flush()

    logger.info(f"Technical evaluation for {document_id} saved by {principal.id}: score={score}, locked={payload.lock_score}")
    if document.workflow_stage == WorkflowStage.FINAL_APPROVAL.value and payload.lock_score:
        await send_telegram_alert(document, "Both evaluations locked, ready for final approval")
    return evaluation


async def submit_financial_evaluation(
    db: AsyncSession,
    document_id: str,
    payload: FinancialEvaluationIn,
    principal: Principal,
    expected_version: Optional[int] = None,
) -> FinancialEvaluation:
    require_role(principal, PROCUREMENT_ROLES, "submit financial evaluations")
    async with unit_of_work(db, f"financial evaluation {document_id}"):
        document = await load_document(db, document_id, expected_version)
        require_assignee(principal, document.assignee_proc_id, "procurement")
        require_evaluation_stage(document)
        if document.is_proc_locked:
            raise EvaluationLockedError(f"Financial evaluation of {document_id} is locked")

        score = resolve_score(document.proc_criteria, payload.criteria, payload.score, fallback=payload.price_score)
        data = payload.model_dump(exclude_unset=True, exclude={"lock_score", "score"})
        if payload.score is not None and "criteria" not in payload.model_fields_set:
            data["criteria"] = None  # an explicit score replaces earlier per-criterion values
        data.update(score=score, evaluated_by=principal.id)
        document.updated_at = utcnow()
        evaluation = await upsert_evaluation(db, document_id, EvaluationType.FINANCIAL, data)

        if payload.lock_score:
            document.is_proc_locked = True
            machine = WorkflowStateMachine(document)
            await machine.lock_procurement()
            machine.apply()
        await db.flush()

    logger.info(f"Financial evaluation for {document_id} saved by {principal.id}: score={score}, locked={payload.lock_score}")
    if document.workflow_stage == WorkflowStage.FINAL_APPROVAL.value and payload.lock_score:
        await send_telegram_alert(document, "Both evaluations locked, ready for final approval")
    return evaluation


async def submit_approval(
    db: AsyncSession,
    document_id: str,
    payload: ApprovalIn,
    principal: Principal,
    expected_version: Optional[int] = None,
) -> ApprovalRequest:
    require_role(principal, ADMIN_ONLY, "approve tenders")
    status = payload.status.strip().upper()
    async with unit_of_work(db, f"approval {document_id}"):
        document = await load_document(db, document_id, expected_version)
        machine = WorkflowStateMachine(document)
        require_trigger(machine, "approve")

        approval = await append_approval(db, document_id, {
            "status": status,
            "comments": payload.comments,
            "approver_role": payload.approver_role or principal.role.value,
            "approver_id": principal.id,
        })
        document.updated_at = utcnow()

        if status == ApprovalStatus.APPROVED.value:
            await machine.approve()
        elif status == ApprovalStatus.REJECTED.value:
            await machine.reject()
        machine.apply()
        await db.flush()

    logger.info(f"Approval {status} recorded for {document_id} by {principal.id}, stage={document.workflow_stage}")
    if status == ApprovalStatus.REJECTED.value:
        await send_telegram_alert(document, f"Tender rejected: {payload.comments}")
    return approval


async def unlock_evaluation(
    db: AsyncSession,
    document_id: str,
    evaluation_type: EvaluationType,
    principal: Principal,
    expected_version: Optional[int] = None,
) -> TenderDocument:
    """Admin override that clears a lock and reopens the matching evaluation stage."""
    require_role(principal, ADMIN_ONLY, "unlock evaluations")
    if evaluation_type == EvaluationType.PRE_FEASIBILITY:
        raise ValidationError.for_field("evaluationType", "pre-feasibility evaluations cannot be unlocked")

    technical = evaluation_type == EvaluationType.TECHNICAL
    async with unit_of_work(db, f"unlock {evaluation_type.value} {document_id}"):
        document = await load_document(db, document_id, expected_version)
        locked = document.is_tech_locked if technical else document.is_proc_locked
        if not locked:
            logger.info(f"{evaluation_type.value} evaluation of {document_id} is not locked, nothing to do")
            return document

        machine = WorkflowStateMachine(document)
        trigger = "unlock_technical" if technical else "unlock_procurement"
        require_trigger(machine, trigger)
        if technical:
            document.is_tech_locked = False
        else:
            document.is_proc_locked = False
        await machine.trigger(trigger)
        machine.apply()
        await db.flush()

    logger.info(f"{evaluation_type.value} evaluation of {document_id} unlocked by {principal.id}")
    return document


async def setup_criteria(
    db: AsyncSession,
    document_id: str,
    payload: CriteriaSetup,
    principal: Principal,
    expected_version: Optional[int] = None,
) -> TenderDocument:
    require_role(principal, ADMIN_ONLY, "set up criteria")
    async with unit_of_work(db, f"setup criteria {document_id}"):
        document = await load_document(db, document_id, expected_version)
        if payload.tech_criteria is not None:
            if document.is_tech_locked:
                raise EvaluationLockedError("Technical criteria cannot change after the technical evaluation is locked")
            document.tech_criteria = [criterion.model_dump() for criterion in payload.tech_criteria]
        if payload.proc_criteria is not None:
            if document.is_proc_locked:
                raise EvaluationLockedError("Procurement criteria cannot change after the financial evaluation is locked")
            document.proc_criteria = [criterion.model_dump() for criterion in payload.proc_criteria]
        if payload.assignee_tech_id is not None:
            document.assignee_tech_id = payload.assignee_tech_id
        if payload.assignee_proc_id is not None:
            document.assignee_proc_id = payload.assignee_proc_id
        await db.flush()

    logger.info(f"Criteria for {document_id} configured by {principal.id}")
    return document


async def configure_scoring(
    db: AsyncSession,
    document_id: str,
    payload: ScoringConfigIn,
    principal: Principal,
) -> ScoringConfig:
    require_role(principal, ADMIN_ONLY, "configure scoring")
    async with unit_of_work(db, f"scoring config {document_id}"):
        await load_document(db, document_id)
        config = await upsert_scoring_config(db, document_id, payload.model_dump())

    logger.info(f"Scoring weights for {document_id} set by {principal.id}: {payload.model_dump()}")
    return config
