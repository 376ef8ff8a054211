import pytest
from transitions import MachineError

from tenderflow.models.documents import TenderDocument
from tenderflow.models.enums import WorkflowStage
from tenderflow.services.workflow_state_machine import WorkflowStateMachine


def document_at(stage, tech_locked=False, proc_locked=False):
    return TenderDocument(
        id="doc-1",
        title="Bridge",
        workflow_stage=stage.value,
        is_tech_locked=tech_locked,
        is_proc_locked=proc_locked,
    )


async def test_pre_feasibility_fork():
    passed = WorkflowStateMachine(document_at(WorkflowStage.PRE_FEASIBILITY))
    await passed.pass_pre_feasibility()
    assert passed.apply() == WorkflowStage.TECHNICAL_EVALUATION.value
    assert passed.document.workflow_stage == WorkflowStage.TECHNICAL_EVALUATION.value

    failed = WorkflowStateMachine(document_at(WorkflowStage.PRE_FEASIBILITY))
    await failed.fail_pre_feasibility()
    assert failed.state == WorkflowStage.COMPLETED.value


@pytest.mark.parametrize("stage", [WorkflowStage.TECHNICAL_EVALUATION, WorkflowStage.FINANCIAL_EVALUATION])
async def test_technical_lock_waits_for_procurement(stage):
    machine = WorkflowStateMachine(document_at(stage, tech_locked=True))
    await machine.lock_technical()
    assert machine.state == WorkflowStage.FINANCIAL_EVALUATION.value

    joined = WorkflowStateMachine(document_at(stage, tech_locked=True, proc_locked=True))
    await joined.lock_technical()
    assert joined.state == WorkflowStage.FINAL_APPROVAL.value


@pytest.mark.parametrize("stage", [WorkflowStage.TECHNICAL_EVALUATION, WorkflowStage.FINANCIAL_EVALUATION])
async def test_procurement_lock_waits_for_technical(stage):
    machine = WorkflowStateMachine(document_at(stage, proc_locked=True))
    await machine.lock_procurement()
    assert machine.state == WorkflowStage.TECHNICAL_EVALUATION.value

    joined = WorkflowStateMachine(document_at(stage, tech_locked=True, proc_locked=True))
    await joined.lock_procurement()
    assert joined.state == WorkflowStage.FINAL_APPROVAL.value


async def test_final_approval_outcomes():
    approved = WorkflowStateMachine(document_at(WorkflowStage.FINAL_APPROVAL))
    await approved.approve()
    assert approved.state == WorkflowStage.COMPLETED.value

    rejected = WorkflowStateMachine(document_at(WorkflowStage.FINAL_APPROVAL))
    await rejected.reject()
    assert rejected.state == WorkflowStage.REJECTED.value


async def test_unlock_reopens_matching_stage():
    machine = WorkflowStateMachine(document_at(WorkflowStage.FINAL_APPROVAL, True, True))
    await machine.unlock_procurement()
    assert machine.state == WorkflowStage.FINANCIAL_EVALUATION.value

    machine = WorkflowStateMachine(document_at(WorkflowStage.FINAL_APPROVAL, True, True))
    await machine.unlock_technical()
    assert machine.state == WorkflowStage.TECHNICAL_EVALUATION.value


def test_can_lists_only_legal_triggers():
    machine = WorkflowStateMachine(document_at(WorkflowStage.TECHNICAL_EVALUATION))

    assert machine.can("lock_technical")
    assert machine.can("unlock_procurement")
    assert not machine.can("approve")
    assert not machine.can("pass_pre_feasibility")
    assert not machine.can("fail_processing")


@pytest.mark.parametrize("stage", [WorkflowStage.COMPLETED, WorkflowStage.REJECTED, WorkflowStage.FAILED])
async def test_terminal_stages_accept_nothing(stage):
    machine = WorkflowStateMachine(document_at(stage))

    for trigger in ("pass_pre_feasibility", "lock_technical", "approve", "unlock_technical"):
        assert not machine.can(trigger)
    with pytest.raises(MachineError):
        await machine.approve()


async def test_processing_failure_only_before_evaluation():
    machine = WorkflowStateMachine(document_at(WorkflowStage.PRE_FEASIBILITY))
    await machine.fail_processing()
    assert machine.state == WorkflowStage.FAILED.value

    assert not WorkflowStateMachine(document_at(WorkflowStage.TECHNICAL_EVALUATION)).can("fail_processing")
