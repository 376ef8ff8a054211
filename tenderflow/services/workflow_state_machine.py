from transitions.extensions.asyncio import AsyncMachine
from tenderflow.models.documents import TenderDocument
from tenderflow.models.enums import WorkflowStage
from tenderflow.core.logging_config import logger

PRE = WorkflowStage.PRE_FEASIBILITY.value
TECH = WorkflowStage.TECHNICAL_EVALUATION.value
FIN = WorkflowStage.FINANCIAL_EVALUATION.value
FINAL = WorkflowStage.FINAL_APPROVAL.value
COMPLETED = WorkflowStage.COMPLETED.value
REJECTED = WorkflowStage.REJECTED.value
FAILED = WorkflowStage.FAILED.value


class WorkflowStateMachine:
    """Evaluation lifecycle of one tender document.

    The machine only decides the next stage. Lock flags live on the document
    and are set by the caller before ``lock_technical``/``lock_procurement``
    fire, so the join conditions see the up-to-date pair.
    """
    states = [stage.value for stage in WorkflowStage]

    def __init__(self, document: TenderDocument):
        self.document = document
        self.machine = AsyncMachine(
            model=self,
            states=WorkflowStateMachine.states,
            initial=document.workflow_stage or PRE,
            send_event=True,
            auto_transitions=False,
            after_state_change="log_stage",
        )

        self.machine.add_transition("pass_pre_feasibility", PRE, TECH)
        self.machine.add_transition("fail_pre_feasibility", PRE, COMPLETED)

        self.machine.add_transition("lock_technical", [TECH, FIN], FINAL, conditions="procurement_locked")
        self.machine.add_transition("lock_technical", [TECH, FIN], FIN)
        self.machine.add_transition("lock_procurement", [TECH, FIN], FINAL, conditions="technical_locked")
        self.machine.add_transition("lock_procurement", [TECH, FIN], TECH)

        self.machine.add_transition("approve", FINAL, COMPLETED)
        self.machine.add_transition("reject", FINAL, REJECTED)

        self.machine.add_transition("unlock_technical", [TECH, FIN, FINAL], TECH)
        self.machine.add_transition("unlock_procurement", [TECH, FIN, FINAL], FIN)

        self.machine.add_transition("fail_processing", [PRE], FAILED)

    def procurement_locked(self, event) -> bool:
        return bool(self.document.is_proc_locked)

    def technical_locked(self, event) -> bool:
        return bool(self.document.is_tech_locked)

    def can(self, trigger: str) -> bool:
        return trigger in self.machine.get_triggers(self.state)

    async def log_stage(self, event):
        logger.info(f"Document {self.document.id} entered stage {self.state} via {event.event.name}")

    def apply(self) -> str:
        """Writes the machine's stage back onto the document."""
        self.document.workflow_stage = self.state
        return self.state
