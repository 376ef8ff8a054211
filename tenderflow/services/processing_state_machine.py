from transitions.extensions.asyncio import AsyncMachine
from tenderflow.models.documents import TenderDocument
from tenderflow.models.enums import ProcessingStatus
from tenderflow.core.logging_config import logger


class ProcessingStateMachine:
    states = [status.value for status in ProcessingStatus]

    def __init__(self, document: TenderDocument):
        self.document = document
        self.machine = AsyncMachine(
            model=self,
            states=ProcessingStateMachine.states,
            initial=document.status or ProcessingStatus.PENDING.value,
            send_event=True,
            auto_transitions=False,
        )

        self.machine.add_transition("start_processing", ProcessingStatus.PENDING.value, ProcessingStatus.PROCESSING.value)
        self.machine.add_transition("complete", ProcessingStatus.PROCESSING.value, ProcessingStatus.COMPLETED.value)
        self.machine.add_transition("encounter_error", "*", ProcessingStatus.FAILED.value)

    async def on_enter_PROCESSING(self, event):
        logger.info(f"Document {self.document.id} entered status PROCESSING")

    async def on_enter_COMPLETED(self, event):
        logger.info(f"Document {self.document.id} entered status COMPLETED")

    async def on_enter_FAILED(self, event):
        logger.info(f"Document {self.document.id} entered status FAILED")
