from enum import Enum


class WorkflowStage(str, Enum):
    PRE_FEASIBILITY = "PRE_FEASIBILITY"
    TECHNICAL_EVALUATION = "TECHNICAL_EVALUATION"
    FINANCIAL_EVALUATION = "FINANCIAL_EVALUATION"
    FINAL_APPROVAL = "FINAL_APPROVAL"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    FAILED = "FAILED"


EVALUATION_STAGES = (WorkflowStage.TECHNICAL_EVALUATION, WorkflowStage.FINANCIAL_EVALUATION)


class ProcessingStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Role(str, Enum):
    ADMIN = "ADMIN"
    TECHNICAL = "TECHNICAL"
    PROCUREMENT = "PROCUREMENT"


class EvaluationType(str, Enum):
    PRE_FEASIBILITY = "PRE_FEASIBILITY"
    TECHNICAL = "TECHNICAL"
    FINANCIAL = "FINANCIAL"


class ApprovalStatus(str, Enum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
