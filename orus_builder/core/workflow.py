from dataclasses import dataclass
from enum import Enum
from typing import Optional

class PipelineStage(str, Enum):
    PARSE = "parse"
    CLASSIFICATION = "classification"
    VALIDATION = "validation"
    CONTEXT_ANALYSIS = "context_analysis"
    AMBIGUITY_RESOLUTION = "ambiguity_resolution"
    REQUIREMENTS_EXTRACTION = "requirements_extraction"
    CONVERSATION = "conversation"
    HISTORY = "history"

class StageStatus(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    SKIPPED = "skipped"

@dataclass(frozen=True)
class StageRecord:
    name: PipelineStage
    status: StageStatus
    duration: int  # milliseconds
    message: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"name": self.name.value, "status": self.status.value, "duration": self.duration}
        if self.message is not None:
            data["message"] = self.message
        return data

PIPELINE_ORDER = [
    PipelineStage.PARSE,
    PipelineStage.CLASSIFICATION,
    PipelineStage.VALIDATION,
    PipelineStage.CONTEXT_ANALYSIS,
    PipelineStage.AMBIGUITY_RESOLUTION,
    PipelineStage.REQUIREMENTS_EXTRACTION,
    PipelineStage.CONVERSATION,
    PipelineStage.HISTORY,
]
