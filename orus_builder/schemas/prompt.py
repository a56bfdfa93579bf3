from typing import Any, Dict, List, Optional
from pydantic import Field
from orus_builder.prompt.types import ProcessingInput, ProcessingOptions
from orus_builder.schemas.generation import CamelModel


class ProcessingOptionsIn(CamelModel):
    skip_validation: bool = False
    skip_ambiguity_resolution: bool = False
    enable_detailed_analysis: bool = False
    conversation_mode: bool = True


class ProcessPromptRequest(CamelModel):
    prompt: str = Field(..., examples=["Create a dashboard with sales chart using React"])
    session_id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    options: ProcessingOptionsIn = Field(default_factory=ProcessingOptionsIn)

    def to_input(self) -> ProcessingInput:
        return ProcessingInput(
            prompt=self.prompt,
            session_id=self.session_id,
            user_id=self.user_id,
            options=ProcessingOptions(**self.options.model_dump()),
        )


class ProcessPromptResponse(CamelModel):
    success: bool = True
    ready: bool
    clarifications_needed: List[str] = []
    data: Dict[str, Any]


class HistoryListResponse(CamelModel):
    success: bool = True
    total: int
    entries: List[Dict[str, Any]]
