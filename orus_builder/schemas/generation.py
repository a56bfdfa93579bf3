from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from orus_builder.generators.codegen.types import (
    Architecture,
    ComponentSpec,
    DataModelEntry,
    GeneratedComponent,
    GenerationContext,
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    QualitySettings,
    TechnicalSpecification,
)

EXTENSION_LANGUAGES = {
    "ts": "typescript",
    "tsx": "typescript",
    "js": "javascript",
    "jsx": "javascript",
    "json": "json",
    "css": "css",
    "md": "markdown",
    "html": "html",
}


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerationOptionsIn(CamelModel):
    framework: Literal["react", "next"] = "react"
    language: str = "typescript"
    complexity: str = "medium"
    include_tests: bool = False
    style: str = "modern"
    apply_styles: bool = True
    apply_tailwind: bool = True
    dark_mode: bool = False
    responsive: bool = True

    def to_options(self) -> GenerationOptions:
        return GenerationOptions(
            complexity=self.complexity,
            include_tests=self.include_tests,
            style=self.style,
            apply_styles=self.apply_styles,
            apply_tailwind=self.apply_tailwind,
            dark_mode=self.dark_mode,
            responsive=self.responsive,
        )


class GenerationContextIn(CamelModel):
    domain: Optional[str] = None
    complexity: Optional[str] = None
    style_preferences: List[str] = []
    color_palette: Optional[List[str]] = None
    personality: Optional[str] = None

    def to_context(self) -> GenerationContext:
        return GenerationContext(**self.model_dump())


class ComponentSpecIn(CamelModel):
    name: str
    type: str = "component"
    purpose: str = ""
    responsibilities: List[str] = []


class ArchitectureIn(CamelModel):
    style: str = ""
    layers: List[str] = []
    patterns: List[str] = []


class DataModelEntryIn(CamelModel):
    entity: str
    attributes: List[str] = []
    relationships: List[str] = []


class QualityIn(CamelModel):
    testing_strategy: str = "unit"
    security_requirements: List[str] = []
    performance_targets: List[str] = []


class SpecificationIn(CamelModel):
    architecture: ArchitectureIn = Field(default_factory=ArchitectureIn)
    components: List[ComponentSpecIn] = []
    data_model: List[DataModelEntryIn] = []
    technologies: Dict[str, List[str]] = {}
    quality: QualityIn = Field(default_factory=QualityIn)

    def to_specification(self) -> TechnicalSpecification:
        return TechnicalSpecification(
            architecture=Architecture(**self.architecture.model_dump()),
            components=[ComponentSpec(**c.model_dump()) for c in self.components],
            data_model=[DataModelEntry(**d.model_dump()) for d in self.data_model],
            technologies={k: list(v) for k, v in self.technologies.items()},
            quality=QualitySettings(**self.quality.model_dump()),
        )


class GenerateRequest(CamelModel):
    prompt: str = Field(..., min_length=1, examples=["Dashboard with sales chart"])
    options: GenerationOptionsIn = Field(default_factory=GenerationOptionsIn)
    project_id: Optional[str] = None
    user_id: str = "demo-user"
    context: Optional[GenerationContextIn] = None
    specification: Optional[SpecificationIn] = None

    def to_request(self, request_id: str) -> GenerationRequest:
        return GenerationRequest(
            request_id=request_id,
            user_id=self.user_id,
            project_id=self.project_id or f"project-{request_id[4:]}",
            prompt=self.prompt,
            language=self.options.language,
            framework=self.options.framework,
            specification=self.specification.to_specification() if self.specification else None,
            context=self.context.to_context() if self.context else None,
            options=self.options.to_options(),
        )


class GeneratedFileOut(CamelModel):
    path: str
    content: str
    language: str
    lines: int

    @staticmethod
    def from_component(component: GeneratedComponent) -> "GeneratedFileOut":
        ext = component.path.rsplit(".", 1)[-1].lower()
        return GeneratedFileOut(
            path=component.path,
            content=component.code,
            language=EXTENSION_LANGUAGES.get(ext, "text"),
            lines=component.metadata.lines_of_code,
        )


class GenerationMetricsOut(CamelModel):
    total_files: int
    total_lines: int
    generation_time: int
    quality_score: int


class GenerationData(CamelModel):
    generation_id: str
    success: bool = True
    project_id: str
    files: List[GeneratedFileOut]
    metrics: GenerationMetricsOut
    created_at: datetime

    @staticmethod
    def from_result(result: GenerationResult) -> "GenerationData":
        return GenerationData(
            generation_id=result.request_id,
            project_id=result.project_id,
            files=[GeneratedFileOut.from_component(c) for c in result.components],
            metrics=GenerationMetricsOut(
                total_files=result.metrics.total_components,
                total_lines=result.metrics.total_lines,
                generation_time=result.metrics.generation_time_ms,
                quality_score=result.quality_score,
            ),
            created_at=result.created_at,
        )


class GenerateResponse(CamelModel):
    success: bool = True
    job_id: str
    data: GenerationData


class ErrorBody(BaseModel):
    code: str
    message: Dict[str, str]
    details: Dict[str, Any] = {}


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorBody
