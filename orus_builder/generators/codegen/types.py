"""Dataclasses for prompt-to-code generation."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class ComponentSpec:
    """A component the generation loop should produce."""
    name: str
    type: str  # page, component, layout, server, routes, controller, model, ...
    purpose: str = ""
    responsibilities: List[str] = field(default_factory=list)


@dataclass
class Architecture:
    style: str = "layered"
    layers: List[str] = field(default_factory=list)
    patterns: List[str] = field(default_factory=list)


@dataclass
class DataModelEntry:
    entity: str
    attributes: List[str] = field(default_factory=list)
    relationships: List[str] = field(default_factory=list)


@dataclass
class QualitySettings:
    testing_strategy: str = "unit"
    security_requirements: List[str] = field(default_factory=list)
    performance_targets: List[str] = field(default_factory=list)


@dataclass
class TechnicalSpecification:
    """Merged specification that drives the generation loop.

    ``technologies`` maps a layer (frontend, backend, database, deployment)
    to the list of technologies for that layer.
    """
    architecture: Architecture = field(default_factory=Architecture)
    components: List[ComponentSpec] = field(default_factory=list)
    data_model: List[DataModelEntry] = field(default_factory=list)
    technologies: Dict[str, List[str]] = field(default_factory=dict)
    quality: QualitySettings = field(default_factory=QualitySettings)


@dataclass
class GenerationContext:
    domain: Optional[str] = None
    complexity: Optional[str] = None
    style_preferences: List[str] = field(default_factory=list)
    color_palette: Optional[List[str]] = None
    personality: Optional[str] = None


@dataclass(frozen=True)
class GenerationOptions:
    complexity: str = "medium"
    include_tests: bool = False
    style: str = "modern"
    apply_styles: bool = True
    apply_tailwind: bool = True
    dark_mode: bool = False
    responsive: bool = True


@dataclass(frozen=True)
class GenerationRequest:
    request_id: str
    user_id: str
    project_id: str
    prompt: str
    language: str = "typescript"
    framework: str = "react"
    specification: Optional[TechnicalSpecification] = None
    context: Optional[GenerationContext] = None
    options: GenerationOptions = field(default_factory=GenerationOptions)


@dataclass
class ComponentMetadata:
    lines_of_code: int
    complexity: int
    coverage: int = 0


@dataclass
class GeneratedComponent:
    """One generated source file."""
    id: str
    name: str
    type: str  # page, component, service, model, util, config
    path: str
    code: str
    metadata: ComponentMetadata
    tests: Optional[str] = None
    dependencies: List[str] = field(default_factory=list)


@dataclass
class GenerationMetrics:
    total_components: int
    total_lines: int
    generation_time_ms: int
    tests_generated: int


@dataclass
class GenerationResult:
    request_id: str
    project_id: str
    components: List[GeneratedComponent]
    quality_score: int
    metrics: GenerationMetrics
    specification: TechnicalSpecification
    package_json: str = ""
    readme: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class PromptAnalysis:
    """Output of the prompt analyzer: a partial specification plus context."""
    specification: TechnicalSpecification
    context: GenerationContext
    confidence: float = 0.5
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ArchitectureAdvice:
    style: str
    layers: List[str]
    reasoning: List[str] = field(default_factory=list)
