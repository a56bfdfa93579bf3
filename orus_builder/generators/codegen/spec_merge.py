"""Merge of the analyzer's specification, architecture advice and a caller-supplied specification."""
import copy
import logging
from typing import Dict, List, Optional
from orus_builder.generators.codegen.types import (
    Architecture,
    ArchitectureAdvice,
    ComponentSpec,
    GenerationContext,
    GenerationRequest,
    PromptAnalysis,
    QualitySettings,
    TechnicalSpecification,
)

log = logging.getLogger(__name__)

DEFAULT_PURPOSE = "Component functionality"
DEFAULT_LAYERS = ["presentation", "business", "data"]


def default_components() -> List[ComponentSpec]:
    return [ComponentSpec(name="App", type="page", purpose="Main application component", responsibilities=[])]


def _with_purpose(component: ComponentSpec) -> ComponentSpec:
    if component.purpose:
        return component
    purpose = component.responsibilities[0] if component.responsibilities else DEFAULT_PURPOSE
    return ComponentSpec(
        name=component.name,
        type=component.type,
        purpose=purpose,
        responsibilities=list(component.responsibilities),
    )


def _merge_technologies(*layers: Optional[Dict[str, List[str]]]) -> Dict[str, List[str]]:
    merged: Dict[str, List[str]] = {}
    for techs in layers:
        for layer, names in (techs or {}).items():
            if names:
                merged[layer] = list(names)
    return merged


def merge_specifications(
    prompt_spec: TechnicalSpecification,
    advice: ArchitectureAdvice,
    caller_spec: Optional[TechnicalSpecification] = None,
) -> TechnicalSpecification:
    """
    Build the specification used by the generation loop.

    Args:
        prompt_spec: Specification inferred from the prompt
        advice: Architecture advice (style and layers only)
        caller_spec: Specification supplied with the request, wins where set

    Returns:
        A new TechnicalSpecification; the inputs are not modified
    """
    caller = caller_spec
    caller_arch = caller.architecture if caller else None

    style = (caller_arch.style if caller_arch and caller_arch.style else None) \
        or advice.style or prompt_spec.architecture.style or "layered"
    layers = (caller_arch.layers if caller_arch and caller_arch.layers else None) \
        or advice.layers or prompt_spec.architecture.layers or list(DEFAULT_LAYERS)
    patterns = (caller_arch.patterns if caller_arch and caller_arch.patterns else None) \
        or prompt_spec.architecture.patterns

    components = (caller.components if caller and caller.components else None) \
        or prompt_spec.components or default_components()

    data_model = (caller.data_model if caller and caller.data_model else None) or prompt_spec.data_model
    quality = caller.quality if caller and _has_quality(caller) else prompt_spec.quality

    merged = TechnicalSpecification(
        architecture=Architecture(style=style, layers=list(layers), patterns=list(patterns)),
        components=[_with_purpose(c) for c in components],
        data_model=copy.deepcopy(data_model),
        technologies=_merge_technologies(prompt_spec.technologies, caller.technologies if caller else None),
        quality=copy.deepcopy(quality),
    )
    log.debug("Merged specification: %d components, style %s", len(merged.components), style)
    return merged


def _has_quality(spec: TechnicalSpecification) -> bool:
    q = spec.quality
    default = QualitySettings()
    return (
        q.testing_strategy != default.testing_strategy
        or bool(q.security_requirements)
        or bool(q.performance_targets)
    )


def fallback_analysis(request: GenerationRequest) -> PromptAnalysis:
    """Deterministic analysis used when the analyzer fails."""
    spec = TechnicalSpecification(
        architecture=Architecture(style="layered", layers=list(DEFAULT_LAYERS), patterns=["component-based", "hooks"]),
        components=[ComponentSpec(name="App", type="component", purpose="Main application component", responsibilities=[])],
        technologies={"frontend": [request.framework, "typescript"]},
        quality=QualitySettings(testing_strategy="unit"),
    )
    context = copy.deepcopy(request.context) if request.context else GenerationContext()
    if context.complexity is None:
        context.complexity = request.options.complexity
    return PromptAnalysis(specification=spec, context=context, confidence=0.3)


def fallback_advice() -> ArchitectureAdvice:
    return ArchitectureAdvice(style="layered", layers=list(DEFAULT_LAYERS), reasoning=["Fallback architecture"])
