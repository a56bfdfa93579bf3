"""Prompt analysis and architecture advice for the generation engine."""
import json
import logging
import re
from typing import Any, Dict, List, Optional
from orus_builder.core.config import settings
from orus_builder.core.llm import ChatMessage, LLMClient
from orus_builder.generators.codegen.domains import DomainCatalog, load_catalog, needs_backend
from orus_builder.generators.codegen.prompts import SPEC_SYSTEM_PROMPT, build_specification_prompt
from orus_builder.generators.codegen.types import (
    Architecture,
    ArchitectureAdvice,
    ComponentSpec,
    DataModelEntry,
    GenerationContext,
    GenerationRequest,
    PromptAnalysis,
    QualitySettings,
    TechnicalSpecification,
)
from orus_builder.prompt.context import ContextAnalyzer

log = logging.getLogger(__name__)

JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

MODULAR_COMPLEXITIES = {"complex", "enterprise"}


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def extract_json(text: str) -> Dict[str, Any]:
    """Pull the first JSON object out of a model reply, fences and prose included."""
    match = JSON_OBJECT_RE.search(text)
    if not match:
        raise ValueError("No JSON object found in model response")
    data = json.loads(match.group(0))
    if not isinstance(data, dict):
        raise ValueError("Model response JSON is not an object")
    return data


def specification_from_dict(data: Dict[str, Any]) -> TechnicalSpecification:
    """Build a TechnicalSpecification from camelCase or snake_case JSON."""
    arch = data.get("architecture") or {}
    quality = data.get("quality") or {}

    components = []
    for item in data.get("components") or []:
        if not isinstance(item, dict) or not item.get("name"):
            continue
        components.append(ComponentSpec(
            name=str(item["name"]),
            type=str(item.get("type") or "component"),
            purpose=str(item.get("purpose") or ""),
            responsibilities=_str_list(item.get("responsibilities")),
        ))

    data_model = []
    for item in data.get("dataModel") or data.get("data_model") or []:
        if not isinstance(item, dict) or not item.get("entity"):
            continue
        data_model.append(DataModelEntry(
            entity=str(item["entity"]),
            attributes=_str_list(item.get("attributes")),
            relationships=_str_list(item.get("relationships")),
        ))

    technologies = {
        layer: _str_list(names)
        for layer, names in (data.get("technologies") or {}).items()
        if _str_list(names)
    }

    return TechnicalSpecification(
        architecture=Architecture(
            style=str(arch.get("style") or "layered"),
            layers=_str_list(arch.get("layers")),
            patterns=_str_list(arch.get("patterns")),
        ),
        components=components,
        data_model=data_model,
        technologies=technologies,
        quality=QualitySettings(
            testing_strategy=str(quality.get("testingStrategy") or quality.get("testing_strategy") or "unit"),
            security_requirements=_str_list(quality.get("securityRequirements") or quality.get("security_requirements")),
            performance_targets=_str_list(quality.get("performanceTargets") or quality.get("performance_targets")),
        ),
    )


class PromptAnalyzer:
    """Turns a generation request into a partial specification and an enriched context.

    Any failure (LLM error, unparsable reply) propagates to the caller.
    """

    def __init__(self, llm: LLMClient, context_analyzer: ContextAnalyzer, catalog: Optional[DomainCatalog] = None):
        self.llm = llm
        self.context_analyzer = context_analyzer
        self.catalog = catalog or load_catalog()

    def build_context(self, request: GenerationRequest) -> GenerationContext:
        given = request.context or GenerationContext()
        domain = given.domain or self.context_analyzer.analyze(request.prompt).domain.domain
        return GenerationContext(
            domain=domain,
            complexity=given.complexity or request.options.complexity,
            style_preferences=list(given.style_preferences) or [request.options.style],
            color_palette=list(given.color_palette) if given.color_palette else self.catalog.palette_for(domain),
            personality=given.personality or self.catalog.personality_for(domain),
        )

    async def analyze(self, request: GenerationRequest) -> PromptAnalysis:
        extra = {"request_id": request.request_id, "stage": "analysis"}
        context = self.build_context(request)
        log.info("Analyzing prompt (domain=%s)", context.domain, extra=extra)

        response = await self.llm.chat(
            [
                ChatMessage(role="system", content=SPEC_SYSTEM_PROMPT),
                ChatMessage(role="user", content=build_specification_prompt(request, context)),
            ],
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )
        data = extract_json(response.content)
        spec = specification_from_dict(data)
        confidence = 0.8 if spec.components else 0.5
        log.info("Prompt analysis produced %d components", len(spec.components), extra=extra)
        return PromptAnalysis(specification=spec, context=context, confidence=confidence, raw=data)


class ArchitectureAdvisor:
    def __init__(self, catalog: Optional[DomainCatalog] = None):
        self.catalog = catalog or load_catalog()

    def advise(self, request: GenerationRequest, analysis: PromptAnalysis) -> ArchitectureAdvice:
        context = analysis.context
        complexity = (context.complexity or request.options.complexity or "").lower()
        reasoning = []

        if needs_backend(context.domain, self.catalog):
            reasoning.append(f"Domain {context.domain} stores data and needs an API layer")
            layers = ["presentation", "api", "business", "data"]
        else:
            layers = ["presentation", "business", "data"]

        if complexity in MODULAR_COMPLEXITIES:
            reasoning.append(f"Complexity {complexity} favours feature modules")
            style = "modular"
        else:
            style = "layered"

        if not reasoning:
            reasoning.append("Frontend-focused application with a layered structure")
        return ArchitectureAdvice(style=style, layers=layers, reasoning=reasoning)
