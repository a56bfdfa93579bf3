"""Orchestrator for prompt-to-code generation."""
import logging
import time
from typing import List, Optional
from orus_builder.core.config import settings
from orus_builder.core.errors import Recoverable, Result
from orus_builder.core.llm import ChatMessage, LLMClient
from orus_builder.core.store import GenerationStore
from orus_builder.generators.codegen.analysis import ArchitectureAdvisor, PromptAnalyzer
from orus_builder.generators.codegen.domains import DomainCatalog, ensure_backend_for_domain, load_catalog
from orus_builder.generators.codegen.postprocess import (
    deduplicate_files,
    normalize_file_paths,
    repair,
    split_multi_file,
)
from orus_builder.generators.codegen.prompts import (
    COMPONENT_SYSTEM_PROMPT,
    TEST_SYSTEM_PROMPT,
    build_component_prompt,
    build_generation_message,
    build_test_prompt,
    prompt_category,
)
from orus_builder.generators.codegen.render import (
    render_fallback_app,
    render_fallback_test,
    render_package_json,
    render_readme,
)
from orus_builder.generators.codegen.spec_merge import fallback_advice, fallback_analysis, merge_specifications
from orus_builder.generators.codegen.types import (
    ComponentMetadata,
    ComponentSpec,
    GeneratedComponent,
    GenerationContext,
    GenerationMetrics,
    GenerationRequest,
    GenerationResult,
    TechnicalSpecification,
)
from orus_builder.generators.codegen.utils import (
    calculate_complexity,
    count_lines,
    extract_dependencies,
    generate_path,
    map_component_type,
)

log = logging.getLogger(__name__)

TEST_MAX_TOKENS = 2000
TESTED_TYPES = {"page", "component"}


def component_quality(component: GeneratedComponent) -> int:
    score = 100
    if component.metadata.complexity > 15:
        score -= 10
    if component.metadata.complexity > 25:
        score -= 20
    if component.tests:
        score += 10
    if component.metadata.coverage > 70:
        score += 5
    if not component.dependencies:
        score -= 5
    return max(0, min(100, score))


def quality_score(components: List[GeneratedComponent]) -> int:
    if not components:
        return 0
    return round(sum(component_quality(c) for c in components) / len(components))


def build_metrics(components: List[GeneratedComponent], started: float) -> GenerationMetrics:
    return GenerationMetrics(
        total_components=len(components),
        total_lines=sum(c.metadata.lines_of_code for c in components),
        generation_time_ms=int((time.perf_counter() - started) * 1000),
        tests_generated=sum(1 for c in components if c.tests),
    )


def single_file_record(component: ComponentSpec, code: str, framework: str) -> GeneratedComponent:
    category = prompt_category(component.type)
    if category == "backend":
        type, path = "service", f"backend/src/{component.name}.ts"
    else:
        type, path = map_component_type(component.type), generate_path(component.name, component.type, framework)
    return GeneratedComponent(
        id=component.name,
        name=component.name,
        type=type,
        path=path,
        code=code,
        dependencies=extract_dependencies(code),
        metadata=ComponentMetadata(lines_of_code=count_lines(code), complexity=calculate_complexity(code)),
    )


def fallback_app_component(request: GenerationRequest, context: GenerationContext) -> GeneratedComponent:
    code = render_fallback_app(request.prompt, context.color_palette or [])
    return GeneratedComponent(
        id="App",
        name="App",
        type="page",
        path="src/App.tsx",
        code=code,
        dependencies=extract_dependencies(code),
        metadata=ComponentMetadata(lines_of_code=count_lines(code), complexity=calculate_complexity(code)),
    )


class CognitiveGenerationEngine:
    """
    Turns a generation request into generated source files.

    Every stage that can fail has a deterministic fallback, so ``generate``
    only reports failure for unexpected errors.
    """

    def __init__(
        self,
        llm: LLMClient,
        analyzer: PromptAnalyzer,
        advisor: ArchitectureAdvisor,
        store: GenerationStore,
        catalog: Optional[DomainCatalog] = None,
    ):
        self.llm = llm
        self.analyzer = analyzer
        self.advisor = advisor
        self.store = store
        self.catalog = catalog or load_catalog()

    async def generate(self, request: GenerationRequest) -> Result[GenerationResult]:
        """
        Run analysis, advice, merge and the component loop for one request.

        Args:
            request: The generation request

        Returns:
            Result carrying the stored GenerationResult, or a GENERATION_FAILED error
        """
        started = time.perf_counter()
        extra = {"request_id": request.request_id, "stage": "generation"}
        log.info("Starting generation for project %s", request.project_id, extra=extra)

        try:
            try:
                analysis = await self.analyzer.analyze(request)
            except Exception as e:
                log.warning("Prompt analysis failed, using fallback: %s", e, extra=extra)
                analysis = fallback_analysis(request)

            try:
                advice = self.advisor.advise(request, analysis)
            except Exception as e:
                log.warning("Architecture advice failed, using fallback: %s", e, extra=extra)
                advice = fallback_advice()

            spec = merge_specifications(analysis.specification, advice, request.specification)
            context = analysis.context

            components = await self.generate_components(spec, request, context)
            if not components:
                log.warning("No components generated, using fallback App", extra=extra)
                components = [fallback_app_component(request, context)]

            result = GenerationResult(
                request_id=request.request_id,
                project_id=request.project_id,
                components=components,
                quality_score=quality_score(components),
                metrics=build_metrics(components, started),
                specification=spec,
                package_json=render_package_json(
                    request.project_id, request.framework, spec, request.options.apply_tailwind,
                ),
                readme=render_readme(request.project_id, request.prompt, spec, context, components),
            )
        except Exception as e:
            log.exception("Generation failed", extra=extra)
            return Result.failure(Recoverable.from_exception("GENERATION_FAILED", e, request_id=request.request_id))

        self.store.save(result)
        log.info(
            "Generation finished: %d files, quality %d, %d ms",
            result.metrics.total_components, result.quality_score, result.metrics.generation_time_ms,
            extra=extra,
        )
        return Result.success(result)

    async def generate_components(
        self,
        spec: TechnicalSpecification,
        request: GenerationRequest,
        context: Optional[GenerationContext],
    ) -> List[GeneratedComponent]:
        """Generate every component in order; a failing component is logged and skipped."""
        extra = {"request_id": request.request_id, "stage": "components"}
        if ensure_backend_for_domain(spec, context, self.catalog):
            log.info("Backend components added for domain %s", context.domain, extra=extra)

        generated: List[GeneratedComponent] = []
        for component in spec.components:
            try:
                files = await self._generate_one(component, spec, request, context)
            except Exception as e:
                log.error("Component %s failed: %s", component.name, e, extra=extra)
                continue
            generated.extend(files)

        return deduplicate_files(normalize_file_paths(generated))

    async def _generate_one(
        self,
        component: ComponentSpec,
        spec: TechnicalSpecification,
        request: GenerationRequest,
        context: Optional[GenerationContext],
    ) -> List[GeneratedComponent]:
        base_prompt = build_component_prompt(component, spec, request, context)
        response = await self.llm.chat(
            [
                ChatMessage(role="system", content=COMPONENT_SYSTEM_PROMPT),
                ChatMessage(role="user", content=build_generation_message(base_prompt, request.prompt)),
            ],
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )
        # repairs run per file: a response may carry one default export per file
        files = split_multi_file(response.content, component.name)
        for f in files:
            f.code = repair(f.code)
        if not files:
            files = [single_file_record(component, repair(response.content).strip(), request.framework)]

        if request.options.include_tests and spec.quality.testing_strategy != "none":
            primary = next((f for f in files if f.type in TESTED_TYPES), None)
            if primary is not None:
                primary.tests = await self._generate_tests(primary, request)
                primary.metadata.coverage = 80

        log.debug(
            "Component %s produced %d files", component.name, len(files),
            extra={"request_id": request.request_id, "stage": "components"},
        )
        return files

    async def _generate_tests(self, generated: GeneratedComponent, request: GenerationRequest) -> str:
        spec = ComponentSpec(name=generated.name, type=generated.type)
        try:
            response = await self.llm.chat(
                [
                    ChatMessage(role="system", content=TEST_SYSTEM_PROMPT),
                    ChatMessage(role="user", content=build_test_prompt(spec, generated.code, request.framework)),
                ],
                temperature=settings.llm_temperature,
                max_tokens=TEST_MAX_TOKENS,
            )
            return response.content
        except Exception as e:
            log.warning(
                "Test generation failed for %s, using template: %s", generated.name, e,
                extra={"request_id": request.request_id, "stage": "tests"},
            )
            return render_fallback_test(generated.name)

    def get_result(self, request_id: str) -> Optional[GenerationResult]:
        return self.store.get(request_id)
