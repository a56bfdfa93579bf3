"""Keyword-driven extraction of structured requirements from a parsed prompt."""
import logging
import time
from typing import List
from orus_builder.prompt.types import (
    ClassificationResult,
    Complexity,
    Constraint,
    DataAttribute,
    DataRequirement,
    EntityType,
    FunctionalCategory,
    FunctionalRequirement,
    Intent,
    IntegrationRequirement,
    NonFunctionalRequirement,
    ParseResult,
    Priority,
    RequirementsResult,
    TechnicalRequirement,
    UIRequirement,
)

log = logging.getLogger(__name__)

COMPLEXITY_TERMS = ["api", "database", "integration", "security", "architecture"]


def categorize(text: str) -> FunctionalCategory:
    lower = text.lower()
    if "user" in lower or "auth" in lower:
        return FunctionalCategory.USER_MANAGEMENT
    if "data" in lower or "process" in lower:
        return FunctionalCategory.DATA_PROCESSING
    if "report" in lower:
        return FunctionalCategory.REPORTING
    if "integr" in lower:
        return FunctionalCategory.INTEGRATION
    return FunctionalCategory.CORE_FEATURE


def infer_complexity(text: str) -> Complexity:
    word_count = len(text.split())
    lower = text.lower()
    tech_count = sum(1 for t in COMPLEXITY_TERMS if t in lower)
    if word_count > 50 or tech_count > 3:
        return Complexity.VERY_COMPLEX
    if word_count > 30 or tech_count > 2:
        return Complexity.COMPLEX
    if word_count > 15 or tech_count > 1:
        return Complexity.MODERATE
    return Complexity.SIMPLE


class RequirementsExtractor:
    def __init__(self):
        self._counter = 0

    def extract(self, text: str, parse: ParseResult, classification: ClassificationResult) -> RequirementsResult:
        start = time.perf_counter()
        lower = text.lower()

        functional = self._functional(text, parse)
        non_functional = self._non_functional(lower)
        technical = self._technical(parse, classification)

        result = RequirementsResult(
            functional=functional,
            non_functional=non_functional,
            technical=technical,
            ui=self._ui(lower),
            data=self._data(parse),
            integration=self._integration(lower),
            constraints=self._constraints(lower),
            confidence=self._confidence(len(functional) + len(non_functional) + len(technical)),
        )
        result.extraction_time = int((time.perf_counter() - start) * 1000)
        log.info("Extracted %d requirements (confidence %.2f)", result.total_requirements, result.confidence)
        return result

    def _functional(self, text: str, parse: ParseResult) -> List[FunctionalRequirement]:
        reqs = [
            FunctionalRequirement(
                id=self._next_id("FR"),
                description=f"Implement {e.text}",
                category=categorize(e.text),
                priority=Priority.HIGH,
                complexity=Complexity.MODERATE,
                acceptance=[f"{e.text} is functional", "Passes all tests"],
            )
            for e in parse.entities
            if e.type in (EntityType.FEATURE, EntityType.COMPONENT)
        ]
        if not reqs:
            reqs.append(FunctionalRequirement(
                id=self._next_id("FR"),
                description=text,
                category=FunctionalCategory.CORE_FEATURE,
                priority=Priority.HIGH,
                complexity=infer_complexity(text),
                acceptance=["Feature is implemented", "Meets user expectations"],
            ))
        return reqs

    def _non_functional(self, lower: str) -> List[NonFunctionalRequirement]:
        reqs = []
        if "fast" in lower or "performance" in lower:
            reqs.append(NonFunctionalRequirement(
                self._next_id("NFR"), "performance", "System must be fast and responsive",
                "Response time", "< 200ms for 95% of requests", Priority.HIGH,
            ))
        if "secure" in lower or "security" in lower:
            reqs.append(NonFunctionalRequirement(
                self._next_id("NFR"), "security", "System must be secure",
                "Security compliance", "OWASP Top 10 compliance", Priority.CRITICAL,
            ))
        if "scale" in lower or "scalable" in lower:
            reqs.append(NonFunctionalRequirement(
                self._next_id("NFR"), "scalability", "System must scale with load",
                "Concurrent users", "10,000+ concurrent users", Priority.MEDIUM,
            ))
        return reqs

    def _technical(self, parse: ParseResult, classification: ClassificationResult) -> List[TechnicalRequirement]:
        reqs = [
            TechnicalRequirement(
                id=self._next_id("TS"),
                category="framework",
                description=f"Use {e.text}",
                rationale="Explicitly requested by user",
                technology=e.text,
            )
            for e in parse.entities
            if e.type == EntityType.TECHNOLOGY
        ]
        if classification.primary.intent == Intent.CREATE_APP:
            reqs.append(TechnicalRequirement(
                id=self._next_id("TS"),
                category="architecture",
                description="Full-stack application architecture",
                rationale="Modern, scalable stack",
                technology="Node.js + React",
            ))
        return reqs

    def _ui(self, lower: str) -> List[UIRequirement]:
        reqs = []
        if "dashboard" in lower:
            reqs.append(UIRequirement(
                self._next_id("UI"), "page", "Dashboard page",
                ["charts", "metrics", "navigation"], ["view data", "filter", "export"],
            ))
        if "form" in lower:
            reqs.append(UIRequirement(
                self._next_id("UI"), "form", "Input form",
                ["inputs", "validation", "submit button"], ["fill form", "validate", "submit"],
            ))
        return reqs

    def _data(self, parse: ParseResult) -> List[DataRequirement]:
        return [
            DataRequirement(
                id=self._next_id("DR"),
                entity=e.text,
                attributes=[
                    DataAttribute("id", "string", True),
                    DataAttribute("name", "string", True),
                    DataAttribute("createdAt", "date", True),
                ],
                constraints=["unique id", "non-empty name"],
            )
            for e in parse.entities
            if e.type in (EntityType.PERSON, EntityType.ORGANIZATION, EntityType.COMPONENT)
        ]

    def _integration(self, lower: str) -> List[IntegrationRequirement]:
        if "api" in lower or "rest" in lower:
            return [IntegrationRequirement(
                id=self._next_id("IR"),
                system="External API",
                type="REST_API",
                description="REST API integration",
                endpoints=["/api/v1"],
                authentication="JWT",
            )]
        return []

    def _constraints(self, lower: str) -> List[Constraint]:
        constraints = []
        if "budget" in lower or "cost" in lower:
            constraints.append(Constraint(self._next_id("C"), "budget", "Budget constraint", "May limit technology choices"))
        if "deadline" in lower or "timeline" in lower:
            constraints.append(Constraint(self._next_id("C"), "time", "Time constraint", "May require prioritization"))
        return constraints

    @staticmethod
    def _confidence(total: int) -> float:
        if total == 0:
            return 0.3
        if total < 3:
            return 0.6
        if total < 5:
            return 0.75
        return 0.9

    def _next_id(self, prefix: str) -> str:
        req_id = f"{prefix}-{self._counter:03d}"
        self._counter += 1
        return req_id
