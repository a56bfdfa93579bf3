"""Detection of vague wording and the questions or assumptions that resolve it."""
import logging
import re
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from orus_builder.prompt.types import (
    Ambiguity,
    AmbiguityResult,
    AmbiguityType,
    AnalysisResult,
    ClarificationQuestion,
    QuestionType,
    Resolution,
    ResolutionStrategy,
    Severity,
)

log = logging.getLogger(__name__)

RESOLVED_THRESHOLD = 0.7


@dataclass(frozen=True)
class AmbiguityPattern:
    type: AmbiguityType
    words: Tuple[str, ...]
    description: str
    severity: Severity


AMBIGUITY_PATTERNS = [
    AmbiguityPattern(
        AmbiguityType.REFERENTIAL, ("it", "this", "that", "these", "those", "them"),
        "Pronoun without clear antecedent", Severity.HIGH,
    ),
    AmbiguityPattern(
        AmbiguityType.QUANTITATIVE, ("some", "few", "many", "several", "a lot"),
        "Vague quantity", Severity.MEDIUM,
    ),
    AmbiguityPattern(
        AmbiguityType.TEMPORAL, ("soon", "later", "recently", "quickly"),
        "Vague time reference", Severity.MEDIUM,
    ),
    AmbiguityPattern(
        AmbiguityType.TECHNICAL, ("component", "system", "module", "service"),
        "Generic technical term", Severity.HIGH,
    ),
]

# Incompleteness has no sensible default and falls through to an assumption.
DOMAIN_DEFAULTS: Dict[AmbiguityType, str] = {
    AmbiguityType.REFERENTIAL: "Previous mentioned entity",
    AmbiguityType.QUANTITATIVE: "Reasonable default quantity",
    AmbiguityType.TEMPORAL: "Immediate timeframe",
    AmbiguityType.TECHNICAL: "Standard technical interpretation",
    AmbiguityType.LEXICAL: "Most common meaning in software development",
    AmbiguityType.SYNTACTIC: "Standard structure interpretation",
    AmbiguityType.SCOPE: "Narrow scope interpretation",
}


def interpretations(word: str, type: AmbiguityType) -> List[str]:
    if type == AmbiguityType.REFERENTIAL:
        return ["Previous entity", "Implicit reference"]
    if type == AmbiguityType.QUANTITATIVE:
        return [f"{word} = 3-5", f"{word} = 10+"]
    if type == AmbiguityType.TEMPORAL:
        return [f"{word} = within hours", f"{word} = within days"]
    if type == AmbiguityType.TECHNICAL:
        return [f"{word} = React component", f"{word} = Backend service"]
    if type == AmbiguityType.SEMANTIC:
        return ["Need complete list of requirements"]
    return ["Unclear"]


def question_text(ambiguity: Ambiguity) -> str:
    text = ambiguity.text
    return {
        AmbiguityType.REFERENTIAL: f'What does "{text}" refer to?',
        AmbiguityType.QUANTITATIVE: f'How many exactly for "{text}"?',
        AmbiguityType.TEMPORAL: f'What timeframe for "{text}"?',
        AmbiguityType.TECHNICAL: f"Which type of {text}?",
        AmbiguityType.SEMANTIC: "Could you clarify the meaning?",
    }.get(ambiguity.type, "Could you clarify?")


def question_type(ambiguity: Ambiguity) -> QuestionType:
    if len(ambiguity.interpretations) > 1:
        return QuestionType.MULTIPLE_CHOICE
    if ambiguity.type == AmbiguityType.QUANTITATIVE:
        return QuestionType.NUMERIC
    if ambiguity.type == AmbiguityType.REFERENTIAL:
        return QuestionType.YES_NO
    return QuestionType.OPEN_ENDED


class AmbiguityResolver:
    def __init__(self, patterns: Optional[List[AmbiguityPattern]] = None):
        self.patterns = patterns or AMBIGUITY_PATTERNS
        self._counter = 0

    def resolve(self, text: str, context: Optional[AnalysisResult] = None) -> AmbiguityResult:
        start = time.perf_counter()

        ambiguities = self.detect(text)
        questions = self.clarification_questions(ambiguities)
        resolutions = [self.resolve_one(a, context) for a in ambiguities]
        best = {r.ambiguity_id: r.confidence for r in resolutions}

        requires_clarification = any(
            a.severity == Severity.CRITICAL and best.get(a.id, 0.0) <= RESOLVED_THRESHOLD
            for a in ambiguities
        )

        if not ambiguities:
            confidence = 1.0
        elif requires_clarification:
            confidence = 0.3
        else:
            confidence = sum(r.confidence for r in resolutions) / len(resolutions)

        result = AmbiguityResult(
            has_ambiguity=bool(ambiguities),
            ambiguities=ambiguities,
            questions=questions,
            resolutions=resolutions,
            confidence=confidence,
            requires_clarification=requires_clarification,
            resolved_count=sum(1 for r in resolutions if r.confidence > RESOLVED_THRESHOLD),
            resolution_time=int((time.perf_counter() - start) * 1000),
        )
        log.info(
            "Ambiguity resolution: %d found, %d resolved, clarification=%s",
            len(ambiguities), result.resolved_count, requires_clarification,
        )
        return result

    def detect(self, text: str) -> List[Ambiguity]:
        found = []
        for pattern in self.patterns:
            for word in pattern.words:
                for m in re.finditer(rf"\b{re.escape(word)}\b", text, re.IGNORECASE):
                    found.append(Ambiguity(
                        id=self._next_id(),
                        type=pattern.type,
                        description=pattern.description,
                        start=m.start(),
                        end=m.end(),
                        text=m.group(0),
                        severity=pattern.severity,
                        interpretations=interpretations(m.group(0), pattern.type),
                    ))

        lower = text.lower()
        if "and so on" in lower or "etc" in lower or "..." in lower:
            found.append(Ambiguity(
                id=self._next_id(),
                type=AmbiguityType.SEMANTIC,
                description="Incomplete specification",
                start=0,
                end=len(text),
                text=text,
                severity=Severity.CRITICAL,
                interpretations=interpretations(text, AmbiguityType.SEMANTIC),
            ))
        return found

    def clarification_questions(self, ambiguities: List[Ambiguity]) -> List[ClarificationQuestion]:
        questions = [
            ClarificationQuestion(
                id=f"q-{a.id}",
                question=question_text(a),
                related_ambiguity=a.id,
                options=list(a.interpretations),
                type=question_type(a),
                priority=1 if a.severity == Severity.CRITICAL else 2,
            )
            for a in ambiguities
            if a.severity in (Severity.CRITICAL, Severity.HIGH)
        ]
        return sorted(questions, key=lambda q: q.priority)

    def resolve_one(self, ambiguity: Ambiguity, context: Optional[AnalysisResult] = None) -> Resolution:
        if context is not None:
            resolution = self._via_context(ambiguity, context)
            if resolution.confidence > RESOLVED_THRESHOLD:
                return resolution

        default = DOMAIN_DEFAULTS.get(ambiguity.type)
        if default is not None:
            return Resolution(ambiguity.id, ResolutionStrategy.DOMAIN_DEFAULT, default, 0.6)

        first = ambiguity.interpretations[0] if ambiguity.interpretations else "standard interpretation"
        assumption = f"Assuming: {first}"
        return Resolution(ambiguity.id, ResolutionStrategy.ASSUMPTION, assumption, 0.4, assumption=assumption)

    def _via_context(self, ambiguity: Ambiguity, context: AnalysisResult) -> Resolution:
        resolution, confidence = "Context-based resolution", 0.5
        previous = context.conversational.previous_prompts
        if ambiguity.type == AmbiguityType.REFERENTIAL and previous:
            resolution, confidence = f"Likely refers to: {previous[-1]}", 0.75
        return Resolution(ambiguity.id, ResolutionStrategy.CONTEXT_BASED, resolution, confidence)

    def _next_id(self) -> str:
        amb_id = f"amb-{self._counter:03d}"
        self._counter += 1
        return amb_id
