"""Weighted pattern matching of a prompt against known intents."""
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from orus_builder.prompt.types import ClassificationResult, Intent, IntentCategory, IntentInfo

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntentPattern:
    intent: Intent
    category: IntentCategory
    patterns: Tuple[str, ...]
    keywords: Tuple[str, ...]
    weight: float


INTENT_PATTERNS = [
    IntentPattern(
        Intent.CREATE_APP, IntentCategory.CREATION,
        ("create app", "build app", "make app", "new app", "generate app",
         "criar app", "construir app", "gerar app"),
        ("create", "build", "make", "new", "generate", "app", "application"),
        1.0,
    ),
    IntentPattern(
        Intent.CREATE_COMPONENT, IntentCategory.CREATION,
        ("create component", "build component", "new component", "add component",
         "criar componente", "adicionar componente"),
        ("create", "build", "new", "add", "component"),
        0.9,
    ),
    IntentPattern(
        Intent.CREATE_API, IntentCategory.CREATION,
        ("create api", "build api", "new api", "generate api", "make rest api",
         "criar api", "gerar api"),
        ("create", "build", "api", "rest", "endpoint"),
        0.9,
    ),
    IntentPattern(
        Intent.MODIFY_CODE, IntentCategory.MODIFICATION,
        ("modify", "change", "update", "edit", "alter", "modificar", "alterar", "editar"),
        ("modify", "change", "update", "edit", "alter", "fix"),
        0.8,
    ),
    IntentPattern(
        Intent.REFACTOR, IntentCategory.MODIFICATION,
        ("refactor", "improve", "optimize", "clean up", "refatorar", "melhorar", "otimizar"),
        ("refactor", "improve", "optimize", "clean"),
        0.8,
    ),
    IntentPattern(
        Intent.EXPLAIN, IntentCategory.QUERY,
        ("explain", "what is", "how does", "why", "explicar", "o que é", "como funciona"),
        ("explain", "what", "how", "why", "describe"),
        0.7,
    ),
    IntentPattern(
        Intent.SEARCH, IntentCategory.QUERY,
        ("search", "find", "look for", "show me", "buscar", "encontrar", "procurar"),
        ("search", "find", "look", "show"),
        0.7,
    ),
    IntentPattern(
        Intent.CONFIGURE, IntentCategory.CONFIGURATION,
        ("configure", "setup", "set", "config", "configurar", "ajustar"),
        ("configure", "setup", "set", "config", "settings"),
        0.7,
    ),
    IntentPattern(
        Intent.DEPLOY, IntentCategory.CONFIGURATION,
        ("deploy", "publish", "release", "launch", "deployar", "publicar", "lançar"),
        ("deploy", "publish", "release", "launch"),
        0.8,
    ),
]


class IntentClassifier:
    def __init__(self, patterns: Optional[List[IntentPattern]] = None):
        self.patterns = patterns or INTENT_PATTERNS
        self._cache: Dict[Tuple, ClassificationResult] = {}

    def classify(self, text: str, context: Optional[Dict[str, Any]] = None) -> ClassificationResult:
        key = (text, tuple(sorted((context or {}).items())))
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        result = self._classify_by_patterns(text)
        if context and context.get("previous_intent"):
            result.confidence = min(result.confidence * 1.1, 1.0)

        self._cache[key] = result
        log.info("Intent classified as %s (confidence %.2f)", result.primary.intent.value, result.confidence)
        return result

    def _classify_by_patterns(self, text: str) -> ClassificationResult:
        start = time.perf_counter()
        lower = text.lower()
        matches: List[Tuple[IntentPattern, float]] = []

        for pattern in self.patterns:
            score = 0.0
            for p in pattern.patterns:
                if p in lower:
                    score += pattern.weight * 2
            for keyword in pattern.keywords:
                if keyword in lower:
                    score += pattern.weight * 0.5
            if score > 0:
                matches.append((pattern, score))

        matches.sort(key=lambda m: m[1], reverse=True)

        if matches:
            best, best_score = matches[0]
            primary = IntentInfo(best.intent, min(best_score / 5, 1.0), best.category)
        else:
            best_score = 0.0
            primary = IntentInfo(Intent.UNKNOWN, 0.3, IntentCategory.GENERAL)

        return ClassificationResult(
            primary=primary,
            secondary=[IntentInfo(p.intent, min(s / 5, 1.0), p.category) for p, s in matches[1:3]],
            confidence=primary.confidence,
            reasoning=[
                f"Pattern matching: {len(matches)} patterns matched",
                f"Primary score: {best_score:.2f}",
            ],
            patterns_matched=[p.intent.value for p, _ in matches],
            classification_time=int((time.perf_counter() - start) * 1000),
        )
