"""Quality checks run on a prompt before it is handed to the generators."""
import logging
import re
import time
from typing import List
from orus_builder.prompt.types import (
    IssueSeverity,
    IssueType,
    Suggestion,
    SuggestionType,
    ValidationIssue,
    ValidationMetrics,
    ValidationResult,
)

log = logging.getLogger(__name__)

MIN_LENGTH = 10
MAX_LENGTH = 2000
MIN_WORDS = 3

VAGUE_TERMS = ["thing", "stuff", "something", "somehow", "kind of", "sort of"]
PRONOUNS = ["it", "this", "that", "these", "those"]
UNREALISTIC_TERMS = ["immediately", "instant", "real-time without delay"]
TECHNICAL_TERMS = ["react", "node", "api", "database", "authentication"]

SEVERITY_PENALTY = {
    IssueSeverity.BLOCKING: 0.3,
    IssueSeverity.HIGH: 0.15,
    IssueSeverity.MEDIUM: 0.08,
    IssueSeverity.LOW: 0.03,
}

CHECKS = ["length", "clarity", "completeness", "feasibility"]


def _words(text: str) -> List[str]:
    return text.split()


class PromptValidator:
    def __init__(self):
        self._issue_counter = 0
        self._suggestion_counter = 0

    def validate(self, text: str) -> ValidationResult:
        start = time.perf_counter()

        metrics = self.calculate_metrics(text)
        issues: List[ValidationIssue] = []
        issues += self.check_length(text)
        issues += self.check_clarity(text)
        issues += self.check_completeness(text)
        issues += self.check_feasibility(text)

        result = ValidationResult(
            is_valid=not any(i.severity == IssueSeverity.BLOCKING for i in issues),
            quality_score=self.quality_score(metrics, issues),
            issues=issues,
            suggestions=self.generate_suggestions(issues, text),
            metrics=metrics,
            checks_performed=list(CHECKS),
            validation_time=int((time.perf_counter() - start) * 1000),
        )
        log.info(
            "Prompt validated: valid=%s quality=%.2f issues=%d",
            result.is_valid, result.quality_score, len(issues),
        )
        return result

    def calculate_metrics(self, text: str) -> ValidationMetrics:
        return ValidationMetrics(
            length=len(text),
            word_count=len(_words(text)),
            sentence_count=len([s for s in re.split(r"[.!?]+", text) if s.strip()]),
            clarity=self.assess_clarity(text),
            completeness=self.assess_completeness(text),
            specificity=self.assess_specificity(text),
            feasibility=self.assess_feasibility(text),
        )

    def check_length(self, text: str) -> List[ValidationIssue]:
        issues = []
        word_count = len(_words(text))
        if len(text) < MIN_LENGTH:
            issues.append(self._issue(
                IssueType.TOO_SHORT, IssueSeverity.BLOCKING,
                f"Prompt too short ({len(text)} chars). Minimum: {MIN_LENGTH}",
            ))
        if len(text) > MAX_LENGTH:
            issues.append(self._issue(
                IssueType.TOO_LONG, IssueSeverity.HIGH,
                f"Prompt too long ({len(text)} chars). Maximum: {MAX_LENGTH}",
            ))
        if word_count < MIN_WORDS:
            issues.append(self._issue(
                IssueType.TOO_VAGUE, IssueSeverity.HIGH,
                f"Too few words ({word_count}). Add more detail.",
            ))
        return issues

    def check_clarity(self, text: str) -> List[ValidationIssue]:
        issues = []
        lower = text.lower()
        for term in VAGUE_TERMS:
            if term in lower:
                issues.append(self._issue(
                    IssueType.UNCLEAR, IssueSeverity.MEDIUM,
                    f'Vague term detected: "{term}". Be more specific.',
                ))

        pronoun_count = sum(len(re.findall(rf"\b{p}\b", lower)) for p in PRONOUNS)
        if pronoun_count > 5:
            issues.append(self._issue(
                IssueType.UNCLEAR, IssueSeverity.MEDIUM,
                "Too many pronouns. Replace with specific nouns.",
            ))
        return issues

    def check_completeness(self, text: str) -> List[ValidationIssue]:
        issues = []
        lower = text.lower()
        if "etc" in lower or "and so on" in lower or lower.endswith("..."):
            issues.append(self._issue(
                IssueType.INCOMPLETE, IssueSeverity.HIGH,
                "Incomplete specification. Provide complete list of requirements.",
            ))
        if "?" in text and len(_words(text)) < 10:
            issues.append(self._issue(
                IssueType.MISSING_CONTEXT, IssueSeverity.MEDIUM,
                "Question detected without sufficient context.",
            ))
        return issues

    def check_feasibility(self, text: str) -> List[ValidationIssue]:
        issues = []
        lower = text.lower()
        for term in UNREALISTIC_TERMS:
            if term in lower:
                issues.append(self._issue(
                    IssueType.INFEASIBLE, IssueSeverity.MEDIUM,
                    f'Potentially unrealistic requirement: "{term}"',
                ))
        if ("simple" in lower and "complex" in lower) or ("fast" in lower and "comprehensive" in lower):
            issues.append(self._issue(
                IssueType.CONTRADICTORY, IssueSeverity.HIGH,
                "Contradictory requirements detected.",
            ))
        return issues

    def generate_suggestions(self, issues: List[ValidationIssue], text: str) -> List[Suggestion]:
        suggestions = []
        for issue in issues:
            if issue.type == IssueType.TOO_SHORT:
                suggestions.append(self._suggestion(
                    SuggestionType.ADD_DETAIL, "Add more details about what you want to create", 1,
                    'Instead of "create app", try "create a React e-commerce app with user auth"',
                ))
            elif issue.type == IssueType.TOO_VAGUE:
                suggestions.append(self._suggestion(
                    SuggestionType.SPECIFY_REQUIREMENT, "Be more specific about requirements", 1,
                    "Specify technologies, features, and constraints",
                ))
            elif issue.type == IssueType.UNCLEAR:
                suggestions.append(self._suggestion(
                    SuggestionType.CLARIFY, "Replace vague terms with specific descriptions", 2,
                ))
            elif issue.type == IssueType.INCOMPLETE:
                suggestions.append(self._suggestion(
                    SuggestionType.ADD_DETAIL, "Complete the list of requirements", 1,
                ))

        if len(_words(text)) < 20:
            suggestions.append(self._suggestion(
                SuggestionType.ADD_CONTEXT, "Add context about the project domain and target users", 2,
            ))
        # sorted() is stable, so equal priorities keep issue order
        return sorted(suggestions, key=lambda s: s.priority)

    def assess_clarity(self, text: str) -> float:
        lower = text.lower()
        score = 1.0
        for term in ("thing", "stuff", "something"):
            if term in lower:
                score -= 0.1
        if len(re.findall(r"\b(it|this|that)\b", lower)) > 3:
            score -= 0.15
        return max(score, 0.0)

    def assess_completeness(self, text: str) -> float:
        word_count = len(_words(text))
        score = 0.5
        if word_count > 20:
            score += 0.2
        if word_count > 50:
            score += 0.2
        if "etc" in text or "..." in text:
            score -= 0.3
        return max(min(score, 1.0), 0.0)

    def assess_specificity(self, text: str) -> float:
        lower = text.lower()
        score = 0.3 + 0.15 * sum(1 for term in TECHNICAL_TERMS if term in lower)
        return min(score, 1.0)

    def assess_feasibility(self, text: str) -> float:
        lower = text.lower()
        score = 1.0 - 0.2 * sum(1 for term in ("immediately", "perfect", "unlimited") if term in lower)
        return max(score, 0.0)

    def quality_score(self, metrics: ValidationMetrics, issues: List[ValidationIssue]) -> float:
        score = (metrics.clarity + metrics.completeness + metrics.specificity + metrics.feasibility) / 4
        for issue in issues:
            score -= SEVERITY_PENALTY.get(issue.severity, 0.0)
        return max(min(score, 1.0), 0.0)

    def _issue(self, type: IssueType, severity: IssueSeverity, description: str) -> ValidationIssue:
        issue = ValidationIssue(id=f"issue-{self._issue_counter:03d}", type=type, severity=severity, description=description)
        self._issue_counter += 1
        return issue

    def _suggestion(self, type: SuggestionType, description: str, priority: int, example: str = None) -> Suggestion:
        suggestion = Suggestion(
            id=f"sug-{self._suggestion_counter:03d}",
            type=type,
            description=description,
            priority=priority,
            example=example,
        )
        self._suggestion_counter += 1
        return suggestion
