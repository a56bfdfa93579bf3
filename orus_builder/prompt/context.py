"""Session context storage and the context analyzer built on top of it."""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from orus_builder.prompt.types import (
    AnalysisResult,
    ContextEntry,
    ContextEntryType,
    ContextSession,
    ConversationalContext,
    ConversationFlow,
    DomainContext,
    EnrichedContext,
    HistoricalContext,
    ProjectContext,
    ProjectType,
    TechnicalContext,
    Technology,
    TechnologyCategory,
    UserContext,
)

log = logging.getLogger(__name__)

TECH_STACK_KEYWORDS = {"react": "React", "node": "Node.js", "mongodb": "MongoDB"}

TECH_CATEGORIES = {
    "react": TechnologyCategory.FRONTEND,
    "vue": TechnologyCategory.FRONTEND,
    "node": TechnologyCategory.BACKEND,
    "express": TechnologyCategory.BACKEND,
    "mongodb": TechnologyCategory.DATABASE,
    "postgres": TechnologyCategory.DATABASE,
}

DOMAIN_KEYWORDS = [
    ("e_commerce", ("ecommerce", "e-commerce", "shop")),
    ("social_media", ("social",)),
    ("fintech", ("fintech", "payment")),
    ("healthcare", ("healthcare", "patient", "clinic")),
    ("education", ("education", "course", "school")),
]

DOMAIN_PATTERNS = {
    "e_commerce": ["Shopping cart", "Product catalog", "Payment gateway"],
    "social_media": ["User profiles", "Feed", "Messaging"],
    "fintech": ["Transaction processing", "Security", "Compliance"],
    "healthcare": ["Patient records", "Appointment scheduling"],
    "education": ["Course management", "Assessment"],
    "enterprise": ["Dashboard", "Reporting", "Workflow"],
    "utility": ["Basic CRUD", "Forms"],
    "general": ["REST API", "Database", "Authentication"],
}

BEST_PRACTICES = ["Security first", "Scalable architecture", "User-centric design"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionContextStore:
    """In-memory conversation sessions keyed by session id."""

    def __init__(self):
        self._sessions: Dict[str, ContextSession] = {}

    def get_session(self, session_id: str) -> Optional[ContextSession]:
        return self._sessions.get(session_id)

    def get_or_create(self, session_id: str, user_id: Optional[str] = None, language: str = "en") -> ContextSession:
        session = self._sessions.get(session_id)
        if session is None:
            session = ContextSession(session_id=session_id, user_id=user_id, language=language)
            self._sessions[session_id] = session
        return session

    def add_entry(self, session_id: str, type: ContextEntryType, content: Any) -> ContextEntry:
        entry = ContextEntry(type=type, content=content, timestamp=_utcnow())
        self.get_or_create(session_id).entries.append(entry)
        return entry

    def clear(self, session_id: Optional[str] = None) -> None:
        if session_id is None:
            self._sessions.clear()
        else:
            self._sessions.pop(session_id, None)


def detect_domain(prompt: str) -> str:
    lower = prompt.lower()
    for domain, keywords in DOMAIN_KEYWORDS:
        if any(k in lower for k in keywords):
            return domain
    return "general"


def infer_project_type(prompt: str) -> ProjectType:
    lower = prompt.lower()
    if "api" in lower:
        return ProjectType.API
    if "mobile" in lower:
        return ProjectType.MOBILE_APP
    if "full stack" in lower:
        return ProjectType.FULL_STACK
    return ProjectType.WEB_APP


def topic_continuity(current: str, previous: List[str]) -> bool:
    if not previous or not previous[-1]:
        return False
    shared = set(current.lower().split()) & set(previous[-1].lower().split())
    return len(shared) > 2


class ContextAnalyzer:
    def __init__(self, sessions: SessionContextStore):
        self.sessions = sessions

    def analyze(self, prompt: str, session_id: Optional[str] = None) -> AnalysisResult:
        start = time.perf_counter()
        session = self.sessions.get_session(session_id) if session_id else None

        conversational = self._conversational(prompt, session)
        project = self._project(prompt, session)
        technical = self._technical(prompt)
        domain = self._domain(prompt)

        sources = ["current_prompt"]
        if session is not None:
            sources.append("session_history")

        result = AnalysisResult(
            conversational=conversational,
            project=project,
            user=UserContext(
                user_id=session.user_id if session else None,
                experience_level="intermediate",
                language=session.language if session else "en",
                verbosity="detailed",
            ),
            technical=technical,
            historical=HistoricalContext(recent_prompts=session.user_inputs()[-5:] if session else []),
            domain=domain,
            enriched=EnrichedContext(
                suggested_technologies=["React", "Node.js", "MongoDB"] if project.project_type == ProjectType.WEB_APP else [],
                recommended_patterns=domain.common_patterns[:3],
                potential_challenges=["Complexity management", "Scalability"],
            ),
            context_sources=sources,
            confidence=self._confidence(conversational, project, technical),
            analysis_time=int((time.perf_counter() - start) * 1000),
        )
        log.info("Context analyzed: domain=%s confidence=%.2f", domain.domain, result.confidence)
        return result

    def _conversational(self, prompt: str, session: Optional[ContextSession]) -> ConversationalContext:
        if session is None:
            return ConversationalContext(
                turn_number=1,
                previous_prompts=[],
                topic_continuity=False,
                reference_resolution={},
                flow=ConversationFlow.INITIAL,
            )

        inputs = session.user_inputs()
        lower = prompt.lower()
        refs = {}
        if "it " in lower or "that " in lower:
            refs["pronoun"] = "previous_entity"

        if not inputs:
            flow = ConversationFlow.INITIAL
        elif "what" in lower or "explain" in lower:
            flow = ConversationFlow.CLARIFICATION
        elif topic_continuity(prompt, inputs):
            flow = ConversationFlow.CONTINUATION
        else:
            flow = ConversationFlow.NEW_TOPIC

        return ConversationalContext(
            turn_number=len(inputs) + 1,
            previous_prompts=inputs[-5:],
            topic_continuity=topic_continuity(prompt, inputs),
            reference_resolution=refs,
            flow=flow,
        )

    def _project(self, prompt: str, session: Optional[ContextSession]) -> ProjectContext:
        lower = prompt.lower()
        return ProjectContext(
            project_id=session.project_id if session else None,
            project_type=infer_project_type(prompt),
            stage="planning",
            existing_components=[],
            tech_stack=[name for key, name in TECH_STACK_KEYWORDS.items() if key in lower],
        )

    def _technical(self, prompt: str) -> TechnicalContext:
        lower = prompt.lower()
        return TechnicalContext(technologies=[
            Technology(name=tech.capitalize(), category=category, confidence=0.9)
            for tech, category in TECH_CATEGORIES.items()
            if tech in lower
        ])

    def _domain(self, prompt: str) -> DomainContext:
        domain = detect_domain(prompt)
        return DomainContext(
            domain=domain,
            common_patterns=list(DOMAIN_PATTERNS.get(domain, [])),
            best_practices=list(BEST_PRACTICES),
        )

    def _confidence(self, conversational: ConversationalContext, project: ProjectContext, technical: TechnicalContext) -> float:
        score = 0.5
        if conversational.turn_number > 1:
            score += 0.1
        if project.tech_stack:
            score += 0.2
        if technical.technologies:
            score += 0.2
        return min(score, 1.0)
