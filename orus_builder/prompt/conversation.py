"""Per-session conversation state machine with templated replies."""
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List
from orus_builder.prompt.context import SessionContextStore
from orus_builder.prompt.types import (
    ContextEntryType,
    ConversationResult,
    ConversationState,
    ConversationTopic,
)

log = logging.getLogger(__name__)

TOPIC_KEYWORDS: Dict[str, List[str]] = {
    "authentication": ["auth", "login", "signup", "user", "password"],
    "database": ["database", "db", "storage", "mongodb", "postgres"],
    "api": ["api", "endpoint", "rest", "graphql"],
    "ui": ["ui", "interface", "design", "component", "layout"],
    "deployment": ["deploy", "hosting", "production", "server"],
    "testing": ["test", "testing", "unit test", "integration"],
}

AMBIGUOUS_RE = re.compile(r"\b(something|thing|stuff|it|this)\b")

MAX_CLARIFICATION_ATTEMPTS = 3

CLARIFICATION_QUESTIONS = [
    "Could you provide more details about what you want to create?",
    "Which technologies do you prefer?",
]


@dataclass
class _Conversation:
    state: ConversationState = ConversationState.INITIAL
    turns: int = 0
    clarification_attempts: int = 0
    topics: List[ConversationTopic] = field(default_factory=list)


def is_ambiguous(message: str) -> bool:
    return AMBIGUOUS_RE.search(message.lower()) is not None


def next_state(state: ConversationState, message: str, clarification_attempts: int) -> ConversationState:
    lower = message.lower()
    if state == ConversationState.INITIAL:
        return ConversationState.UNDERSTANDING
    if state == ConversationState.UNDERSTANDING:
        return ConversationState.CLARIFYING if is_ambiguous(message) else ConversationState.PROCESSING
    if state == ConversationState.CLARIFYING:
        if clarification_attempts < MAX_CLARIFICATION_ATTEMPTS and len(message.split()) <= 5:
            return ConversationState.CLARIFYING
        return ConversationState.PROCESSING
    if state == ConversationState.PROCESSING:
        if "confirm" in lower or "yes" in lower:
            return ConversationState.EXECUTING
        if "change" in lower or "modify" in lower:
            return ConversationState.UNDERSTANDING
        return ConversationState.CONFIRMING
    if state == ConversationState.CONFIRMING:
        if "yes" in lower or "proceed" in lower:
            return ConversationState.EXECUTING
        if "no" in lower or "change" in lower:
            return ConversationState.UNDERSTANDING
        return ConversationState.CONFIRMING
    if state == ConversationState.EXECUTING:
        return ConversationState.COMPLETED
    if state == ConversationState.COMPLETED:
        if "new" in lower or "another" in lower:
            return ConversationState.INITIAL
        return ConversationState.COMPLETED
    return state


def response_message(state: ConversationState, topic: str, questions: List[str]) -> str:
    templates = {
        ConversationState.INITIAL: "Hello! I'm ready to help you create your project. What would you like to build?",
        ConversationState.UNDERSTANDING: f"I understand you want to work on {topic}. Let me analyze your requirements...",
        ConversationState.CLARIFYING: questions[0] if questions else "Could you clarify?",
        ConversationState.PROCESSING: f"Processing your request for {topic}...",
        ConversationState.CONFIRMING: f"I'm ready to create {topic}. Shall I proceed?",
        ConversationState.EXECUTING: f"Creating {topic}... This may take a moment.",
        ConversationState.COMPLETED: f"{topic} has been created successfully! Would you like to add anything else?",
        ConversationState.ERROR: "I encountered an issue. Let's try again.",
    }
    return templates.get(state, f"Working on {topic}...")


def suggestions_for(state: ConversationState, topic: str) -> List[str]:
    if state == ConversationState.INITIAL:
        return ["Create a web application", "Build an API", "Generate a React component"]
    if state == ConversationState.UNDERSTANDING:
        return [f"Add more details about {topic}", "Specify technologies"]
    if state == ConversationState.CONFIRMING:
        return ["Confirm and proceed", "Make changes"]
    if state == ConversationState.COMPLETED:
        return ["Start a new project", "Modify existing"]
    return []


class ConversationManager:
    def __init__(self, sessions: SessionContextStore):
        self.sessions = sessions
        self._conversations: Dict[str, _Conversation] = {}

    def process_turn(self, session_id: str, message: str) -> ConversationResult:
        conv = self._conversations.setdefault(session_id, _Conversation())
        conv.turns += 1

        topic = self._detect_topic(conv, message)
        conv.state = next_state(conv.state, message, conv.clarification_attempts)

        questions: List[str] = []
        if conv.state == ConversationState.CLARIFYING:
            conv.clarification_attempts += 1
            if is_ambiguous(message):
                questions = list(CLARIFICATION_QUESTIONS)

        reply = response_message(conv.state, topic, questions)

        self.sessions.add_entry(session_id, ContextEntryType.ACTION, {
            "turn": conv.turns,
            "state": conv.state.value,
            "topic": topic,
        })
        self.sessions.add_entry(session_id, ContextEntryType.USER_INPUT, message)
        self.sessions.add_entry(session_id, ContextEntryType.SYSTEM_RESPONSE, reply)

        log.info("Conversation turn %d: state=%s topic=%s", conv.turns, conv.state.value, topic)
        return ConversationResult(
            message=reply,
            state=conv.state,
            turn=conv.turns,
            topic=topic,
            requires_clarification=bool(questions),
            clarification_questions=questions,
            suggestions=suggestions_for(conv.state, topic),
            topics_discussed=[t.name for t in conv.topics],
        )

    def get_state(self, session_id: str) -> ConversationState:
        conv = self._conversations.get(session_id)
        return conv.state if conv else ConversationState.INITIAL

    def _detect_topic(self, conv: _Conversation, message: str) -> str:
        lower = message.lower()
        for topic, keywords in TOPIC_KEYWORDS.items():
            if any(k in lower for k in keywords):
                self._track_topic(conv, topic)
                return topic
        if conv.topics:
            return conv.topics[-1].name
        return "general"

    def _track_topic(self, conv: _Conversation, name: str) -> None:
        now = datetime.now(timezone.utc)
        for topic in conv.topics:
            if topic.name == name:
                topic.last_mentioned = now
                topic.mentions += 1
                return
        conv.topics.append(ConversationTopic(id=f"topic-{len(conv.topics)}", name=name, started_at=now, last_mentioned=now))
