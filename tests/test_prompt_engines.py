"""Tests for the keyword and regex prompt engines."""
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from orus_builder.prompt.ambiguity import AmbiguityResolver
from orus_builder.prompt.context import ContextAnalyzer, SessionContextStore, detect_domain
from orus_builder.prompt.conversation import ConversationManager, next_state
from orus_builder.prompt.history import PromptHistory
from orus_builder.prompt.intent import IntentClassifier
from orus_builder.prompt.parser import NaturalLanguageParser
from orus_builder.prompt.requirements import RequirementsExtractor
from orus_builder.prompt.types import (
    AmbiguityType,
    ContextEntryType,
    ConversationState,
    EntityType,
    HistoryQuery,
    HistoryResult,
    Intent,
    IssueSeverity,
    ResolutionStrategy,
    TokenType,
)
from orus_builder.prompt.validator import PromptValidator


def test_parser_tokens_sentences_and_entities():
    """Test tokenization, sentence split and keyword/pattern entities."""
    parser = NaturalLanguageParser()
    result = parser.parse("Create a React dashboard with login. Add a chart!")

    assert result.language == "en"
    assert [s.text for s in result.sentences] == ["Create a React dashboard with login.", "Add a chart!"]
    assert result.tokens[0].text == "Create"
    assert result.tokens[0].type == TokenType.WORD
    assert any(t.type == TokenType.PUNCTUATION for t in result.tokens)

    found = {(e.text, e.type) for e in result.entities}
    assert ("React", EntityType.TECHNOLOGY) in found
    assert ("dashboard", EntityType.COMPONENT) in found
    assert ("login", EntityType.FEATURE) in found
    assert ("chart", EntityType.COMPONENT) in found
    starts = [e.start for e in result.entities]
    assert starts == sorted(starts), "Entities should be ordered by position"

    assert parser.parse("Create a React dashboard with login. Add a chart!") is result, "Cached"

    emails = parser.recognize_entities("Mail me at dev@orus.io")
    assert [(e.text, e.type) for e in emails] == [("dev@orus.io", EntityType.CUSTOM)]


def test_parser_language_detection():
    """Test whole-word language detection with English on ties."""
    parser = NaturalLanguageParser()
    assert parser.detect_language("criar um app com login") == "pt"
    assert parser.detect_language("crear una tienda para el cliente") == "es"
    assert parser.detect_language("xyz") == "en"


def test_intent_classification():
    """Test weighted scoring, unknown intent and the previous-intent boost."""
    classifier = IntentClassifier()
    result = classifier.classify("Create app for tasks")
    assert result.primary.intent == Intent.CREATE_APP
    assert abs(result.confidence - 0.6) < 1e-9
    assert result.reasoning[0].startswith("Pattern matching:")
    assert len(result.secondary) <= 2

    unknown = classifier.classify("hello there")
    assert unknown.primary.intent == Intent.UNKNOWN
    assert unknown.confidence == 0.3

    boosted = classifier.classify("Create app for tasks", {"previous_intent": "create_app"})
    assert abs(boosted.confidence - 0.66) < 1e-9


def test_validator_blocks_short_prompt():
    """Test that a too-short prompt is invalid with sorted suggestions."""
    result = PromptValidator().validate("app")
    assert not result.is_valid
    assert result.issues[0].severity == IssueSeverity.BLOCKING
    assert result.issues[0].description == "Prompt too short (3 chars). Minimum: 10"
    assert [s.priority for s in result.suggestions] == sorted(s.priority for s in result.suggestions)
    assert 0.0 <= result.quality_score <= 1.0
    assert result.checks_performed == ["length", "clarity", "completeness", "feasibility"]


def test_validator_accepts_clear_prompt():
    """Test that a specific prompt passes."""
    result = PromptValidator().validate("Create a React dashboard with authentication and a sales chart for managers")
    assert result.is_valid
    assert result.metrics.specificity > 0.3


def test_validator_flags_vague_and_contradictory():
    """Test vague terms and contradictory requirements."""
    result = PromptValidator().validate("Make something simple but complex for the team please")
    descriptions = [i.description for i in result.issues]
    assert 'Vague term detected: "something". Be more specific.' in descriptions
    assert "Contradictory requirements detected." in descriptions
    assert result.is_valid, "Only blocking issues invalidate a prompt"


def test_ambiguity_incomplete_requires_clarification():
    """Test that incompleteness is critical and unresolved by defaults."""
    result = AmbiguityResolver().resolve("Make it work etc")
    types = [a.type for a in result.ambiguities]
    assert AmbiguityType.REFERENTIAL in types
    assert AmbiguityType.SEMANTIC in types
    assert result.requires_clarification
    assert result.confidence == 0.3
    assert result.questions[0].priority == 1

    semantic = next(r for r in result.resolutions if r.strategy == ResolutionStrategy.ASSUMPTION)
    assert semantic.confidence == 0.4
    assert semantic.assumption == "Assuming: Need complete list of requirements"


def test_ambiguity_domain_default():
    """Test a medium ambiguity resolved by a domain default without questions."""
    result = AmbiguityResolver().resolve("Build a dashboard soon")
    assert result.has_ambiguity
    assert result.questions == []
    assert not result.requires_clarification
    assert result.resolutions[0].strategy == ResolutionStrategy.DOMAIN_DEFAULT
    assert result.confidence == 0.6
    assert result.resolved_count == 0

    clean = AmbiguityResolver().resolve("Build a dashboard")
    assert not clean.has_ambiguity
    assert clean.confidence == 1.0


def test_ambiguity_context_resolution():
    """Test that a pronoun is resolved against the previous prompt."""
    resolver = AmbiguityResolver()
    ambiguity = resolver.detect("Make it blue")[0]
    context = MagicMock()
    context.conversational.previous_prompts = ["Build a todo app"]

    resolution = resolver.resolve_one(ambiguity, context)
    assert resolution.strategy == ResolutionStrategy.CONTEXT_BASED
    assert resolution.confidence == 0.75
    assert resolution.resolution == "Likely refers to: Build a todo app"


def test_requirements_extraction():
    """Test requirement kinds and the shared id counter."""
    text = "Create app with login and dashboard, must be fast and secure"
    parse = NaturalLanguageParser().parse(text)
    classification = IntentClassifier().classify(text)
    result = RequirementsExtractor().extract(text, parse, classification)

    assert [r.id for r in result.functional] == ["FR-000", "FR-001"]
    assert [r.description for r in result.functional] == ["Implement login", "Implement dashboard"]
    assert [r.type for r in result.non_functional] == ["performance", "security"]
    assert [r.category for r in result.technical] == ["architecture"]
    assert result.ui[0].description == "Dashboard page"
    assert result.total_requirements == 7
    assert result.confidence == 0.9


def test_conversation_turns():
    """Test state transitions, topics and session entries."""
    sessions = SessionContextStore()
    manager = ConversationManager(sessions)

    first = manager.process_turn("s1", "Build a login page")
    assert first.state == ConversationState.UNDERSTANDING
    assert first.topic == "authentication"

    second = manager.process_turn("s1", "make it nicer")
    assert second.state == ConversationState.CLARIFYING
    assert second.requires_clarification
    assert second.topic == "authentication"

    entries = sessions.get_session("s1").entries
    assert len(entries) == 6
    assert [e.type for e in entries[:3]] == [
        ContextEntryType.ACTION, ContextEntryType.USER_INPUT, ContextEntryType.SYSTEM_RESPONSE,
    ]
    assert sessions.get_session("s1").user_inputs() == ["Build a login page", "make it nicer"]
    assert manager.get_state("s1") == ConversationState.CLARIFYING
    assert manager.get_state("unknown") == ConversationState.INITIAL


def test_next_state_rules():
    """Test the clarification cap and confirmation paths."""
    assert next_state(ConversationState.CLARIFYING, "blue", 1) == ConversationState.CLARIFYING
    assert next_state(ConversationState.CLARIFYING, "blue", 3) == ConversationState.PROCESSING
    assert next_state(ConversationState.PROCESSING, "yes please", 0) == ConversationState.EXECUTING
    assert next_state(ConversationState.CONFIRMING, "no, change colors", 0) == ConversationState.UNDERSTANDING
    assert next_state(ConversationState.COMPLETED, "start a new one", 0) == ConversationState.INITIAL


def test_context_analyzer():
    """Test domain detection and session-aware conversational context."""
    assert detect_domain("An online shop for shoes") == "e_commerce"
    assert detect_domain("Course catalog for a school") == "education"
    assert detect_domain("A todo list") == "general"

    sessions = SessionContextStore()
    sessions.get_or_create("s1")
    sessions.add_entry("s1", ContextEntryType.USER_INPUT, "Build a react dashboard")
    result = ContextAnalyzer(sessions).analyze("Add a chart to the react dashboard", "s1")

    assert result.conversational.turn_number == 2
    assert result.conversational.previous_prompts == ["Build a react dashboard"]
    assert "session_history" in result.context_sources
    assert result.project.tech_stack == ["React"]
    assert result.confidence > 0.5


def test_history_search_and_analytics():
    """Test ids, filtering, ordering, results and analytics."""
    history = PromptHistory()
    now = datetime.now(timezone.utc)
    a = history.add_entry("s1", "Build a shop", user_id="u1", topics=["ui"], quality=0.8, timestamp=now - timedelta(hours=2))
    b = history.add_entry("s1", "Add a cart to the shop", user_id="u1", topics=["ui"], quality=0.6, timestamp=now - timedelta(hours=1))
    history.add_entry("s2", "Write an api", user_id="u2", topics=["api"], quality=0.4, timestamp=now)

    assert a.id == "hist-000000"
    assert [e.id for e in history.search(HistoryQuery(keywords=["shop"]))] == [b.id, a.id], "Newest first"
    assert [e.id for e in history.get_by_session("s1")] == [a.id, b.id], "Oldest first"
    assert [e.prompt for e in history.get_recent(2)] == ["Write an api", "Add a cart to the shop"]
    assert len(history.search(HistoryQuery(min_quality=0.5))) == 2

    assert history.update_result(a.id, HistoryResult(success=True, generated_files=3))
    assert not history.update_result("hist-999999", HistoryResult(success=True))

    stats = history.analytics()
    assert stats.total_prompts == 3
    assert stats.unique_users == 2
    assert stats.unique_sessions == 2
    assert abs(stats.average_quality - 0.6) < 1e-9
    assert stats.top_topics[0] == {"topic": "ui", "count": 2}
    assert stats.success_rate == 1.0


def test_history_export_import_and_clear():
    """Test export/import under fresh ids and a bad payload."""
    source = PromptHistory()
    source.add_entry("s1", "Build a shop", quality=0.9)
    target = PromptHistory()
    target.add_entry("s9", "Existing")

    assert target.import_entries(source.export()) == 1
    assert target.get_entry("hist-000001").prompt == "Build a shop"
    assert target.import_entries("not json") == 0
    assert target.import_entries('[{"prompt": "missing session"}]') == 0

    assert target.clear_history(session_id="s1") == 1
    assert len(target) == 1


def test_history_cleanup():
    """Test retention and the size cap."""
    history = PromptHistory(max_size=2, retention_days=180)
    old = datetime.now(timezone.utc) - timedelta(days=200)
    history.add_entry("s1", "ancient", timestamp=old)
    history.add_entry("s1", "first")
    history.add_entry("s1", "second")
    assert [e.prompt for e in history.get_by_session("s1")] == ["first", "second"]

    history.add_entry("s1", "third")
    assert len(history) == 2
    assert [e.prompt for e in history.get_by_session("s1")] == ["second", "third"]
