"""Dataclasses produced and consumed by the prompt-processing engines."""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from orus_builder.core.workflow import StageRecord


# Parsing

class TokenType(str, Enum):
    WORD = "word"
    PUNCTUATION = "punctuation"
    NUMBER = "number"
    SYMBOL = "symbol"


class EntityType(str, Enum):
    PERSON = "person"
    ORGANIZATION = "organization"
    LOCATION = "location"
    DATE = "date"
    TIME = "time"
    MONEY = "money"
    PERCENTAGE = "percentage"
    TECHNOLOGY = "technology"
    FEATURE = "feature"
    COMPONENT = "component"
    CUSTOM = "custom"


@dataclass
class Token:
    text: str
    index: int
    start: int
    end: int
    type: TokenType


@dataclass
class Sentence:
    text: str
    index: int
    start: int
    end: int
    tokens: List[Token]


@dataclass
class Entity:
    text: str
    type: EntityType
    start: int
    end: int
    confidence: float


@dataclass
class POSTag:
    token: str
    tag: str
    confidence: float


@dataclass
class Sentiment:
    label: str
    score: float
    confidence: float


@dataclass
class ParseResult:
    original: str
    language: str
    tokens: List[Token]
    sentences: List[Sentence]
    entities: List[Entity]
    pos_tags: Optional[List[POSTag]] = None
    sentiment: Optional[Sentiment] = None
    parse_time: int = 0


# Intent classification

class Intent(str, Enum):
    CREATE_APP = "create_app"
    CREATE_COMPONENT = "create_component"
    CREATE_API = "create_api"
    CREATE_DATABASE = "create_database"
    CREATE_UI = "create_ui"
    MODIFY_CODE = "modify_code"
    UPDATE_COMPONENT = "update_component"
    REFACTOR = "refactor"
    OPTIMIZE = "optimize"
    EXPLAIN = "explain"
    DESCRIBE = "describe"
    SEARCH = "search"
    ANALYZE = "analyze"
    CONFIGURE = "configure"
    SETUP = "setup"
    DEPLOY = "deploy"
    TEST = "test"
    NAVIGATE = "navigate"
    VIEW = "view"
    LIST = "list"
    HELP = "help"
    GENERAL = "general"
    UNKNOWN = "unknown"


class IntentCategory(str, Enum):
    CREATION = "creation"
    MODIFICATION = "modification"
    QUERY = "query"
    CONFIGURATION = "configuration"
    NAVIGATION = "navigation"
    GENERAL = "general"


@dataclass
class IntentInfo:
    intent: Intent
    confidence: float
    category: IntentCategory
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ClassificationResult:
    primary: IntentInfo
    secondary: List[IntentInfo]
    confidence: float
    reasoning: List[str]
    patterns_matched: List[str]
    classification_time: int = 0


# Validation

class IssueType(str, Enum):
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    TOO_VAGUE = "too_vague"
    UNCLEAR = "unclear"
    INCOMPLETE = "incomplete"
    MISSING_CONTEXT = "missing_context"
    INFEASIBLE = "infeasible"
    CONTRADICTORY = "contradictory"


class IssueSeverity(str, Enum):
    BLOCKING = "blocking"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SuggestionType(str, Enum):
    ADD_DETAIL = "add_detail"
    SPECIFY_REQUIREMENT = "specify_requirement"
    CLARIFY = "clarify"
    ADD_CONTEXT = "add_context"


@dataclass
class ValidationIssue:
    id: str
    type: IssueType
    severity: IssueSeverity
    description: str


@dataclass
class Suggestion:
    id: str
    type: SuggestionType
    description: str
    priority: int
    example: Optional[str] = None


@dataclass
class ValidationMetrics:
    length: int
    word_count: int
    sentence_count: int
    clarity: float
    completeness: float
    specificity: float
    feasibility: float


@dataclass
class ValidationResult:
    is_valid: bool
    quality_score: float
    issues: List[ValidationIssue]
    suggestions: List[Suggestion]
    metrics: ValidationMetrics
    checks_performed: List[str] = field(default_factory=list)
    validation_time: int = 0


# Session context and context analysis

class ContextEntryType(str, Enum):
    USER_INPUT = "user_input"
    SYSTEM_RESPONSE = "system_response"
    ACTION = "action"


@dataclass
class ContextEntry:
    type: ContextEntryType
    content: Any
    timestamp: datetime


@dataclass
class ContextSession:
    session_id: str
    user_id: Optional[str] = None
    project_id: Optional[str] = None
    language: str = "en"
    entries: List[ContextEntry] = field(default_factory=list)

    def user_inputs(self) -> List[str]:
        return [str(e.content) for e in self.entries if e.type == ContextEntryType.USER_INPUT]


class ConversationFlow(str, Enum):
    INITIAL = "initial"
    CLARIFICATION = "clarification"
    CONTINUATION = "continuation"
    NEW_TOPIC = "new_topic"


class ProjectType(str, Enum):
    WEB_APP = "web_app"
    MOBILE_APP = "mobile_app"
    API = "api"
    FULL_STACK = "full_stack"


class TechnologyCategory(str, Enum):
    FRONTEND = "frontend"
    BACKEND = "backend"
    DATABASE = "database"


@dataclass
class ConversationalContext:
    turn_number: int
    previous_prompts: List[str]
    topic_continuity: bool
    reference_resolution: Dict[str, str]
    flow: ConversationFlow


@dataclass
class ProjectContext:
    project_id: Optional[str]
    project_type: ProjectType
    stage: str
    existing_components: List[str]
    tech_stack: List[str]
    patterns: List[str] = field(default_factory=list)


@dataclass
class UserContext:
    user_id: Optional[str]
    experience_level: str
    language: str
    verbosity: str


@dataclass
class Technology:
    name: str
    category: TechnologyCategory
    confidence: float


@dataclass
class TechnicalContext:
    technologies: List[Technology]


@dataclass
class HistoricalContext:
    recent_prompts: List[str]


@dataclass
class DomainContext:
    domain: str
    common_patterns: List[str]
    best_practices: List[str]


@dataclass
class EnrichedContext:
    suggested_technologies: List[str]
    recommended_patterns: List[str]
    potential_challenges: List[str]


@dataclass
class AnalysisResult:
    conversational: ConversationalContext
    project: ProjectContext
    user: UserContext
    technical: TechnicalContext
    historical: HistoricalContext
    domain: DomainContext
    enriched: EnrichedContext
    context_sources: List[str]
    confidence: float
    analysis_time: int = 0


# Ambiguity resolution

class AmbiguityType(str, Enum):
    LEXICAL = "lexical"
    SYNTACTIC = "syntactic"
    SEMANTIC = "semantic"
    REFERENTIAL = "referential"
    SCOPE = "scope"
    TEMPORAL = "temporal"
    QUANTITATIVE = "quantitative"
    TECHNICAL = "technical"


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    OPEN_ENDED = "open_ended"
    YES_NO = "yes_no"
    NUMERIC = "numeric"


class ResolutionStrategy(str, Enum):
    CONTEXT_BASED = "context_based"
    DOMAIN_DEFAULT = "domain_default"
    ASSUMPTION = "assumption"


@dataclass
class Ambiguity:
    id: str
    type: AmbiguityType
    description: str
    start: int
    end: int
    text: str
    severity: Severity
    interpretations: List[str]


@dataclass
class ClarificationQuestion:
    id: str
    question: str
    related_ambiguity: str
    options: List[str]
    type: QuestionType
    priority: int


@dataclass
class Resolution:
    ambiguity_id: str
    strategy: ResolutionStrategy
    resolution: str
    confidence: float
    assumption: Optional[str] = None


@dataclass
class AmbiguityResult:
    has_ambiguity: bool
    ambiguities: List[Ambiguity]
    questions: List[ClarificationQuestion]
    resolutions: List[Resolution]
    confidence: float
    requires_clarification: bool
    resolved_count: int = 0
    resolution_time: int = 0


# Requirements extraction

class FunctionalCategory(str, Enum):
    CORE_FEATURE = "core_feature"
    USER_MANAGEMENT = "user_management"
    DATA_PROCESSING = "data_processing"
    BUSINESS_LOGIC = "business_logic"
    REPORTING = "reporting"
    INTEGRATION = "integration"
    UTILITY = "utility"


class Priority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Complexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    VERY_COMPLEX = "very_complex"


@dataclass
class FunctionalRequirement:
    id: str
    description: str
    category: FunctionalCategory
    priority: Priority
    complexity: Complexity
    acceptance: List[str]
    dependencies: List[str] = field(default_factory=list)


@dataclass
class NonFunctionalRequirement:
    id: str
    type: str
    description: str
    metric: str
    target: str
    priority: Priority


@dataclass
class TechnicalRequirement:
    id: str
    category: str
    description: str
    rationale: str
    technology: Optional[str] = None


@dataclass
class UIRequirement:
    id: str
    type: str
    description: str
    components: List[str]
    interactions: List[str]


@dataclass
class DataAttribute:
    name: str
    type: str
    required: bool


@dataclass
class DataRequirement:
    id: str
    entity: str
    attributes: List[DataAttribute]
    constraints: List[str]


@dataclass
class IntegrationRequirement:
    id: str
    system: str
    type: str
    description: str
    endpoints: List[str]
    authentication: Optional[str] = None


@dataclass
class Constraint:
    id: str
    type: str
    description: str
    impact: str


@dataclass
class RequirementsResult:
    functional: List[FunctionalRequirement]
    non_functional: List[NonFunctionalRequirement]
    technical: List[TechnicalRequirement]
    ui: List[UIRequirement]
    data: List[DataRequirement]
    integration: List[IntegrationRequirement]
    constraints: List[Constraint]
    confidence: float
    extraction_time: int = 0

    @property
    def total_requirements(self) -> int:
        return (
            len(self.functional) + len(self.non_functional) + len(self.technical)
            + len(self.ui) + len(self.data) + len(self.integration) + len(self.constraints)
        )


# Conversation

class ConversationState(str, Enum):
    INITIAL = "initial"
    UNDERSTANDING = "understanding"
    CLARIFYING = "clarifying"
    PROCESSING = "processing"
    CONFIRMING = "confirming"
    EXECUTING = "executing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass
class ConversationTopic:
    id: str
    name: str
    started_at: datetime
    last_mentioned: datetime
    mentions: int = 1


@dataclass
class ConversationResult:
    message: str
    state: ConversationState
    turn: int
    topic: str
    requires_clarification: bool
    clarification_questions: List[str]
    suggestions: List[str]
    topics_discussed: List[str]


# History

@dataclass
class HistoryResult:
    success: bool
    generated_files: List[str] = field(default_factory=list)
    execution_time: Optional[int] = None
    errors: List[str] = field(default_factory=list)


@dataclass
class HistoryEntry:
    id: str
    session_id: str
    prompt: str
    timestamp: datetime
    user_id: Optional[str] = None
    intent: Optional[str] = None
    topics: List[str] = field(default_factory=list)
    language: str = "en"
    quality: Optional[float] = None
    validation: Optional[Dict[str, Any]] = None
    result: Optional[HistoryResult] = None


@dataclass
class HistoryQuery:
    session_id: Optional[str] = None
    user_id: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    topics: List[str] = field(default_factory=list)
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    min_quality: Optional[float] = None
    limit: Optional[int] = None


@dataclass
class HistoryAnalytics:
    total_prompts: int = 0
    unique_users: int = 0
    unique_sessions: int = 0
    average_quality: float = 0.0
    top_topics: List[Dict[str, Any]] = field(default_factory=list)
    success_rate: float = 0.0
    time_distribution: Dict[str, int] = field(default_factory=dict)


# Processing

@dataclass(frozen=True)
class ProcessingOptions:
    skip_validation: bool = False
    skip_ambiguity_resolution: bool = False
    enable_detailed_analysis: bool = False
    conversation_mode: bool = True


@dataclass(frozen=True)
class ProcessingInput:
    prompt: str
    session_id: str
    user_id: Optional[str] = None
    options: ProcessingOptions = field(default_factory=ProcessingOptions)


@dataclass
class ProcessingResult:
    success: bool
    prompt: str
    parse: ParseResult
    classification: ClassificationResult
    validation: ValidationResult
    requirements: RequirementsResult
    context: AnalysisResult
    ambiguity: AmbiguityResult
    conversation: Optional[ConversationResult]
    ready: bool
    clarifications_needed: List[str]
    pipeline: List[StageRecord]
    history_entry_id: Optional[str]
    processing_time: int = 0
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
