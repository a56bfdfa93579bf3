from __future__ import annotations
import logging
import time
from typing import Any, Callable, List, Optional, Tuple, TypeVar
from orus_builder.core.errors import PipelineStageError
from orus_builder.core.workflow import PipelineStage, StageRecord, StageStatus
from orus_builder.prompt.ambiguity import AmbiguityResolver
from orus_builder.prompt.context import ContextAnalyzer, SessionContextStore
from orus_builder.prompt.conversation import ConversationManager
from orus_builder.prompt.history import PromptHistory
from orus_builder.prompt.intent import IntentClassifier
from orus_builder.prompt.parser import NaturalLanguageParser
from orus_builder.prompt.requirements import RequirementsExtractor
from orus_builder.prompt.types import (
    AmbiguityResult,
    ContextEntryType,
    ProcessingInput,
    ProcessingResult,
    ValidationMetrics,
    ValidationResult,
)
from orus_builder.prompt.validator import PromptValidator

log = logging.getLogger(__name__)

T = TypeVar("T")

READY_CONFIDENCE = 0.6


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def skipped_validation(text: str) -> ValidationResult:
    return ValidationResult(
        is_valid=True,
        quality_score=1.0,
        issues=[],
        suggestions=[],
        metrics=ValidationMetrics(
            length=len(text),
            word_count=len(text.split()),
            sentence_count=0,
            clarity=1.0,
            completeness=1.0,
            specificity=1.0,
            feasibility=1.0,
        ),
    )


def skipped_ambiguity() -> AmbiguityResult:
    return AmbiguityResult(
        has_ambiguity=False,
        ambiguities=[],
        questions=[],
        resolutions=[],
        confidence=1.0,
        requires_clarification=False,
    )


class PromptProcessor:
    """Runs a prompt through the eight analysis stages in order.

    Every stage leaves a ``StageRecord`` in the trace. A stage that raises
    is recorded with status ``error`` and the run stops with a
    ``PipelineStageError``.
    """

    def __init__(
        self,
        parser: NaturalLanguageParser,
        classifier: IntentClassifier,
        validator: PromptValidator,
        sessions: SessionContextStore,
        context_analyzer: ContextAnalyzer,
        ambiguity: AmbiguityResolver,
        requirements: RequirementsExtractor,
        conversation: ConversationManager,
        history: PromptHistory,
    ):
        self.parser = parser
        self.classifier = classifier
        self.validator = validator
        self.sessions = sessions
        self.context_analyzer = context_analyzer
        self.ambiguity = ambiguity
        self.requirements = requirements
        self.conversation = conversation
        self.history = history

    def _run_stage(
        self,
        trace: List[StageRecord],
        request_id: str,
        stage: PipelineStage,
        fn: Callable[[], T],
        describe: Optional[Callable[[T], Tuple[StageStatus, Optional[str]]]] = None,
    ) -> T:
        log.info("Running stage", extra={"request_id": request_id, "stage": stage.value})
        start = time.perf_counter()
        try:
            value = fn()
        except Exception as e:
            trace.append(StageRecord(stage, StageStatus.ERROR, _elapsed_ms(start), str(e)))
            log.error("Stage failed: %s", e, extra={"request_id": request_id, "stage": stage.value})
            raise PipelineStageError(stage.value, e) from e

        status, message = describe(value) if describe else (StageStatus.SUCCESS, None)
        trace.append(StageRecord(stage, status, _elapsed_ms(start), message))
        return value

    def process(self, data: ProcessingInput) -> ProcessingResult:
        started = time.perf_counter()
        opts = data.options
        rid = data.session_id
        trace: List[StageRecord] = []
        warnings: List[str] = []
        clarifications: List[str] = []

        parse = self._run_stage(trace, rid, PipelineStage.PARSE, lambda: self.parser.parse(
            data.prompt,
            enable_pos=opts.enable_detailed_analysis,
            enable_sentiment=opts.enable_detailed_analysis,
        ))
        self.sessions.get_or_create(rid, user_id=data.user_id, language=parse.language)

        classification = self._run_stage(
            trace, rid, PipelineStage.CLASSIFICATION,
            lambda: self.classifier.classify(data.prompt, self._classification_context(rid)),
        )

        if opts.skip_validation:
            validation = skipped_validation(data.prompt)
            trace.append(StageRecord(PipelineStage.VALIDATION, StageStatus.SKIPPED, 0, "Validation skipped by request"))
        else:
            def describe_validation(v: ValidationResult) -> Tuple[StageStatus, Optional[str]]:
                if v.is_valid:
                    return StageStatus.SUCCESS, None
                return StageStatus.WARNING, f"Quality score: {v.quality_score:.2f}"

            validation = self._run_stage(
                trace, rid, PipelineStage.VALIDATION,
                lambda: self.validator.validate(data.prompt),
                describe_validation,
            )
            if not validation.is_valid:
                warnings.extend(i.description for i in validation.issues)

        context = self._run_stage(
            trace, rid, PipelineStage.CONTEXT_ANALYSIS,
            lambda: self.context_analyzer.analyze(data.prompt, rid),
        )

        if opts.skip_ambiguity_resolution:
            ambiguity = skipped_ambiguity()
            trace.append(StageRecord(
                PipelineStage.AMBIGUITY_RESOLUTION, StageStatus.SKIPPED, 0, "Ambiguity resolution skipped by request",
            ))
        else:
            def describe_ambiguity(a: AmbiguityResult) -> Tuple[StageStatus, Optional[str]]:
                if a.has_ambiguity:
                    return StageStatus.WARNING, f"{len(a.ambiguities)} ambiguities detected"
                return StageStatus.SUCCESS, None

            ambiguity = self._run_stage(
                trace, rid, PipelineStage.AMBIGUITY_RESOLUTION,
                lambda: self.ambiguity.resolve(data.prompt, context),
                describe_ambiguity,
            )
            if ambiguity.has_ambiguity:
                clarifications.extend(q.question for q in ambiguity.questions)

        requirements = self._run_stage(
            trace, rid, PipelineStage.REQUIREMENTS_EXTRACTION,
            lambda: self.requirements.extract(data.prompt, parse, classification),
            lambda r: (StageStatus.SUCCESS, f"{r.total_requirements} requirements extracted"),
        )

        conversation = None
        if opts.conversation_mode:
            conversation = self._run_stage(
                trace, rid, PipelineStage.CONVERSATION,
                lambda: self.conversation.process_turn(rid, data.prompt),
            )
        else:
            self.sessions.add_entry(rid, ContextEntryType.USER_INPUT, data.prompt)
            trace.append(StageRecord(PipelineStage.CONVERSATION, StageStatus.SKIPPED, 0))

        entry = self._run_stage(trace, rid, PipelineStage.HISTORY, lambda: self.history.add_entry(
            session_id=rid,
            prompt=data.prompt,
            user_id=data.user_id,
            intent=classification.primary.intent.value,
            topics=[conversation.topic] if conversation else [],
            language=parse.language,
            quality=validation.quality_score,
            validation={"is_valid": validation.is_valid, "issues": len(validation.issues)},
        ))

        ready = (
            validation.is_valid
            and not ambiguity.requires_clarification
            and requirements.total_requirements > 0
            and requirements.confidence > READY_CONFIDENCE
        )

        result = ProcessingResult(
            success=True,
            prompt=data.prompt,
            parse=parse,
            classification=classification,
            validation=validation,
            requirements=requirements,
            context=context,
            ambiguity=ambiguity,
            conversation=conversation,
            ready=ready,
            clarifications_needed=clarifications,
            pipeline=trace,
            history_entry_id=entry.id,
            processing_time=_elapsed_ms(started),
            warnings=warnings,
        )
        log.info("Prompt processed, ready=%s", ready, extra={"request_id": rid, "stage": "-"})
        return result

    def _classification_context(self, session_id: str) -> Optional[dict[str, Any]]:
        previous = self.history.get_by_session(session_id)
        if previous and previous[-1].intent:
            return {"previous_intent": previous[-1].intent}
        return None
