from dataclasses import dataclass
from typing import Optional
from orus_builder.core.engine import PromptProcessor
from orus_builder.core.llm import GroqClient, LLMClient
from orus_builder.core.store import GenerationStore
from orus_builder.generators.codegen.generator import CognitiveGenerationEngine
from orus_builder.generators.codegen.analysis import ArchitectureAdvisor, PromptAnalyzer
from orus_builder.generators.codegen.domains import load_catalog
from orus_builder.prompt.ambiguity import AmbiguityResolver
from orus_builder.prompt.context import ContextAnalyzer, SessionContextStore
from orus_builder.prompt.conversation import ConversationManager
from orus_builder.prompt.history import PromptHistory
from orus_builder.prompt.intent import IntentClassifier
from orus_builder.prompt.parser import NaturalLanguageParser
from orus_builder.prompt.requirements import RequirementsExtractor
from orus_builder.prompt.validator import PromptValidator


@dataclass
class ServiceRegistry:
    """Service objects shared by the API and the workers, built once per process."""
    llm: LLMClient
    sessions: SessionContextStore
    history: PromptHistory
    processor: PromptProcessor
    store: GenerationStore
    generator: CognitiveGenerationEngine

    @staticmethod
    def default(llm: Optional[LLMClient] = None) -> "ServiceRegistry":
        llm = llm or GroqClient()
        catalog = load_catalog()
        sessions = SessionContextStore()
        history = PromptHistory()
        context_analyzer = ContextAnalyzer(sessions)
        store = GenerationStore()

        processor = PromptProcessor(
            parser=NaturalLanguageParser(),
            classifier=IntentClassifier(),
            validator=PromptValidator(),
            sessions=sessions,
            context_analyzer=context_analyzer,
            ambiguity=AmbiguityResolver(),
            requirements=RequirementsExtractor(),
            conversation=ConversationManager(sessions),
            history=history,
        )
        generator = CognitiveGenerationEngine(
            llm=llm,
            analyzer=PromptAnalyzer(llm, context_analyzer, catalog),
            advisor=ArchitectureAdvisor(catalog),
            store=store,
            catalog=catalog,
        )
        return ServiceRegistry(
            llm=llm,
            sessions=sessions,
            history=history,
            processor=processor,
            store=store,
            generator=generator,
        )
