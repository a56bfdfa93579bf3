import logging
from typing import Dict, Optional
from orus_builder.generators.codegen.types import GenerationResult

log = logging.getLogger(__name__)


class GenerationStore:
    """In-process store of generation results keyed by request id.

    Results live for the lifetime of the process; regenerated projects are
    persisted to the database instead.
    """

    def __init__(self):
        self._results: Dict[str, GenerationResult] = {}

    def save(self, result: GenerationResult) -> None:
        self._results[result.request_id] = result
        log.debug("Stored generation %s", result.request_id)

    def get(self, request_id: str) -> Optional[GenerationResult]:
        return self._results.get(request_id)

    def __len__(self) -> int:
        return len(self._results)
