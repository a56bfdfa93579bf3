"""Error types shared by the engines, the prompt pipeline and the HTTP layer.

Two policies live side by side:

* engine-level calls are partial-failure tolerant and hand back a ``Result``
  that carries either a value or a ``Recoverable`` error description;
* orchestrator-level calls are fail-fast and raise an ``OrusError`` subclass
  (``PipelineStageError`` for the prompt pipeline) that the caller must catch.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

LOCALIZED_MESSAGES: Dict[str, Dict[str, str]] = {
    "GENERATION_FAILED": {
        "en": "Failed to generate code",
        "pt_BR": "Falha ao gerar código",
        "es": "Error al generar código",
    },
    "GENERATION_NOT_FOUND": {
        "en": "Generation not found",
        "pt_BR": "Geração não encontrada",
        "es": "Generación no encontrada",
    },
    "PROMPT_PROCESSING_FAILED": {
        "en": "Failed to process prompt",
        "pt_BR": "Falha ao processar prompt",
        "es": "Error al procesar prompt",
    },
    "PROMPT_ANALYSIS_FAILED": {
        "en": "Failed to analyze prompt",
        "pt_BR": "Falha ao analisar prompt",
        "es": "Error al analizar prompt",
    },
    "PROJECT_NOT_FOUND": {
        "en": "Project not found",
        "pt_BR": "Projeto não encontrado",
        "es": "Proyecto no encontrado",
    },
    "VALIDATION_ERROR": {
        "en": "Invalid request",
        "pt_BR": "Requisição inválida",
        "es": "Solicitud inválida",
    },
    "INTERNAL_ERROR": {
        "en": "Internal server error",
        "pt_BR": "Erro interno do servidor",
        "es": "Error interno del servidor",
    },
}


def localized(code: str) -> Dict[str, str]:
    return dict(LOCALIZED_MESSAGES.get(code, LOCALIZED_MESSAGES["INTERNAL_ERROR"]))


def describe_exception(exc: BaseException) -> Dict[str, str]:
    return {"type": type(exc).__name__, "message": str(exc)}


@dataclass(frozen=True)
class Recoverable:
    """A failure that was caught and turned into data."""
    code: str
    message: Dict[str, str]
    details: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_exception(code: str, exc: BaseException, **details: Any) -> "Recoverable":
        return Recoverable(code=code, message=localized(code), details={"error": describe_exception(exc), **details})

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": dict(self.message), "details": dict(self.details)}


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[Recoverable] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @staticmethod
    def success(value: T) -> "Result[T]":
        return Result(value=value)

    @staticmethod
    def failure(error: Recoverable) -> "Result[T]":
        return Result(error=error)


class OrusError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}

    def to_envelope(self) -> Dict[str, Any]:
        return error_envelope(self.code, self.details)


class PipelineStageError(OrusError):
    """Raised by the prompt pipeline after the failing stage was recorded."""
    code = "PROMPT_PROCESSING_FAILED"

    def __init__(self, stage: str, original: BaseException):
        super().__init__(f"Stage '{stage}' failed: {original}", {"stage": stage, "error": describe_exception(original)})
        self.stage = stage
        self.original = original


class GenerationFailedError(OrusError):
    code = "GENERATION_FAILED"

    def __init__(self, error: Recoverable):
        super().__init__(error.message.get("en", error.code), error.details)
        self.code = error.code


class NotFoundError(OrusError):
    status_code = 404

    def __init__(self, code: str, resource_id: str):
        super().__init__(f"{code}: {resource_id}", {"id": resource_id})
        self.code = code


def error_envelope(code: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "success": False,
        "error": {
            "code": code,
            "message": localized(code),
            "details": details or {},
        },
    }
