from __future__ import annotations
import logging
import httpx
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol
from orus_builder.core.config import settings

log = logging.getLogger(__name__)


class LLMError(Exception):
    """The chat-completion call failed or returned nothing usable."""


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ChatResponse:
    content: str
    model: str = ""
    usage: Dict[str, Any] = field(default_factory=dict)


class LLMClient(Protocol):
    async def chat(
        self,
        messages: List[ChatMessage],
        temperature: float = ...,
        max_tokens: int = ...,
    ) -> ChatResponse:
        ...


@dataclass
class GroqClient:
    """Client for Groq's OpenAI-compatible chat-completion endpoint."""
    api_key: Optional[str] = settings.groq_api_key
    model: str = settings.groq_model
    api_base: str = settings.groq_api_base
    timeout: float = settings.llm_timeout
    transport: Optional[httpx.AsyncBaseTransport] = None

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def chat(
        self,
        messages: List[ChatMessage],
        temperature: float = settings.llm_temperature,
        max_tokens: int = settings.llm_max_tokens,
    ) -> ChatResponse:
        if not self.api_key:
            raise LLMError("GROQ_API_KEY is not configured")

        url = f"{self.api_base}/chat/completions"
        payload = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.post(url, headers=self._headers(), json=payload)
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPError as e:
            log.warning("Chat completion request failed: %s", e)
            raise LLMError(f"Chat completion request failed: {e}") from e

        choices = data.get("choices") or []
        content = ""
        if choices:
            content = (choices[0].get("message") or {}).get("content") or ""
        if not content.strip():
            raise LLMError("AI provider returned empty response")

        return ChatResponse(content=content, model=data.get("model", self.model), usage=data.get("usage") or {})
