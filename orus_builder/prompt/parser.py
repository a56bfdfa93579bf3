"""Keyword and regex based parsing of a user prompt."""
import logging
import re
import time
from typing import Dict, List, Optional, Tuple
from orus_builder.prompt.types import (
    Entity,
    EntityType,
    ParseResult,
    POSTag,
    Sentence,
    Sentiment,
    Token,
    TokenType,
)

log = logging.getLogger(__name__)

TOKEN_RE = re.compile(r"(\w+|[^\w\s])")
SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")

PATTERN_ENTITIES = {
    "email": re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
    "url": re.compile(r"https?://[^\s]+"),
    "date": re.compile(r"\b\d{1,2}/\d{1,2}/\d{4}\b"),
    "money": re.compile(r"\$\d+(?:,\d{3})*(?:\.\d{2})?"),
}

KEYWORD_ENTITIES: Dict[EntityType, List[str]] = {
    EntityType.TECHNOLOGY: [
        "react", "vue", "angular", "next.js", "node", "express", "typescript",
        "javascript", "tailwind", "mongodb", "postgres", "mysql", "graphql", "docker",
    ],
    EntityType.FEATURE: [
        "login", "signup", "authentication", "search", "checkout", "payment",
        "notifications", "chat", "upload", "filter", "export", "cart",
    ],
    EntityType.COMPONENT: [
        "dashboard", "navbar", "sidebar", "header", "footer", "form", "table",
        "chart", "card", "modal", "landing page", "profile",
    ],
}

COMMON_WORDS = {
    "en": ["the", "a", "an", "is", "are", "was", "were", "create", "make"],
    "pt": ["o", "um", "uma", "é", "são", "foi", "criar", "fazer", "com"],
    "es": ["el", "la", "un", "una", "es", "son", "fue", "crear", "hacer"],
}

POS_WORDS = {
    "verb": {"create", "generate", "build", "make"},
    "noun": {"app", "website", "system", "component"},
    "adjective": {"beautiful", "fast", "modern", "responsive"},
}


def token_type(text: str) -> TokenType:
    if re.fullmatch(r"\d+", text):
        return TokenType.NUMBER
    if re.fullmatch(r"[a-zA-Z]+", text):
        return TokenType.WORD
    if re.fullmatch(r"[.,!?;:]", text):
        return TokenType.PUNCTUATION
    return TokenType.SYMBOL


class NaturalLanguageParser:
    def __init__(self):
        self._cache: Dict[Tuple, ParseResult] = {}

    def parse(
        self,
        text: str,
        language: Optional[str] = None,
        enable_pos: bool = False,
        enable_entities: bool = True,
        enable_sentiment: bool = False,
    ) -> ParseResult:
        key = (text, language, enable_pos, enable_entities, enable_sentiment)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        start = time.perf_counter()
        tokens = self.tokenize(text)
        result = ParseResult(
            original=text,
            language=language or self.detect_language(text),
            tokens=tokens,
            sentences=self.segment_sentences(text, tokens),
            entities=self.recognize_entities(text) if enable_entities else [],
            pos_tags=[POSTag(t.text, self.guess_pos(t.text), 0.7) for t in tokens] if enable_pos else None,
            sentiment=Sentiment(label="neutral", score=0.0, confidence=0.5) if enable_sentiment else None,
        )
        result.parse_time = int((time.perf_counter() - start) * 1000)
        self._cache[key] = result

        log.debug("Parsed prompt: %d tokens, %d entities", len(result.tokens), len(result.entities))
        return result

    def tokenize(self, text: str) -> List[Token]:
        return [
            Token(text=m.group(0), index=i, start=m.start(), end=m.end(), type=token_type(m.group(0)))
            for i, m in enumerate(TOKEN_RE.finditer(text))
        ]

    def segment_sentences(self, text: str, tokens: List[Token]) -> List[Sentence]:
        sentences = []
        for i, m in enumerate(SENTENCE_RE.finditer(text)):
            start, end = m.start(), m.end()
            sentences.append(Sentence(
                text=m.group(0).strip(),
                index=i,
                start=start,
                end=end,
                tokens=[t for t in tokens if t.start >= start and t.end <= end],
            ))
        return sentences

    def recognize_entities(self, text: str) -> List[Entity]:
        entities = []
        lower = text.lower()
        for entity_type, keywords in KEYWORD_ENTITIES.items():
            for keyword in keywords:
                for m in re.finditer(rf"\b{re.escape(keyword)}\b", lower):
                    entities.append(Entity(
                        text=text[m.start():m.end()],
                        type=entity_type,
                        start=m.start(),
                        end=m.end(),
                        confidence=0.85,
                    ))
        for regex in PATTERN_ENTITIES.values():
            for m in regex.finditer(text):
                entities.append(Entity(text=m.group(0), type=EntityType.CUSTOM, start=m.start(), end=m.end(), confidence=0.8))
        entities.sort(key=lambda e: e.start)
        return entities

    def detect_language(self, text: str) -> str:
        words = set(re.findall(r"\w+", text.lower()))
        scores = {lang: sum(1 for w in common if w in words) for lang, common in COMMON_WORDS.items()}
        # max() keeps the first language on ties, so English wins by default
        return max(scores, key=lambda lang: scores[lang])

    def guess_pos(self, word: str) -> str:
        lower = word.lower()
        for tag, words in POS_WORDS.items():
            if lower in words:
                return tag
        return "noun"
