"""In-memory prompt history with search, analytics and JSON export/import."""
import json
import logging
from dataclasses import asdict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from orus_builder.core.config import settings
from orus_builder.prompt.types import HistoryAnalytics, HistoryEntry, HistoryQuery, HistoryResult

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _entry_to_dict(entry: HistoryEntry) -> Dict[str, Any]:
    data = asdict(entry)
    data["timestamp"] = entry.timestamp.isoformat()
    return data


class PromptHistory:
    def __init__(self, max_size: int = settings.history_max_size, retention_days: int = settings.history_retention_days):
        self.max_size = max_size
        self.retention_days = retention_days
        self._entries: List[HistoryEntry] = []
        self._counter = 0

    def __len__(self) -> int:
        return len(self._entries)

    def add_entry(
        self,
        session_id: str,
        prompt: str,
        user_id: Optional[str] = None,
        intent: Optional[str] = None,
        topics: Optional[List[str]] = None,
        language: str = "en",
        quality: Optional[float] = None,
        validation: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
    ) -> HistoryEntry:
        entry = HistoryEntry(
            id=self._next_id(),
            session_id=session_id,
            prompt=prompt,
            timestamp=timestamp or _utcnow(),
            user_id=user_id,
            intent=intent,
            topics=list(topics or []),
            language=language,
            quality=quality,
            validation=validation,
        )
        self._entries.append(entry)
        log.debug("History entry %s added for session %s", entry.id, session_id)

        if len(self._entries) > self.max_size:
            self._cleanup()
        return entry

    def update_result(self, entry_id: str, result: HistoryResult) -> bool:
        entry = self.get_entry(entry_id)
        if entry is None:
            return False
        entry.result = result
        return True

    def get_entry(self, entry_id: str) -> Optional[HistoryEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def search(self, query: HistoryQuery) -> List[HistoryEntry]:
        results = list(self._entries)
        if query.session_id:
            results = [e for e in results if e.session_id == query.session_id]
        if query.user_id:
            results = [e for e in results if e.user_id == query.user_id]
        if query.keywords:
            keywords = [k.lower() for k in query.keywords]
            results = [e for e in results if any(k in e.prompt.lower() for k in keywords)]
        if query.topics:
            results = [e for e in results if any(t in query.topics for t in e.topics)]
        if query.date_from:
            results = [e for e in results if e.timestamp >= query.date_from]
        if query.date_to:
            results = [e for e in results if e.timestamp <= query.date_to]
        if query.min_quality is not None:
            results = [e for e in results if e.quality is not None and e.quality >= query.min_quality]

        results.sort(key=lambda e: e.timestamp, reverse=True)
        if query.limit:
            results = results[:query.limit]
        return results

    def get_recent(self, limit: int = 10) -> List[HistoryEntry]:
        return sorted(self._entries, key=lambda e: e.timestamp, reverse=True)[:limit]

    def get_by_session(self, session_id: str) -> List[HistoryEntry]:
        return sorted((e for e in self._entries if e.session_id == session_id), key=lambda e: e.timestamp)

    def analytics(self) -> HistoryAnalytics:
        if not self._entries:
            return HistoryAnalytics()

        qualities = [e.quality for e in self._entries if e.quality is not None]
        with_result = [e for e in self._entries if e.result is not None]

        topic_counts: Dict[str, int] = {}
        time_distribution: Dict[str, int] = {}
        for e in self._entries:
            for topic in e.topics:
                topic_counts[topic] = topic_counts.get(topic, 0) + 1
            key = f"{e.timestamp.hour}:00"
            time_distribution[key] = time_distribution.get(key, 0) + 1

        top_topics = sorted(topic_counts.items(), key=lambda kv: kv[1], reverse=True)[:10]

        return HistoryAnalytics(
            total_prompts=len(self._entries),
            unique_users=len({e.user_id for e in self._entries if e.user_id}),
            unique_sessions=len({e.session_id for e in self._entries}),
            average_quality=sum(qualities) / len(qualities) if qualities else 0.0,
            top_topics=[{"topic": t, "count": c} for t, c in top_topics],
            success_rate=sum(1 for e in with_result if e.result.success) / len(with_result) if with_result else 0.0,
            time_distribution=time_distribution,
        )

    def export(self, query: Optional[HistoryQuery] = None) -> str:
        entries = self.search(query) if query else self._entries
        return json.dumps([_entry_to_dict(e) for e in entries], indent=2)

    def import_entries(self, payload: str) -> int:
        """Append exported entries under fresh ids.

        Returns the number of entries imported, or 0 when the payload
        cannot be read.
        """
        try:
            raw = json.loads(payload)
            entries = []
            for item in raw:
                result = item.get("result")
                entries.append(HistoryEntry(
                    id=self._next_id(),
                    session_id=item["session_id"],
                    prompt=item["prompt"],
                    timestamp=datetime.fromisoformat(item["timestamp"]),
                    user_id=item.get("user_id"),
                    intent=item.get("intent"),
                    topics=list(item.get("topics") or []),
                    language=item.get("language", "en"),
                    quality=item.get("quality"),
                    validation=item.get("validation"),
                    result=HistoryResult(**result) if result else None,
                ))
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            log.warning("Failed to import history: %s", e)
            return 0

        self._entries.extend(entries)
        log.info("Imported %d history entries", len(entries))
        return len(entries)

    def clear_history(self, session_id: Optional[str] = None, user_id: Optional[str] = None) -> int:
        before = len(self._entries)
        if session_id:
            self._entries = [e for e in self._entries if e.session_id != session_id]
        elif user_id:
            self._entries = [e for e in self._entries if e.user_id != user_id]
        else:
            self._entries = []
        removed = before - len(self._entries)
        log.info("Cleared %d history entries", removed)
        return removed

    def _cleanup(self) -> None:
        cutoff = _utcnow() - timedelta(days=self.retention_days)
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.timestamp > cutoff]
        # still over the cap: drop the oldest
        if len(self._entries) > self.max_size:
            self._entries.sort(key=lambda e: e.timestamp)
            self._entries = self._entries[-self.max_size:]
        removed = before - len(self._entries)
        if removed:
            log.info("Cleaned up %d old history entries", removed)

    def _next_id(self) -> str:
        entry_id = f"hist-{self._counter:06d}"
        self._counter += 1
        return entry_id
