"""Append-only log of answered questions."""
from datetime import datetime

import structlog

from skill_coach.db import HISTORY_KEY, KeyValueStore
from skill_coach.models import HistoryEntry, Question

logger = structlog.get_logger(__name__)

HISTORY_LIMIT = 500


class HistoryLog:
    """Most-recent-first list of HistoryEntry records, capped at HISTORY_LIMIT."""

    def __init__(self, store: KeyValueStore, limit: int = HISTORY_LIMIT):
        self.store = store
        self.limit = limit

    def entries(self) -> list:
        return [HistoryEntry.from_dict(e) for e in self.store.get(HISTORY_KEY, [])]

    def append(
        self,
        question: Question,
        user_answer: int,
        correct: bool,
        time_spent: float,
        confidence: int,
        timestamp: datetime,
    ) -> HistoryEntry:
        entry = HistoryEntry(
            id=f"{question.id}_{int(timestamp.timestamp() * 1000)}",
            question=question,
            user_answer=user_answer,
            correct=correct,
            time_spent=time_spent,
            confidence=confidence,
            timestamp=timestamp,
        )
        raw = self.store.get(HISTORY_KEY, [])
        raw.insert(0, entry.to_dict())
        if len(raw) > self.limit:
            logger.debug("history_trimmed", dropped=len(raw) - self.limit)
        self.store.set(HISTORY_KEY, raw[: self.limit])
        return entry

    def filtered(
        self,
        role: str | None = None,
        domain: str | None = None,
        correct: bool | None = None,
        limit: int | None = None,
    ) -> list:
        history = self.entries()
        if role:
            history = [e for e in history if e.question.role == role]
        if domain:
            history = [e for e in history if e.question.domain == domain]
        if correct is not None:
            history = [e for e in history if e.correct == correct]
        if limit:
            history = history[:limit]
        return history

    def clear(self) -> None:
        self.store.delete(HISTORY_KEY)
