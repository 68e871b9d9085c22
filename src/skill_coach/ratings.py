"""Proficiency ratings per role and domain."""
from datetime import datetime
from typing import Callable

import structlog

from skill_coach.catalog import Catalog
from skill_coach.db import RATINGS_KEY, KeyValueStore
from skill_coach.history import HistoryLog
from skill_coach.models import DomainRating, ProgressStats, Question, QuizOutcome

logger = structlog.get_logger(__name__)

DEFAULT_MEAN = 5.0
MIN_RATING = 1.0
MAX_RATING = 10.0
LEARNING_RATE = 0.2
DIFFICULTY_TARGETS = {1: 3, 2: 6, 3: 8}
EXPORT_VERSION = "1.0"
DEFAULT_CONFIDENCE = 3


def smoothed_update(mean: float, difficulty: int, correct: bool, alpha: float = LEARNING_RATE) -> float:
    """Move a rating toward a difficulty-anchored target.

    Args:
        mean: Current rating, 1-10
        difficulty: Question tier (1=Basic, 2=Intermediate, 3=Advanced)
        correct: Whether the answer was correct
        alpha: Smoothing weight given to the new result

    Returns:
        The new rating, clamped to [1, 10]. The step is never larger than
        alpha * 9.
    """
    # The +/-1 adjustment is the same at every tier; the target carries the difficulty
    target = DIFFICULTY_TARGETS[difficulty] + (1 if correct else -1)
    return max(MIN_RATING, min(MAX_RATING, mean + alpha * (target - mean)))


class RatingStore:
    """Rehydrates and persists the role -> domain -> DomainRating snapshot."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self) -> dict:
        raw = self.store.get(RATINGS_KEY, {})
        return {
            role: {domain: DomainRating.from_dict(r) for domain, r in domains.items()}
            for role, domains in raw.items()
        }

    def save(self, ratings: dict) -> None:
        self.store.set(RATINGS_KEY, {
            role: {domain: r.to_dict() for domain, r in domains.items()}
            for role, domains in ratings.items()
        })


class RatingEngine:
    def __init__(
        self,
        catalog: Catalog,
        rating_store: RatingStore,
        history: HistoryLog,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.catalog = catalog
        self.rating_store = rating_store
        self.history = history
        self.now = now
        self.ratings = rating_store.load()

    def get_rating(self, role: str, domain: str) -> DomainRating:
        """Current rating, lazily initialised in memory for unseen domains."""
        domains = self.ratings.setdefault(role, {})
        if domain not in domains:
            domains[domain] = DomainRating(mean=DEFAULT_MEAN, count=0, last_updated=self.now())
        return domains[domain]

    def get_role_score(self, role: str) -> float:
        taxonomy = self.catalog.taxonomy
        if taxonomy is None:
            return DEFAULT_MEAN
        domains = taxonomy.domain_keys(role)
        if not domains:
            return DEFAULT_MEAN
        return sum(self.get_rating(role, d).mean for d in domains) / len(domains)

    def update_rating(
        self,
        outcome: QuizOutcome,
        question: Question,
        user_answer: int,
        confidence: int | None = None,
    ) -> DomainRating:
        if confidence is None:
            confidence = outcome.confidence if outcome.confidence is not None else DEFAULT_CONFIDENCE
        current = self.get_rating(question.role, question.domain)
        updated = DomainRating(
            mean=smoothed_update(current.mean, question.difficulty, outcome.correct),
            count=current.count + 1,
            last_updated=self.now(),
        )
        self.ratings[question.role][question.domain] = updated
        logger.info(
            "rating_updated",
            role=question.role,
            domain=question.domain,
            correct=outcome.correct,
            old_mean=round(current.mean, 3),
            new_mean=round(updated.mean, 3),
        )
        self.rating_store.save(self.ratings)
        self.history.append(
            question,
            user_answer,
            outcome.correct,
            outcome.time_spent,
            confidence,
            updated.last_updated,
        )
        return updated

    def progress_stats(self) -> ProgressStats | None:
        taxonomy = self.catalog.taxonomy
        if taxonomy is None:
            return None
        by_role = {role: self.get_role_score(role) for role in taxonomy.roles}
        answered = sum(
            self.get_rating(role, domain).count
            for role in taxonomy.roles
            for domain in taxonomy.domain_keys(role)
        )
        overall = sum(by_role.values()) / len(by_role) if by_role else DEFAULT_MEAN
        return ProgressStats(
            overall=overall,
            by_role=by_role,
            total_questions=len(self.catalog.questions),
            questions_answered=answered,
        )

    def export_ratings(self) -> dict:
        return {
            "ratings": {
                role: {domain: r.to_dict() for domain, r in domains.items()}
                for role, domains in self.ratings.items()
            },
            "export_date": self.now().isoformat(),
            "version": EXPORT_VERSION,
        }

    def import_ratings(self, data: dict) -> bool:
        """Replace all ratings from an export document. Returns False if rejected."""
        if (
            not isinstance(data, dict)
            or not isinstance(data.get("ratings"), dict)
            or not data.get("version")
        ):
            logger.warning("ratings_import_rejected")
            return False
        self.ratings = {
            role: {domain: DomainRating.from_dict(r) for domain, r in domains.items()}
            for role, domains in data["ratings"].items()
        }
        self.rating_store.save(self.ratings)
        logger.info("ratings_imported", roles=len(self.ratings))
        return True
