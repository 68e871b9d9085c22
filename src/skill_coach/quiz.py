"""Adaptive question selection."""
import random

import structlog

from skill_coach.catalog import Catalog
from skill_coach.models import Question, QuizOutcome
from skill_coach.ratings import RatingEngine

logger = structlog.get_logger(__name__)

RECENT_QUESTIONS_LIMIT = 10
ROLE_FOCUS_THRESHOLD = 7.0


def target_difficulty(mean: float) -> int:
    if mean < 4:
        return 1
    elif mean < 7:
        return 2
    return 3


def grade_answer(question: Question, user_answer: int, time_spent: float = 0, confidence: int | None = None) -> QuizOutcome:
    return QuizOutcome(
        question_id=question.id,
        correct=user_answer == question.answer,
        time_spent=time_spent,
        confidence=confidence,
    )


class RecentQuestionWindow:
    """Ordered ids of recently shown questions, oldest first."""

    def __init__(self, limit: int = RECENT_QUESTIONS_LIMIT):
        self.limit = limit
        self._ids = []

    def __contains__(self, question_id: str) -> bool:
        return question_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self):
        return iter(self._ids)

    def add(self, question_id: str) -> None:
        if question_id in self._ids:
            self._ids.remove(question_id)
        self._ids.append(question_id)
        if len(self._ids) > self.limit:
            self._ids = self._ids[-self.limit:]

    def shrink(self, keep: int) -> None:
        """Keep only the ``keep`` most recent ids."""
        self._ids = self._ids[-keep:] if keep > 0 else []

    def clear(self) -> None:
        self._ids = []


class QuestionSelector:
    def __init__(
        self,
        catalog: Catalog,
        ratings: RatingEngine,
        rng: random.Random | None = None,
        recent_limit: int = RECENT_QUESTIONS_LIMIT,
    ):
        self.catalog = catalog
        self.ratings = ratings
        self.rng = rng or random.Random()
        self.recent = RecentQuestionWindow(recent_limit)

    def questions_for(
        self,
        role: str,
        domain: str | None = None,
        difficulty: int | None = None,
        fresh_only: bool = False,
    ) -> list[Question]:
        return [
            q for q in self.catalog.questions
            if q.role == role
            and (domain is None or q.domain == domain)
            and (difficulty is None or q.difficulty == difficulty)
            and not (fresh_only and q.id in self.recent)
        ]

    def _shrink_window(self, role: str, domain: str) -> None:
        # Small pools would otherwise be starved by the full-size window
        pool = len(self.questions_for(role, domain))
        if pool <= 3:
            self.recent.shrink(1)
        elif pool <= 5:
            self.recent.shrink(2)

    def _resolve(self, role: str, domain: str, difficulty: int | None, role_fallback: bool) -> list[Question]:
        candidates = []
        if difficulty is not None:
            candidates = self.questions_for(role, domain, difficulty, fresh_only=True)
        if not candidates:
            candidates = self.questions_for(role, domain, fresh_only=True)
        if not candidates and role_fallback:
            candidates = self.questions_for(role, fresh_only=True)
        if not candidates:
            self._shrink_window(role, domain)
            candidates = self.questions_for(role, domain, difficulty, fresh_only=True)
        if not candidates:
            candidates = self.questions_for(role, domain)
        return candidates

    def _pick(self, candidates: list[Question]) -> Question | None:
        if not candidates:
            return None
        question = candidates[self.rng.randrange(len(candidates))]
        self.recent.add(question.id)
        return question

    def find_target(self, priority_order: list) -> tuple | None:
        """Weakest (role, domain, mean), scanning roles in priority order.

        Stops after the first role that holds the lowest rating so far when
        that rating is below the focus threshold. Ties keep the earlier pair.
        """
        taxonomy = self.catalog.taxonomy
        if taxonomy is None:
            return None
        target = None
        for role in priority_order:
            if role not in taxonomy.roles:
                continue
            for domain in taxonomy.domain_keys(role):
                mean = self.ratings.get_rating(role, domain).mean
                if target is None or mean < target[2]:
                    target = (role, domain, mean)
            if target is not None and target[0] == role and target[2] < ROLE_FOCUS_THRESHOLD:
                break
        return target

    def select_next(self, priority_order: list) -> Question | None:
        if not self.catalog.available:
            return None
        target = self.find_target(priority_order)
        if target is None:
            return None
        role, domain, mean = target
        question = self._pick(self._resolve(role, domain, target_difficulty(mean), role_fallback=True))
        if question is not None:
            logger.debug(
                "question_selected",
                mode="adaptive",
                question_id=question.id,
                role=role,
                domain=domain,
                target_difficulty=target_difficulty(mean),
            )
        return question

    def select_for_practice(self, role: str, domain: str | None = None) -> Question | None:
        if not self.catalog.available:
            return None
        if domain is None:
            candidates = self.questions_for(role, fresh_only=True) or self.questions_for(role)
        else:
            difficulty = target_difficulty(self.ratings.get_rating(role, domain).mean)
            candidates = self._resolve(role, domain, difficulty, role_fallback=False)
        question = self._pick(candidates)
        if question is not None:
            logger.debug("question_selected", mode="practice", question_id=question.id, role=role, domain=domain)
        return question
