"""Wiring of the catalog, stores and engines into one object."""
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import structlog

from skill_coach.catalog import Catalog, CatalogError, load_catalog
from skill_coach.config import AppConfig
from skill_coach.dashboard import get_quiz_stats
from skill_coach.db import KeyValueStore
from skill_coach.history import HistoryLog
from skill_coach.models import QuizStats
from skill_coach.planner import DailyPlanner
from skill_coach.quiz import QuestionSelector
from skill_coach.ratings import RatingEngine, RatingStore
from skill_coach.review import get_weak_areas

logger = structlog.get_logger(__name__)


@dataclass
class CoachEngine:
    config: AppConfig
    catalog: Catalog
    store: KeyValueStore
    history: HistoryLog
    ratings: RatingEngine
    selector: QuestionSelector
    planner: DailyPlanner

    def weak_areas(self, limit: int = 5) -> list:
        return get_weak_areas(self.ratings, limit)

    def quiz_stats(self) -> QuizStats:
        return get_quiz_stats(self.history.entries())


def build_engine(
    config: AppConfig,
    catalog: Catalog | None = None,
    rng: random.Random | None = None,
    now: Callable[[], datetime] = datetime.now,
) -> CoachEngine:
    """Load the catalog and rehydrate persisted state.

    A catalog that fails to load is replaced by an empty one so that every
    operation falls back to its default answer.
    """
    if catalog is None:
        try:
            catalog = load_catalog(config.questions_path, config.taxonomy_path)
        except CatalogError as e:
            logger.warning("catalog_unavailable", error=str(e))
            catalog = Catalog.empty()
    rng = rng or random.Random()
    store = KeyValueStore(config.db_path)
    history = HistoryLog(store)
    ratings = RatingEngine(catalog, RatingStore(store), history, now=now)
    selector = QuestionSelector(catalog, ratings, rng=rng, recent_limit=config.recent_window)
    planner = DailyPlanner(ratings, store, rng=rng, now=now)
    return CoachEngine(
        config=config,
        catalog=catalog,
        store=store,
        history=history,
        ratings=ratings,
        selector=selector,
        planner=planner,
    )
