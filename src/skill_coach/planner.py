"""Daily study plan generation and progress tracking."""
import random
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable

import structlog

from skill_coach.dashboard import round_half_up
from skill_coach.db import PLANS_KEY, KeyValueStore
from skill_coach.models import DailyPlan, StudyBlock
from skill_coach.ratings import RatingEngine
from skill_coach.review import get_weak_areas

logger = structlog.get_logger(__name__)

PLAN_RETENTION_DAYS = 30
SINGLE_BLOCK_THRESHOLD = 40
MAX_BLOCK_MINUTES = 30
MIN_BLOCK_MINUTES = 15
MAX_QUIZ_BLOCKS = 3
FOCUS_THRESHOLD = 7.0

PROJECT_IDEAS = {
    "embedded": [
        "Work on STM32/ESP32 driver implementation",
        "Build RTOS task with FreeRTOS",
        "Implement I2C/SPI communication protocol",
        "Device tree configuration practice",
        "Linux kernel module development",
    ],
    "swe": [
        "Implement classic DSA patterns with tests",
        "Build REST API with proper error handling",
        "Docker containerization practice",
        "SQL query optimization challenges",
        "System design documentation",
    ],
    "ml_dl": [
        "Computer vision pipeline with OpenCV",
        "PyTorch model training and evaluation",
        "Data preprocessing and feature engineering",
        "Model deployment with Docker",
        "Experiment tracking setup",
    ],
    "genai": [
        "LoRA fine-tuning implementation",
        "RAG system with vector database",
        "Prompt engineering experiments",
        "LLM evaluation metrics development",
        "GPU optimization for inference",
    ],
    "coding": [
        "Implement classic sorting algorithms (merge, quick, heap)",
        "Build data structures from scratch (BST, hash table, graph)",
        "Solve LeetCode problems focusing on weak algorithm types",
        "Create coding interview practice problems in C++/Python",
        "Build a memory management library in C",
        "Implement design patterns (singleton, factory, observer)",
        "Practice competitive programming problems",
        "Code review and refactor existing projects for best practices",
    ],
}
FALLBACK_IDEAS_ROLE = "embedded"

PLAN_SUGGESTIONS = {
    "2hours": {"hours": 2, "quiz_ratio": 0.5, "project_ratio": 0.5, "description": "60m quiz, 60m project"},
    "3hours": {"hours": 3, "quiz_ratio": 0.4, "project_ratio": 0.6, "description": "70m quiz, 110m project"},
    "4hours": {"hours": 4, "quiz_ratio": 0.4, "project_ratio": 0.6, "description": "95m quiz, 145m project"},
    "5hours": {"hours": 5, "quiz_ratio": 0.35, "project_ratio": 0.65, "description": "105m quiz, 195m project"},
}


@dataclass
class PlanAllocation:
    quiz_ratio: float = 0.5
    project_ratio: float = 0.5


class DailyPlanner:
    def __init__(
        self,
        ratings: RatingEngine,
        store: KeyValueStore,
        rng: random.Random | None = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.ratings = ratings
        self.store = store
        self.rng = rng or random.Random()
        self.now = now

    # ==================== Generation ====================

    def generate(
        self,
        available_hours: float,
        priority_order: list,
        allocation: PlanAllocation | None = None,
    ) -> DailyPlan:
        allocation = allocation or PlanAllocation()
        total_minutes = available_hours * 60
        # Ratios are applied independently; they need not sum to 1
        quiz_minutes = round_half_up(total_minutes * allocation.quiz_ratio)
        project_minutes = round_half_up(total_minutes * allocation.project_ratio)
        focus = self.determine_focus_role(priority_order)

        blocks = []
        if quiz_minutes > 0:
            blocks.extend(self._create_quiz_blocks(quiz_minutes, focus))
        if project_minutes > 0:
            blocks.append(self._create_project_block(project_minutes, focus))

        now = self.now()
        plan = DailyPlan(
            date=now.date(),
            total_hours=available_hours,
            blocks=blocks,
            focus=focus,
            created=now,
            last_updated=now,
        )
        logger.info(
            "plan_generated",
            date=plan.date.isoformat(),
            focus=focus,
            quiz_minutes=quiz_minutes,
            project_minutes=project_minutes,
            blocks=len(blocks),
        )
        return plan

    def determine_focus_role(self, priority_order: list) -> str:
        """First role in priority order to hold the lowest score, stopping below 7."""
        taxonomy = self.ratings.catalog.taxonomy
        if not priority_order:
            if taxonomy and taxonomy.roles:
                return next(iter(taxonomy.roles))
            return FALLBACK_IDEAS_ROLE
        focus = priority_order[0]
        lowest = None
        for role in priority_order:
            if taxonomy is not None and role not in taxonomy.roles:
                continue
            score = self.ratings.get_role_score(role)
            if lowest is None or score < lowest:
                lowest = score
                focus = role
                if score < FOCUS_THRESHOLD:
                    break
        return focus

    def _target_description(self, role: str, domain: str | None) -> str:
        taxonomy = self.ratings.catalog.taxonomy
        if taxonomy is None:
            return f"Target: {role} - {domain or 'general'}"
        domain_name = taxonomy.domain_name(role, domain) if domain else "General"
        return f"Target: {taxonomy.role_name(role)} - {domain_name}"

    def _create_quiz_blocks(self, total_minutes: int, focus: str) -> list[StudyBlock]:
        weak_areas = get_weak_areas(self.ratings, limit=3)
        blocks = []
        if total_minutes < SINGLE_BLOCK_THRESHOLD:
            target = next((a for a in weak_areas if a.role == focus), weak_areas[0] if weak_areas else None)
            role = target.role if target else focus
            domain = target.domain if target else None
            blocks.append(StudyBlock(
                id="quiz-1",
                kind="quiz",
                duration=total_minutes,
                title="Adaptive Quiz",
                description=self._target_description(role, domain),
                role=role,
                domain=domain,
            ))
            return blocks

        block_duration = min(MAX_BLOCK_MINUTES, total_minutes // 2)
        remaining = total_minutes
        # Leftover of MIN_BLOCK_MINUTES or less is dropped
        while remaining > MIN_BLOCK_MINUTES and len(blocks) < MAX_QUIZ_BLOCKS:
            duration = min(block_duration, remaining)
            target = weak_areas[len(blocks) % len(weak_areas)] if weak_areas else None
            role = target.role if target else focus
            domain = target.domain if target else None
            blocks.append(StudyBlock(
                id=f"quiz-{len(blocks) + 1}",
                kind="quiz",
                duration=duration,
                title=f"Quiz Block {len(blocks) + 1}",
                description=self._target_description(role, domain),
                role=role,
                domain=domain,
            ))
            remaining -= duration
        return blocks

    def _create_project_block(self, minutes: int, focus: str) -> StudyBlock:
        ideas = PROJECT_IDEAS.get(focus, PROJECT_IDEAS[FALLBACK_IDEAS_ROLE])
        return StudyBlock(
            id="project-1",
            kind="project",
            duration=minutes,
            title="Project Work",
            description=ideas[self.rng.randrange(len(ideas))],
            role=focus,
        )

    # ==================== Persistence ====================

    def get_plans(self) -> list[DailyPlan]:
        return [DailyPlan.from_dict(p) for p in self.store.get(PLANS_KEY, [])]

    def get_plan(self, plan_date: date) -> DailyPlan | None:
        return next((p for p in self.get_plans() if p.date == plan_date), None)

    def get_todays_plan(self) -> DailyPlan | None:
        return self.get_plan(self.now().date())

    def save_plan(self, plan: DailyPlan) -> None:
        """Store a plan, replacing any plan for the same date.

        Plans dated 30 or more days before today are dropped.
        """
        plans = [p for p in self.get_plans() if p.date != plan.date]
        plans.append(plan)
        cutoff = self.now().date() - timedelta(days=PLAN_RETENTION_DAYS)
        kept = [p for p in plans if p.date > cutoff]
        if len(kept) < len(plans):
            logger.debug("plans_pruned", dropped=len(plans) - len(kept))
        kept.sort(key=lambda p: p.date)
        self.store.set(PLANS_KEY, [p.to_dict() for p in kept])

    # ==================== Block Progress ====================

    def _update_block(self, plan_date: date, block_id: str, apply) -> None:
        plan = self.get_plan(plan_date)
        block = plan.find_block(block_id) if plan else None
        if block is None:
            logger.debug("block_not_found", date=plan_date.isoformat(), block_id=block_id)
            return
        apply(block)
        plan.last_updated = self.now()
        self.save_plan(plan)

    def start_block(self, plan_date: date, block_id: str) -> None:
        def apply(block):
            block.start_time = self.now()
        self._update_block(plan_date, block_id, apply)

    def complete_block(self, plan_date: date, block_id: str) -> None:
        def apply(block):
            block.completed = True
            block.end_time = self.now()
        self._update_block(plan_date, block_id, apply)

    def plan_suggestions(self) -> dict:
        return PLAN_SUGGESTIONS
