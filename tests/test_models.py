"""Tests for data model classes."""
from datetime import date, datetime

import pytest

from skill_coach.models import (
    DailyPlan, DomainRating, HistoryEntry, Question, QuizStats, StudyBlock, Taxonomy,
)
from conftest import TAXONOMY, make_question
from skill_coach.catalog import parse_taxonomy


def test_domain_rating_defaults():
    r = DomainRating()
    assert r.mean == 5.0
    assert r.count == 0
    assert r.last_updated is None


def test_domain_rating_dict_keys():
    r = DomainRating(mean=6.2, count=3, last_updated=datetime(2024, 1, 2, 3, 4))
    assert r.to_dict() == {"mean": 6.2, "count": 3, "last_updated": "2024-01-02T03:04:00"}
    assert DomainRating.from_dict(r.to_dict()) == r


def test_question_is_frozen():
    q = Question.from_dict(make_question("q1", "swe", "databases", 2, answer=3))
    assert q.answer == 3
    assert q.options == ("A", "B", "C", "D")
    assert q.difficulty_label == "Intermediate"
    with pytest.raises(AttributeError):
        q.answer = 0


def test_question_dict_uses_catalog_field_names():
    raw = make_question("q1", "swe", "databases", 1)
    assert Question.from_dict(raw).to_dict() == raw


def test_history_entry_keeps_full_question():
    q = Question.from_dict(make_question("q1", "swe", "databases", 1))
    entry = HistoryEntry(
        id="q1_1", question=q, user_answer=2, correct=False,
        time_spent=12, confidence=4, timestamp=datetime(2024, 5, 1, 8, 30),
    )
    restored = HistoryEntry.from_dict(entry.to_dict())
    assert restored == entry
    assert restored.question.prompt == "Question q1?"


def test_study_block_defaults():
    b = StudyBlock(id="quiz-1", kind="quiz", duration=30, title="Quiz Block 1")
    assert b.completed is False
    assert b.role is None
    assert b.domain is None
    assert b.start_time is None
    assert b.end_time is None


def test_daily_plan_minutes_and_lookup():
    now = datetime(2024, 3, 15, 9, 0)
    plan = DailyPlan(
        date=date(2024, 3, 15), total_hours=1, focus="swe", created=now, last_updated=now,
        blocks=[
            StudyBlock(id="quiz-1", kind="quiz", duration=25, title="Adaptive Quiz", completed=True),
            StudyBlock(id="project-1", kind="project", duration=35, title="Project Work"),
        ],
    )
    assert plan.total_minutes == 60
    assert plan.completed_minutes == 25
    assert plan.find_block("project-1").kind == "project"
    assert plan.find_block("missing") is None
    assert DailyPlan.from_dict(plan.to_dict()) == plan


def test_taxonomy_display_names():
    taxonomy = parse_taxonomy(TAXONOMY)
    assert taxonomy.role_name("swe") == "Software Engineering"
    assert taxonomy.domain_name("swe", "databases") == "Databases"
    assert taxonomy.role_name("unknown") == "unknown"
    assert taxonomy.domain_name("swe", "query_tuning") == "Query Tuning"
    assert Taxonomy().domain_keys("swe") == []


def test_quiz_stats_defaults_are_zero():
    stats = QuizStats()
    assert stats.total_questions == 0
    assert stats.accuracy == 0
    assert stats.average_confidence == 0.0
    assert stats.streak_count == 0
