import random
from datetime import datetime, timedelta

import pytest

from skill_coach.catalog import Catalog, parse_questions, parse_taxonomy
from skill_coach.config import AppConfig
from skill_coach.engine import build_engine

TAXONOMY = {
    "roles": {
        "swe": {
            "name": "Software Engineering",
            "priority": 1,
            "domains": {
                "databases": {"name": "Databases", "description": "SQL and indexing"},
                "testing": {"name": "Testing", "description": "Unit tests", "skills": ["mocking"]},
            },
        },
        "coding": {
            "name": "Coding Practice",
            "priority": 2,
            "domains": {
                "algorithms": {"name": "Algorithms", "description": "Sorting and searching"},
            },
        },
    }
}


def make_question(qid, role, domain, difficulty, answer=0):
    return {
        "id": qid,
        "role": role,
        "domain": domain,
        "difficulty": difficulty,
        "question": f"Question {qid}?",
        "options": ["A", "B", "C", "D"],
        "answer": answer,
        "explanation": f"Because {qid}.",
    }


QUESTIONS = (
    [make_question(f"db{d}{i}", "swe", "databases", d) for d in (1, 2, 3) for i in (1, 2)]
    + [make_question(f"test{i}", "swe", "testing", 2) for i in (1, 2, 3)]
    + [make_question(f"alg{d}", "coding", "algorithms", d) for d in (1, 2, 3)]
)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start=datetime(2024, 3, 15, 9, 0)):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_coach.db")
    return db_path


@pytest.fixture
def catalog():
    taxonomy = parse_taxonomy(TAXONOMY)
    return Catalog(questions=parse_questions(QUESTIONS, taxonomy), taxonomy=taxonomy)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config(tmp_db):
    return AppConfig(db_path=tmp_db, priorities=["swe", "coding"])


@pytest.fixture
def engine(config, catalog, clock):
    return build_engine(config, catalog=catalog, rng=random.Random(42), now=clock)
