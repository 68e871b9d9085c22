import random

import pytest

from skill_coach.catalog import Catalog
from skill_coach.db import RATINGS_KEY, KeyValueStore
from skill_coach.history import HistoryLog
from skill_coach.models import Question, QuizOutcome
from skill_coach.ratings import RatingEngine, RatingStore, smoothed_update
from conftest import make_question


def question(qid="db21", difficulty=2, role="swe", domain="databases"):
    return Question.from_dict(make_question(qid, role, domain, difficulty))


def answer(engine, q, correct, **kwargs):
    return engine.ratings.update_rating(QuizOutcome(q.id, correct, time_spent=10), q, 0 if correct else 1, **kwargs)


def test_smoothed_update_correct_intermediate():
    # target = 6 + 1 = 7; 5 + 0.2 * 2 = 5.4
    assert smoothed_update(5.0, 2, True) == pytest.approx(5.4)


def test_smoothed_update_incorrect_basic():
    # target = 3 - 1 = 2; 5 + 0.2 * -3 = 4.4
    assert smoothed_update(5.0, 1, False) == pytest.approx(4.4)


def test_smoothed_update_adjustment_is_constant_across_tiers():
    for difficulty, base in ((1, 3), (2, 6), (3, 8)):
        up = smoothed_update(base, difficulty, True)
        down = smoothed_update(base, difficulty, False)
        assert up - base == pytest.approx(0.2)
        assert base - down == pytest.approx(0.2)


def test_smoothed_update_clamped():
    assert smoothed_update(1.0, 1, False) >= 1.0
    assert smoothed_update(10.0, 3, True) <= 10.0


def test_mean_stays_in_bounds_for_random_sequences():
    rng = random.Random(7)
    for _ in range(50):
        mean = rng.uniform(1, 10)
        for _ in range(100):
            new = smoothed_update(mean, rng.choice((1, 2, 3)), rng.random() < 0.5)
            assert 1.0 <= new <= 10.0
            assert abs(new - mean) <= 0.2 * 9 + 1e-9
            mean = new


def test_get_rating_lazily_initialises(engine):
    r = engine.ratings.get_rating("swe", "databases")
    assert r.mean == 5.0
    assert r.count == 0
    assert engine.store.get(RATINGS_KEY) is None  # not persisted until an update


def test_get_rating_returns_same_object(engine):
    assert engine.ratings.get_rating("swe", "testing") is engine.ratings.get_rating("swe", "testing")


def test_update_rating_changes_mean_and_count(engine, clock):
    q = question(difficulty=3)
    clock.advance(minutes=5)
    r = answer(engine, q, True)
    assert r.mean == pytest.approx(5.0 + 0.2 * (9 - 5.0))
    assert r.count == 1
    assert r.last_updated == clock()
    assert engine.ratings.get_rating("swe", "databases") is r


def test_update_rating_persists_snapshot(engine):
    answer(engine, question(), True)
    saved = engine.store.get(RATINGS_KEY)
    assert saved["swe"]["databases"]["count"] == 1
    assert saved["swe"]["databases"]["mean"] == pytest.approx(5.4)


def test_update_rating_appends_history(engine):
    q = question()
    answer(engine, q, False, confidence=2)
    entries = engine.history.entries()
    assert len(entries) == 1
    assert entries[0].question == q
    assert entries[0].correct is False
    assert entries[0].user_answer == 1
    assert entries[0].confidence == 2
    assert entries[0].time_spent == 10


def test_update_rating_default_confidence(engine):
    answer(engine, question(), True)
    assert engine.history.entries()[0].confidence == 3


def test_role_score_is_mean_of_domains(engine):
    answer(engine, question(difficulty=1), False)  # databases -> 4.4
    # testing stays at 5.0
    assert engine.ratings.get_role_score("swe") == pytest.approx((4.4 + 5.0) / 2)


def test_role_score_defaults(engine, tmp_db):
    assert engine.ratings.get_role_score("unknown") == 5.0
    store = KeyValueStore(tmp_db)
    bare = RatingEngine(Catalog.empty(), RatingStore(store), HistoryLog(store))
    assert bare.get_role_score("swe") == 5.0


def test_round_trip_through_store(engine, catalog, tmp_db):
    for q, correct in ((question(difficulty=1), True), (question("alg3", 3, "coding", "algorithms"), False)):
        answer(engine, q, correct)
    store = KeyValueStore(tmp_db)
    reloaded = RatingEngine(catalog, RatingStore(store), HistoryLog(store))
    for role, domains in engine.ratings.ratings.items():
        for domain, r in domains.items():
            again = reloaded.get_rating(role, domain)
            assert (again.mean, again.count) == (r.mean, r.count)


def test_progress_stats(engine, catalog):
    answer(engine, question(), True)
    answer(engine, question("alg1", 1, "coding", "algorithms"), True)
    stats = engine.ratings.progress_stats()
    assert set(stats.by_role) == {"swe", "coding"}
    assert stats.questions_answered == 2
    assert stats.total_questions == len(catalog.questions)
    assert stats.overall == pytest.approx(sum(stats.by_role.values()) / 2)


def test_progress_stats_without_taxonomy(tmp_db):
    store = KeyValueStore(tmp_db)
    assert RatingEngine(Catalog.empty(), RatingStore(store), HistoryLog(store)).progress_stats() is None


def test_export_and_import(engine):
    answer(engine, question(), True)
    exported = engine.ratings.export_ratings()
    assert exported["version"] == "1.0"
    assert exported["ratings"]["swe"]["databases"]["count"] == 1

    answer(engine, question(), True)
    assert engine.ratings.import_ratings(exported) is True
    assert engine.ratings.get_rating("swe", "databases").count == 1
    assert engine.store.get(RATINGS_KEY)["swe"]["databases"]["count"] == 1


def test_import_rejects_bad_document(engine):
    assert engine.ratings.import_ratings({"ratings": {"swe": {}}}) is False
    assert engine.ratings.import_ratings({"version": "1.0"}) is False
    assert engine.ratings.import_ratings([]) is False


def test_update_rating_uses_outcome_confidence(engine):
    q = question()
    engine.ratings.update_rating(QuizOutcome(q.id, True, time_spent=4, confidence=5), q, 0)
    assert engine.history.entries()[0].confidence == 5
    # An explicit argument still wins
    engine.ratings.update_rating(QuizOutcome(q.id, True, confidence=5), q, 0, confidence=1)
    assert engine.history.entries()[0].confidence == 1


def test_update_rating_saved_before_history_write(engine, monkeypatch):
    def broken_append(*args, **kwargs):
        raise RuntimeError("history unavailable")

    monkeypatch.setattr(engine.history, "append", broken_append)
    with pytest.raises(RuntimeError):
        answer(engine, question(), True)
    saved = engine.store.get(RATINGS_KEY)
    assert saved["swe"]["databases"]["count"] == 1
    assert saved["swe"]["databases"]["mean"] == pytest.approx(5.4)


def test_import_empty_ratings_resets(engine):
    answer(engine, question(), True)
    assert engine.ratings.import_ratings({"ratings": {}, "version": "1.0"}) is True
    assert engine.ratings.ratings == {}
    assert engine.store.get(RATINGS_KEY) == {}
    assert engine.ratings.get_rating("swe", "databases").mean == 5.0
