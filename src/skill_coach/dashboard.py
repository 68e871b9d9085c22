"""Proficiency dashboard scoring and statistics."""
import math

from skill_coach.models import QuizStats


def round_half_up(value: float, digits: int = 0):
    """Round halves away from zero for non-negative values (2.5 -> 3)."""
    if digits == 0:
        return math.floor(value + 0.5)
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def get_readiness_label(rating: float) -> str:
    if rating >= 8:
        return "STRONG"
    elif rating >= 6.5:
        return "SOLID"
    elif rating >= 5:
        return "NEEDS WORK"
    return "WEAK"


def get_readiness_color(rating: float) -> str:
    if rating >= 8:
        return "green"
    elif rating >= 6.5:
        return "yellow"
    elif rating >= 5:
        return "dark_orange"
    return "red"


def calc_streak(history: list) -> int:
    """Consecutive correct answers counting back from the most recent."""
    streak = 0
    for entry in history:
        if not entry.correct:
            break
        streak += 1
    return streak


def get_quiz_stats(history: list) -> QuizStats:
    """Aggregate a most-recent-first history list."""
    if not history:
        return QuizStats()
    total = len(history)
    correct = sum(1 for e in history if e.correct)
    return QuizStats(
        total_questions=total,
        correct_answers=correct,
        accuracy=round_half_up(correct / total * 100),
        average_time=round_half_up(sum(e.time_spent for e in history) / total),
        average_confidence=round_half_up(sum(e.confidence for e in history) / total, 1),
        streak_count=calc_streak(history),
    )
