"""Weak area identification."""
from skill_coach.models import WeakArea
from skill_coach.ratings import RatingEngine


def get_weak_areas(ratings: RatingEngine, limit: int = 5) -> list[WeakArea]:
    """Every (role, domain) in taxonomy order, weakest first.

    The sort is stable, so equal ratings keep taxonomy order.
    """
    taxonomy = ratings.catalog.taxonomy
    if taxonomy is None:
        return []
    areas = [
        WeakArea(role=role, domain=domain, rating=ratings.get_rating(role, domain).mean)
        for role in taxonomy.roles
        for domain in taxonomy.domain_keys(role)
    ]
    areas.sort(key=lambda a: a.rating)
    return areas[:limit]


def get_weak_areas_for_role(ratings: RatingEngine, role: str, threshold: float = 7.0) -> list[WeakArea]:
    """Domains of one role rated below threshold (sorted worst first)."""
    taxonomy = ratings.catalog.taxonomy
    if taxonomy is None:
        return []
    areas = [
        WeakArea(role=role, domain=domain, rating=ratings.get_rating(role, domain).mean)
        for domain in taxonomy.domain_keys(role)
    ]
    return sorted((a for a in areas if a.rating < threshold), key=lambda a: a.rating)
