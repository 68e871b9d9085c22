"""Load the question bank and skills taxonomy."""
import json
from dataclasses import dataclass, field
from pathlib import Path

import structlog
import yaml

from skill_coach.config import CONTENT_DIR
from skill_coach.models import Domain, Question, Role, Taxonomy

logger = structlog.get_logger(__name__)


class CatalogError(Exception):
    """Raised when a catalog file is missing or does not match its schema."""


@dataclass
class Catalog:
    questions: list = field(default_factory=list)
    taxonomy: Taxonomy | None = None

    @property
    def available(self) -> bool:
        return self.taxonomy is not None and bool(self.questions)

    @classmethod
    def empty(cls) -> "Catalog":
        return cls()


def read_catalog_file(file_path: str):
    path = Path(file_path)
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {file_path}")
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            return json.loads(path.read_text())
        elif suffix in (".yaml", ".yml"):
            return yaml.safe_load(path.read_text())
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise CatalogError(f"Could not parse {path.name}: {e}") from e
    raise CatalogError(f"Unsupported catalog format: {suffix}")


def parse_taxonomy(data) -> Taxonomy:
    if not isinstance(data, dict) or not isinstance(data.get("roles"), dict):
        raise CatalogError("Taxonomy must be a mapping with a 'roles' mapping")
    roles = {}
    for role_key, role_data in data["roles"].items():
        try:
            domains = {
                domain_key: Domain(
                    name=d["name"],
                    description=d.get("description", ""),
                    skills=list(d.get("skills", [])),
                )
                for domain_key, d in role_data["domains"].items()
            }
            roles[role_key] = Role(
                key=role_key,
                name=role_data["name"],
                priority=int(role_data.get("priority", len(roles) + 1)),
                domains=domains,
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise CatalogError(f"Malformed role '{role_key}': {e}") from e
    return Taxonomy(roles=roles)


def parse_questions(data, taxonomy: Taxonomy | None = None) -> list:
    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list):
        raise CatalogError("Question bank must be a list of questions")
    questions = []
    seen = set()
    for i, raw in enumerate(data):
        try:
            q = Question.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Malformed question at index {i}: {e}") from e
        if q.difficulty not in (1, 2, 3):
            raise CatalogError(f"Question {q.id} has invalid difficulty {q.difficulty}")
        if not 0 <= q.answer < len(q.options):
            raise CatalogError(f"Question {q.id} answer index {q.answer} out of range")
        if q.id in seen:
            raise CatalogError(f"Duplicate question id: {q.id}")
        if taxonomy is not None and q.domain not in taxonomy.domain_keys(q.role):
            # Still usable in practice mode, so only warn
            logger.warning("question_outside_taxonomy", question_id=q.id, role=q.role, domain=q.domain)
        seen.add(q.id)
        questions.append(q)
    return questions


def load_catalog(questions_path: str | None = None, taxonomy_path: str | None = None) -> Catalog:
    """Load and validate both catalog files. Raises CatalogError on failure."""
    questions_path = questions_path or str(CONTENT_DIR / "questions_seed.json")
    taxonomy_path = taxonomy_path or str(CONTENT_DIR / "skills_taxonomy.json")
    taxonomy = parse_taxonomy(read_catalog_file(taxonomy_path))
    questions = parse_questions(read_catalog_file(questions_path), taxonomy)
    logger.info("catalog_loaded", questions=len(questions), roles=len(taxonomy.roles))
    return Catalog(questions=questions, taxonomy=taxonomy)
