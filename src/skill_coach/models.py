"""Data classes for the skill coach domain model."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

DIFFICULTY_LABELS = {1: "Basic", 2: "Intermediate", 3: "Advanced"}
BLOCK_KINDS = ("quiz", "project", "study", "applications")


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _format_dt(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Question:
    id: str
    role: str
    domain: str
    difficulty: int
    prompt: str
    options: tuple
    answer: int
    explanation: str = ""

    @property
    def difficulty_label(self) -> str:
        return DIFFICULTY_LABELS[self.difficulty]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role,
            "domain": self.domain,
            "difficulty": self.difficulty,
            "question": self.prompt,
            "options": list(self.options),
            "answer": self.answer,
            "explanation": self.explanation,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        return cls(
            id=str(data["id"]),
            role=data["role"],
            domain=data["domain"],
            difficulty=int(data["difficulty"]),
            prompt=data["question"],
            options=tuple(data["options"]),
            answer=int(data["answer"]),
            explanation=data.get("explanation", ""),
        )


@dataclass
class Domain:
    name: str
    description: str = ""
    skills: list = field(default_factory=list)


@dataclass
class Role:
    key: str
    name: str
    priority: int
    domains: dict = field(default_factory=dict)  # domain key -> Domain, ordered


@dataclass
class Taxonomy:
    roles: dict = field(default_factory=dict)  # role key -> Role, ordered

    def domain_keys(self, role: str) -> list:
        if role not in self.roles:
            return []
        return list(self.roles[role].domains)

    def role_name(self, role: str) -> str:
        return self.roles[role].name if role in self.roles else role

    def domain_name(self, role: str, domain: str) -> str:
        if role in self.roles and domain in self.roles[role].domains:
            return self.roles[role].domains[domain].name
        return " ".join(word.capitalize() for word in domain.split("_"))


@dataclass
class DomainRating:
    mean: float = 5.0
    count: int = 0
    last_updated: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "mean": self.mean,
            "count": self.count,
            "last_updated": _format_dt(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DomainRating":
        return cls(
            mean=float(data["mean"]),
            count=int(data.get("count", 0)),
            last_updated=_parse_dt(data.get("last_updated")),
        )


@dataclass
class QuizOutcome:
    question_id: str
    correct: bool
    time_spent: float = 0
    confidence: Optional[int] = None


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    question: Question
    user_answer: int
    correct: bool
    time_spent: float
    confidence: int
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "question": self.question.to_dict(),
            "user_answer": self.user_answer,
            "correct": self.correct,
            "time_spent": self.time_spent,
            "confidence": self.confidence,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        return cls(
            id=data["id"],
            question=Question.from_dict(data["question"]),
            user_answer=int(data["user_answer"]),
            correct=bool(data["correct"]),
            time_spent=data.get("time_spent", 0),
            confidence=int(data.get("confidence", 3)),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class StudyBlock:
    id: str
    kind: str
    duration: int  # minutes
    title: str
    description: str = ""
    role: Optional[str] = None
    domain: Optional[str] = None
    completed: bool = False
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.kind,
            "duration": self.duration,
            "title": self.title,
            "description": self.description,
            "role": self.role,
            "domain": self.domain,
            "completed": self.completed,
            "start_time": _format_dt(self.start_time),
            "end_time": _format_dt(self.end_time),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StudyBlock":
        return cls(
            id=data["id"],
            kind=data["type"],
            duration=int(data["duration"]),
            title=data["title"],
            description=data.get("description", ""),
            role=data.get("role"),
            domain=data.get("domain"),
            completed=bool(data.get("completed", False)),
            start_time=_parse_dt(data.get("start_time")),
            end_time=_parse_dt(data.get("end_time")),
        )


@dataclass
class DailyPlan:
    date: date
    total_hours: float
    blocks: list
    focus: str
    created: datetime
    last_updated: datetime

    def find_block(self, block_id: str) -> Optional[StudyBlock]:
        return next((b for b in self.blocks if b.id == block_id), None)

    @property
    def completed_minutes(self) -> int:
        return sum(b.duration for b in self.blocks if b.completed)

    @property
    def total_minutes(self) -> int:
        return sum(b.duration for b in self.blocks)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "total_hours": self.total_hours,
            "blocks": [b.to_dict() for b in self.blocks],
            "focus": self.focus,
            "created": self.created.isoformat(),
            "last_updated": self.last_updated.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DailyPlan":
        return cls(
            date=date.fromisoformat(data["date"]),
            total_hours=data["total_hours"],
            blocks=[StudyBlock.from_dict(b) for b in data["blocks"]],
            focus=data["focus"],
            created=datetime.fromisoformat(data["created"]),
            last_updated=datetime.fromisoformat(data["last_updated"]),
        )


@dataclass
class WeakArea:
    role: str
    domain: str
    rating: float


@dataclass
class QuizStats:
    total_questions: int = 0
    correct_answers: int = 0
    accuracy: int = 0
    average_time: int = 0
    average_confidence: float = 0.0
    streak_count: int = 0


@dataclass
class ProgressStats:
    overall: float
    by_role: dict
    total_questions: int
    questions_answered: int
