from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

# weekday -> time-slot tags (e.g. morning/afternoon/evening/night)
WeeklySlots = Mapping[str, frozenset[str]]


class OpportunityStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"


class SkillRequirement(str, Enum):
    HARD = "hard"
    SOFT = "soft"


@dataclass(frozen=True, slots=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class VolunteerProfile:
    id: str
    categories: frozenset[str]
    max_distance_km: float
    location: Coordinate | None = None
    availability: WeeklySlots = field(default_factory=dict)
    skills: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Opportunity:
    id: str
    status: OpportunityStatus
    categories: frozenset[str]
    start_date: datetime
    end_date: datetime
    max_volunteers: int
    current_volunteers: int = 0
    location: Coordinate | None = None
    schedule: WeeklySlots = field(default_factory=dict)
    required_skills: Mapping[str, str] = field(default_factory=dict)
    skill_requirement: SkillRequirement = SkillRequirement.HARD
    title: str = ""

    @property
    def capacity_headroom(self) -> float:
        if self.max_volunteers <= 0:
            return 0.0
        open_slots = max(0, self.max_volunteers - self.current_volunteers)
        return open_slots / self.max_volunteers


@dataclass(frozen=True, slots=True)
class MatchReason:
    factor: str
    contribution: float
    explanation: str


@dataclass(frozen=True, slots=True)
class MatchResult:
    opportunity_id: str
    volunteer_id: str
    score: float
    reasons: tuple[MatchReason, ...]
    computed_at: datetime
    distance_km: float | None = None

    def reason_text(self) -> str:
        return "; ".join(reason.explanation for reason in self.reasons) or "no contributing factors"

    def to_dict(self) -> dict[str, Any]:
        return {
            "opportunity_id": self.opportunity_id,
            "volunteer_id": self.volunteer_id,
            "score": self.score,
            "reasons": [
                {
                    "factor": reason.factor,
                    "contribution": reason.contribution,
                    "explanation": reason.explanation,
                }
                for reason in self.reasons
            ],
            "computed_at": self.computed_at.isoformat(),
            "distance_km": self.distance_km,
        }
