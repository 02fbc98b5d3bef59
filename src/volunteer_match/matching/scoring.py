from __future__ import annotations

import math
from dataclasses import dataclass, fields
from datetime import datetime

from volunteer_match.errors import InvalidArgument
from volunteer_match.models import MatchReason, MatchResult, Opportunity, VolunteerProfile

from .availability import overlap, slot_pairs
from .geo import distance_km
from .skills import SkillScale, compatibility

FACTORS: tuple[str, ...] = ("category", "distance", "schedule", "skills", "capacity")


@dataclass(frozen=True, slots=True)
class ScoringWeights:
    """Relative factor weights; rescaled to 100 over the factors in play."""

    category: float = 30.0
    distance: float = 25.0
    schedule: float = 20.0
    skills: float = 20.0
    capacity: float = 5.0

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidArgument(f"weight {item.name} must be a number")
            if not math.isfinite(value) or value < 0:
                raise InvalidArgument(f"weight {item.name} must be a finite number >= 0")
        if sum(getattr(self, name) for name in FACTORS) <= 0:
            raise InvalidArgument("factor weights must have a positive total")

    def effective(self, active: tuple[str, ...]) -> dict[str, float]:
        total = sum(getattr(self, name) for name in active)
        if total <= 0:
            return {name: 0.0 for name in active}
        return {name: getattr(self, name) * 100.0 / total for name in active}


@dataclass(frozen=True, slots=True)
class FactorValue:
    factor: str
    value: float
    explanation: str


class ScoreCalculator:
    """Weighted-sum scoring of a (volunteer, opportunity) pair.

    Callers must run CandidateFilter first; eligibility is not re-checked here.
    """

    def __init__(
        self,
        weights: ScoringWeights | None = None,
        scale: SkillScale | None = None,
    ) -> None:
        self.weights = weights or ScoringWeights()
        self.scale = scale or SkillScale()

    def factor_values(
        self,
        volunteer: VolunteerProfile,
        opportunity: Opportunity,
    ) -> tuple[list[FactorValue], float | None]:
        values = [_category_factor(volunteer, opportunity)]

        distance = None
        if volunteer.location is not None and opportunity.location is not None:
            distance = distance_km(volunteer.location, opportunity.location)
            values.append(
                FactorValue(
                    factor="distance",
                    value=max(0.0, 1.0 - distance / volunteer.max_distance_km),
                    explanation=(
                        f"{distance:.1f} km within {volunteer.max_distance_km:g} km radius"
                    ),
                )
            )

        values.append(_schedule_factor(volunteer, opportunity))
        values.append(self._skills_factor(volunteer, opportunity))
        values.append(_capacity_factor(opportunity))
        return values, distance

    def score(
        self,
        volunteer: VolunteerProfile,
        opportunity: Opportunity,
        now: datetime,
    ) -> MatchResult:
        values, distance = self.factor_values(volunteer, opportunity)
        weights = self.weights.effective(tuple(item.factor for item in values))

        contributions = [
            MatchReason(
                factor=item.factor,
                contribution=weights[item.factor] * item.value,
                explanation=item.explanation,
            )
            for item in values
        ]
        reasons = sorted(
            (reason for reason in contributions if reason.contribution > 0),
            key=lambda reason: -reason.contribution,
        )
        score = math.fsum(reason.contribution for reason in reasons)

        return MatchResult(
            opportunity_id=opportunity.id,
            volunteer_id=volunteer.id,
            score=min(100.0, score),
            reasons=tuple(reasons),
            computed_at=now,
            distance_km=distance,
        )

    def _skills_factor(self, volunteer: VolunteerProfile, opportunity: Opportunity) -> FactorValue:
        match = compatibility(volunteer.skills, opportunity.required_skills, self.scale)
        if match.required == 0:
            return FactorValue("skills", 1.0, "no required skills")

        explanation = f"{match.met} of {match.required} required skills met"
        # partial credit is only given once every minimum is met
        value = match.fraction if match.meets_minimum else 0.0
        return FactorValue("skills", value, explanation)


def _category_factor(volunteer: VolunteerProfile, opportunity: Opportunity) -> FactorValue:
    wanted = {category.casefold() for category in volunteer.categories}
    shared = sorted(
        category for category in opportunity.categories if category.casefold() in wanted
    )
    if not shared:
        return FactorValue("category", 0.0, "no category match")
    return FactorValue("category", 1.0, f"category match: {', '.join(shared)}")


def _schedule_factor(volunteer: VolunteerProfile, opportunity: Opportunity) -> FactorValue:
    required = slot_pairs(opportunity.schedule)
    if not required:
        return FactorValue("schedule", 1.0, "no fixed schedule")

    value = overlap(volunteer.availability, opportunity.schedule)
    covered = len(required & slot_pairs(volunteer.availability))
    return FactorValue(
        "schedule",
        value,
        f"{covered} of {len(required)} scheduled slots covered",
    )


def _capacity_factor(opportunity: Opportunity) -> FactorValue:
    open_slots = max(0, opportunity.max_volunteers - opportunity.current_volunteers)
    return FactorValue(
        "capacity",
        opportunity.capacity_headroom,
        f"{open_slots} of {opportunity.max_volunteers} volunteer slots open",
    )
