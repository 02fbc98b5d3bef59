from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Sequence

from volunteer_match.models import Opportunity, OpportunityStatus, VolunteerProfile
from volunteer_match.utils.datetime_utils import to_utc

TOP_N = 10


@dataclass(slots=True)
class MatchingStats:
    total_volunteers: int = 0
    total_opportunities: int = 0
    open_opportunities: int = 0
    average_skills_per_volunteer: float = 0.0
    average_required_skills_per_opportunity: float = 0.0
    top_skills: list[tuple[str, int]] = field(default_factory=list)
    top_categories: list[tuple[str, int]] = field(default_factory=list)


def is_open(opportunity: Opportunity, now: datetime) -> bool:
    return (
        opportunity.status is OpportunityStatus.ACTIVE
        and opportunity.current_volunteers < opportunity.max_volunteers
        and to_utc(now) <= to_utc(opportunity.end_date)
    )


def compute_stats(
    volunteers: Sequence[VolunteerProfile],
    opportunities: Sequence[Opportunity],
    now: datetime,
) -> MatchingStats:
    skill_counts = Counter(name for volunteer in volunteers for name in volunteer.skills)
    category_counts = Counter(
        category for opportunity in opportunities for category in opportunity.categories
    )

    return MatchingStats(
        total_volunteers=len(volunteers),
        total_opportunities=len(opportunities),
        open_opportunities=sum(1 for opportunity in opportunities if is_open(opportunity, now)),
        average_skills_per_volunteer=_average(len(v.skills) for v in volunteers),
        average_required_skills_per_opportunity=_average(
            len(o.required_skills) for o in opportunities
        ),
        top_skills=_top(skill_counts),
        top_categories=_top(category_counts),
    )


def _average(values: Iterable[int]) -> float:
    items = list(values)
    return sum(items) / len(items) if items else 0.0


def _top(counts: Counter[str]) -> list[tuple[str, int]]:
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:TOP_N]
