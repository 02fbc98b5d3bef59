from __future__ import annotations

from datetime import datetime
from typing import Iterable

from volunteer_match.matching.geo import distance_km
from volunteer_match.matching.skills import SkillScale, compatibility
from volunteer_match.models import (
    Opportunity,
    OpportunityStatus,
    SkillRequirement,
    VolunteerProfile,
)
from volunteer_match.utils.datetime_utils import format_date, to_utc

from .base import Filter, FilterResult


class CandidateFilter(Filter):
    """Hard eligibility gate applied before any scoring."""

    def __init__(
        self,
        scale: SkillScale | None = None,
        include_categories: Iterable[str] = (),
    ) -> None:
        self.scale = scale or SkillScale()
        self.include_categories = frozenset(
            category.casefold() for category in include_categories if category.strip()
        )

    def evaluate(
        self,
        volunteer: VolunteerProfile,
        opportunity: Opportunity,
        now: datetime,
    ) -> FilterResult:
        if opportunity.status is not OpportunityStatus.ACTIVE:
            return FilterResult(matched=False, reasons=[f"status is {opportunity.status.value}"])

        if opportunity.current_volunteers >= opportunity.max_volunteers:
            return FilterResult(
                matched=False,
                reasons=[
                    "no open volunteer slots "
                    f"({opportunity.current_volunteers}/{opportunity.max_volunteers})"
                ],
            )

        if to_utc(now) > to_utc(opportunity.end_date):
            return FilterResult(
                matched=False,
                reasons=[f"ended {format_date(opportunity.end_date)}"],
            )

        opportunity_categories = {category.casefold() for category in opportunity.categories}
        shared = opportunity_categories & {
            category.casefold() for category in volunteer.categories
        }
        if not shared:
            return FilterResult(matched=False, reasons=["no shared category"])
        reasons = [f"categories: {', '.join(sorted(shared))}"]

        if self.include_categories and not opportunity_categories & self.include_categories:
            return FilterResult(matched=False, reasons=["outside requested categories"])

        distance = None
        if volunteer.location is not None and opportunity.location is not None:
            distance = distance_km(volunteer.location, opportunity.location)
            if distance > volunteer.max_distance_km:
                return FilterResult(
                    matched=False,
                    reasons=[
                        f"too far ({distance:.1f} km > {volunteer.max_distance_km:g} km)"
                    ],
                    distance_km=distance,
                )
            reasons.append(f"{distance:.1f} km away")

        if opportunity.skill_requirement is SkillRequirement.HARD:
            match = compatibility(volunteer.skills, opportunity.required_skills, self.scale)
            if not match.meets_minimum:
                return FilterResult(
                    matched=False,
                    reasons=[f"missing required skills: {', '.join(match.missing)}"],
                )
            if match.required:
                reasons.append("skill minimums met")

        return FilterResult(matched=True, reasons=reasons, distance_km=distance)
