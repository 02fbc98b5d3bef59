"""Explainable volunteer/opportunity matching engine."""

from volunteer_match.errors import InvalidArgument, InvalidCoordinate
from volunteer_match.matching.ranking import MatchExplanation, MatchRanker, Ranking, rank
from volunteer_match.models import (
    Coordinate,
    MatchReason,
    MatchResult,
    Opportunity,
    OpportunityStatus,
    SkillRequirement,
    VolunteerProfile,
)

__all__ = [
    "Coordinate",
    "InvalidArgument",
    "InvalidCoordinate",
    "MatchExplanation",
    "MatchRanker",
    "MatchReason",
    "MatchResult",
    "Opportunity",
    "OpportunityStatus",
    "Ranking",
    "SkillRequirement",
    "VolunteerProfile",
    "rank",
]
