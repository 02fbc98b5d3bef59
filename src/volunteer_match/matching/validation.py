from __future__ import annotations

import math
from datetime import datetime
from typing import Mapping

from volunteer_match.errors import InvalidArgument
from volunteer_match.models import (
    Coordinate,
    Opportunity,
    OpportunityStatus,
    SkillRequirement,
    VolunteerProfile,
)
from volunteer_match.utils.datetime_utils import to_utc

from .availability import slot_pairs
from .geo import validate_coordinate
from .skills import SkillScale


def validate_volunteer(volunteer: VolunteerProfile, scale: SkillScale) -> None:
    if not isinstance(volunteer, VolunteerProfile):
        raise InvalidArgument(
            f"expected a VolunteerProfile, got {type(volunteer).__name__}"
        )
    _require_id(volunteer.id, "volunteer")
    _require_tags(volunteer.categories, f"volunteer {volunteer.id} categories")

    max_distance = volunteer.max_distance_km
    if (
        isinstance(max_distance, bool)
        or not isinstance(max_distance, (int, float))
        or not math.isfinite(max_distance)
        or max_distance <= 0
    ):
        raise InvalidArgument(
            f"volunteer {volunteer.id} max_distance_km must be a positive number"
        )

    _check_location(volunteer.location, f"volunteer {volunteer.id}")
    slot_pairs(volunteer.availability)
    _check_skills(volunteer.skills, f"volunteer {volunteer.id} skills", scale)


def validate_opportunity(opportunity: Opportunity, scale: SkillScale) -> None:
    if not isinstance(opportunity, Opportunity):
        raise InvalidArgument(
            f"expected an Opportunity, got {type(opportunity).__name__}"
        )
    _require_id(opportunity.id, "opportunity")
    _require_tags(opportunity.categories, f"opportunity {opportunity.id} categories")

    if not isinstance(opportunity.status, OpportunityStatus):
        raise InvalidArgument(f"opportunity {opportunity.id} has invalid status")
    if not isinstance(opportunity.skill_requirement, SkillRequirement):
        raise InvalidArgument(f"opportunity {opportunity.id} has invalid skill requirement")

    for name in ("max_volunteers", "current_volunteers"):
        value = getattr(opportunity, name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgument(f"opportunity {opportunity.id} {name} must be an integer")
    if opportunity.max_volunteers <= 0:
        raise InvalidArgument(f"opportunity {opportunity.id} max_volunteers must be > 0")
    if opportunity.current_volunteers < 0:
        raise InvalidArgument(f"opportunity {opportunity.id} current_volunteers must be >= 0")

    if not isinstance(opportunity.start_date, datetime) or not isinstance(
        opportunity.end_date, datetime
    ):
        raise InvalidArgument(f"opportunity {opportunity.id} needs start_date and end_date")
    if to_utc(opportunity.end_date) < to_utc(opportunity.start_date):
        raise InvalidArgument(f"opportunity {opportunity.id} ends before it starts")

    _check_location(opportunity.location, f"opportunity {opportunity.id}")
    slot_pairs(opportunity.schedule)
    _check_skills(
        opportunity.required_skills,
        f"opportunity {opportunity.id} required_skills",
        scale,
    )


def validate_limit(limit: int) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidArgument(f"limit must be a positive integer, got {limit!r}")
    return limit


def _require_id(value: object, kind: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{kind} id must be a non-empty string")


def _require_tags(value: object, label: str) -> None:
    if isinstance(value, (str, bytes)) or not isinstance(value, (set, frozenset)):
        raise InvalidArgument(f"{label} must be a set of tags")
    if any(not isinstance(tag, str) for tag in value):
        raise InvalidArgument(f"{label} must contain only strings")


def _check_location(location: object, label: str) -> None:
    if location is None:
        return
    if not isinstance(location, Coordinate):
        raise InvalidArgument(
            f"{label} location must be a Coordinate, got {type(location).__name__}"
        )
    validate_coordinate(location)


def _check_skills(skills: object, label: str, scale: SkillScale) -> None:
    if not isinstance(skills, Mapping):
        raise InvalidArgument(f"{label} must map skill names to levels")
    for name, level in skills.items():
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgument(f"{label} has a non-string skill name: {name!r}")
        scale.rank(level)
