"""Conversion of raw mappings (parsed YAML/JSON) into model snapshots."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import yaml

from volunteer_match.errors import InvalidArgument
from volunteer_match.matching.availability import slot_pairs
from volunteer_match.matching.geo import validate_coordinate
from volunteer_match.matching.skills import SkillScale
from volunteer_match.models import (
    Coordinate,
    Opportunity,
    OpportunityStatus,
    SkillRequirement,
    VolunteerProfile,
)
from volunteer_match.utils.datetime_utils import parse_datetime_utc

logger = logging.getLogger(__name__)

DEFAULT_MAX_DISTANCE_KM = 50.0


def load_document(path: str | Path) -> Any:
    """Read a YAML or JSON file (JSON is parsed as YAML)."""
    document_path = Path(path).expanduser()
    try:
        with document_path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle)
    except OSError as exc:
        raise InvalidArgument(f"cannot read {document_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise InvalidArgument(f"{document_path} is not valid YAML/JSON: {exc}") from exc


def records_from_document(document: Any, key: str) -> list[Mapping[str, Any]]:
    if document is None:
        return []
    if isinstance(document, Mapping):
        document = document.get(key, [])
    if not isinstance(document, list):
        raise InvalidArgument(f"expected a list of {key} or a mapping with a '{key}' key")
    return list(document)


def parse_coordinate(raw: Any) -> Coordinate | None:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise InvalidArgument("location must be a mapping with latitude and longitude")

    latitude = raw.get("latitude", raw.get("lat"))
    longitude = raw.get("longitude", raw.get("lng", raw.get("lon")))
    if latitude is None and longitude is None:
        return None
    try:
        coordinate = Coordinate(latitude=float(latitude), longitude=float(longitude))
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"location has non-numeric coordinates: {dict(raw)!r}") from exc
    return validate_coordinate(coordinate)


def parse_weekly_slots(raw: Any) -> dict[str, frozenset[str]]:
    """Accept ``{day: [slots]}`` or ``{weekdays: [...], time_slots: [...]}``."""
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise InvalidArgument("availability/schedule must be a mapping")

    if "weekdays" in raw:
        days = _as_tags(raw.get("weekdays"), "weekdays")
        slots = _as_tags(raw.get("time_slots", raw.get("timeSlots")), "time_slots")
        raw = {day: slots for day in days}

    weekly: dict[str, frozenset[str]] = {}
    for day, slot in slot_pairs({day: _as_tags(slots, str(day)) for day, slots in raw.items()}):
        weekly[day] = weekly.get(day, frozenset()) | {slot}
    return weekly


def parse_skills(raw: Any, scale: SkillScale) -> dict[str, str]:
    """Accept ``{name: level}`` or a bare list of names at the lowest level."""
    if raw is None:
        return {}
    if isinstance(raw, list):
        raw = {name: scale.levels[0] for name in raw}
    if not isinstance(raw, Mapping):
        raise InvalidArgument("skills must be a mapping of skill name to level")

    skills: dict[str, str] = {}
    for name, level in raw.items():
        skill_name = " ".join(str(name).split())
        if not skill_name:
            raise InvalidArgument("skill names must be non-empty")
        level_name = str(level).strip().lower()
        scale.rank(level_name)
        skills[skill_name] = level_name
    return skills


def parse_volunteer(raw: Any, scale: SkillScale | None = None) -> VolunteerProfile:
    scale = scale or SkillScale()
    if not isinstance(raw, Mapping):
        raise InvalidArgument("volunteer record must be a mapping")

    volunteer_id = _require_id(raw, "volunteer")
    categories = raw.get("categories", raw.get("interests"))
    max_distance = raw.get("max_distance_km", raw.get("maxDistance", DEFAULT_MAX_DISTANCE_KM))
    try:
        max_distance_km = float(max_distance)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"volunteer {volunteer_id} max_distance_km must be a number") from exc
    if max_distance_km <= 0:
        raise InvalidArgument(f"volunteer {volunteer_id} max_distance_km must be positive")

    try:
        return VolunteerProfile(
            id=volunteer_id,
            categories=frozenset(_as_tags(categories, "categories")),
            max_distance_km=max_distance_km,
            location=parse_coordinate(raw.get("location")),
            availability=parse_weekly_slots(raw.get("availability")),
            skills=parse_skills(raw.get("skills"), scale),
        )
    except InvalidArgument as exc:
        raise InvalidArgument(f"volunteer {volunteer_id}: {exc}") from exc


def parse_opportunity(raw: Any, scale: SkillScale | None = None) -> Opportunity:
    scale = scale or SkillScale()
    if not isinstance(raw, Mapping):
        raise InvalidArgument("opportunity record must be a mapping")

    opportunity_id = _require_id(raw, "opportunity")
    try:
        status = OpportunityStatus(str(raw.get("status", "")).strip().lower())
    except ValueError:
        raise InvalidArgument(
            f"opportunity {opportunity_id} has unknown status {raw.get('status')!r}"
        ) from None
    try:
        skill_requirement = SkillRequirement(
            str(raw.get("skill_requirement", SkillRequirement.HARD.value)).strip().lower()
        )
    except ValueError:
        raise InvalidArgument(
            f"opportunity {opportunity_id} skill_requirement must be 'hard' or 'soft'"
        ) from None

    start_date = parse_datetime_utc(raw.get("start_date", raw.get("startDate")))
    end_date = parse_datetime_utc(raw.get("end_date", raw.get("endDate")))
    if start_date is None or end_date is None:
        raise InvalidArgument(f"opportunity {opportunity_id} needs valid start_date and end_date")

    categories = raw.get("categories", raw.get("category"))
    try:
        return Opportunity(
            id=opportunity_id,
            status=status,
            categories=frozenset(_as_tags(categories, "categories")),
            start_date=start_date,
            end_date=end_date,
            max_volunteers=_as_count(raw.get("max_volunteers", raw.get("maxVolunteers")), "max_volunteers"),
            current_volunteers=_as_count(
                raw.get("current_volunteers", raw.get("currentVolunteers", 0)),
                "current_volunteers",
            ),
            location=parse_coordinate(raw.get("location")),
            schedule=parse_weekly_slots(raw.get("schedule")),
            required_skills=parse_skills(raw.get("required_skills", raw.get("requiredSkills")), scale),
            skill_requirement=skill_requirement,
            title=str(raw.get("title", "") or "").strip(),
        )
    except InvalidArgument as exc:
        raise InvalidArgument(f"opportunity {opportunity_id}: {exc}") from exc


def parse_opportunities(
    records: list[Any],
    scale: SkillScale | None = None,
    *,
    origin: str = "input",
) -> list[Opportunity]:
    """Parse records, skipping (and logging) the malformed ones."""
    opportunities: list[Opportunity] = []
    for index, record in enumerate(records, start=1):
        try:
            opportunities.append(parse_opportunity(record, scale))
        except InvalidArgument as exc:
            logger.warning("Skipping opportunity #%d from %s: %s", index, origin, exc)
    return opportunities


def load_volunteer(path: str | Path, scale: SkillScale | None = None) -> VolunteerProfile:
    document = load_document(path)
    if isinstance(document, Mapping) and "volunteer" in document:
        document = document["volunteer"]
    return parse_volunteer(document, scale)


def load_volunteers(path: str | Path, scale: SkillScale | None = None) -> list[VolunteerProfile]:
    records = records_from_document(load_document(path), "volunteers")
    return [parse_volunteer(record, scale) for record in records]


def _require_id(raw: Mapping[str, Any], kind: str) -> str:
    value = raw.get("id")
    identifier = str(value).strip() if value is not None else ""
    if not identifier:
        raise InvalidArgument(f"{kind} record is missing an id")
    return identifier


def _as_tags(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise InvalidArgument(f"{field_name} must be a tag or a list of tags")
    tags: list[str] = []
    for item in value:
        if isinstance(item, Mapping):
            item = item.get("name", "")
        tag = " ".join(str(item).split())
        if tag:
            tags.append(tag)
    return tags


def _as_count(value: Any, field_name: str) -> int:
    if value is None or isinstance(value, bool):
        raise InvalidArgument(f"{field_name} must be an integer")
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"{field_name} must be an integer") from exc
    if parsed != value and not isinstance(value, str):
        raise InvalidArgument(f"{field_name} must be a whole number")
    return parsed
