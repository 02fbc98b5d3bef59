from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

from volunteer_match.filters import CandidateFilter
from volunteer_match.models import (
    Coordinate,
    Opportunity,
    OpportunityStatus,
    SkillRequirement,
    VolunteerProfile,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
SAO_PAULO = Coordinate(-23.5505, -46.6333)


def _volunteer(**overrides: object) -> VolunteerProfile:
    base = VolunteerProfile(
        id="vol-1",
        categories=frozenset({"Environmental"}),
        max_distance_km=10.0,
        location=SAO_PAULO,
        availability={"monday": frozenset({"morning"})},
        skills={"first aid": "intermediate"},
    )
    return replace(base, **overrides)


def _opportunity(**overrides: object) -> Opportunity:
    base = Opportunity(
        id="opp-1",
        status=OpportunityStatus.ACTIVE,
        categories=frozenset({"Environmental"}),
        start_date=NOW + timedelta(days=7),
        end_date=NOW + timedelta(days=30),
        max_volunteers=10,
        current_volunteers=0,
        location=SAO_PAULO,
        schedule={"monday": frozenset({"morning"})},
        required_skills={},
    )
    return replace(base, **overrides)


def test_active_open_nearby_opportunity_is_eligible() -> None:
    result = CandidateFilter().evaluate(_volunteer(), _opportunity(), NOW)

    assert result.matched is True
    assert "categories: environmental" in result.reason_text()
    assert result.distance_km == 0.0


def test_non_active_statuses_are_rejected() -> None:
    filt = CandidateFilter()

    for status in (OpportunityStatus.DRAFT, OpportunityStatus.PAUSED, OpportunityStatus.CLOSED):
        result = filt.evaluate(_volunteer(), _opportunity(status=status), NOW)
        assert result.matched is False
        assert result.reason_text() == f"status is {status.value}"


def test_full_opportunity_is_rejected() -> None:
    result = CandidateFilter().evaluate(
        _volunteer(), _opportunity(current_volunteers=10), NOW
    )

    assert result.matched is False
    assert "no open volunteer slots" in result.reason_text()


def test_ended_opportunity_is_rejected_but_end_instant_is_inclusive() -> None:
    filt = CandidateFilter()

    assert filt.eligible(_volunteer(), _opportunity(end_date=NOW - timedelta(seconds=1)), NOW) is False
    assert filt.eligible(_volunteer(), _opportunity(end_date=NOW), NOW) is True


def test_ongoing_opportunity_is_eligible() -> None:
    opportunity = _opportunity(start_date=NOW - timedelta(days=3))

    assert CandidateFilter().eligible(_volunteer(), opportunity, NOW) is True


def test_category_must_intersect() -> None:
    filt = CandidateFilter()

    assert filt.eligible(_volunteer(), _opportunity(categories=frozenset({"Health"})), NOW) is False
    assert filt.eligible(_volunteer(categories=frozenset()), _opportunity(), NOW) is False
    assert filt.eligible(
        _volunteer(categories=frozenset({"environmental"})),
        _opportunity(categories=frozenset({"Health", "ENVIRONMENTAL"})),
        NOW,
    ) is True


def test_distance_cutoff_applies_only_when_both_locations_known() -> None:
    far_away = Coordinate(-23.5505 + 0.54, -46.6333)  # about 60 km
    filt = CandidateFilter()

    rejected = filt.evaluate(_volunteer(), _opportunity(location=far_away), NOW)
    assert rejected.matched is False
    assert "too far" in rejected.reason_text()

    assert filt.eligible(_volunteer(location=None), _opportunity(location=far_away), NOW) is True
    assert filt.eligible(_volunteer(), _opportunity(location=None), NOW) is True


def test_hard_skill_requirements_gate_eligibility() -> None:
    opportunity = _opportunity(required_skills={"first aid": "advanced"})
    result = CandidateFilter().evaluate(_volunteer(), opportunity, NOW)

    assert result.matched is False
    assert result.reason_text() == "missing required skills: first aid"


def test_soft_skill_requirements_do_not_gate() -> None:
    opportunity = _opportunity(
        required_skills={"first aid": "advanced"},
        skill_requirement=SkillRequirement.SOFT,
    )

    assert CandidateFilter().eligible(_volunteer(), opportunity, NOW) is True


def test_include_categories_restricts_candidates() -> None:
    filt = CandidateFilter(include_categories=["Education"])
    volunteer = _volunteer(categories=frozenset({"Environmental", "Education"}))

    assert filt.eligible(volunteer, _opportunity(), NOW) is False
    assert filt.eligible(
        volunteer, _opportunity(categories=frozenset({"Education"})), NOW
    ) is True


def test_naive_datetimes_are_treated_as_utc() -> None:
    naive_now = datetime(2026, 10, 19, 12, 0)

    assert CandidateFilter().eligible(_volunteer(), _opportunity(), naive_now) is True
