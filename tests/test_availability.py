from __future__ import annotations

import pytest

from volunteer_match.errors import InvalidArgument
from volunteer_match.matching.availability import overlap, slot_pairs


def test_full_overlap() -> None:
    schedule = {"monday": frozenset({"morning"})}

    assert overlap({"monday": frozenset({"morning", "evening"})}, schedule) == 1.0


def test_partial_overlap_is_share_of_required_pairs() -> None:
    availability = {"monday": frozenset({"morning"}), "friday": frozenset({"evening"})}
    schedule = {
        "monday": frozenset({"morning", "afternoon"}),
        "tuesday": frozenset({"morning"}),
        "friday": frozenset({"evening"}),
    }

    assert overlap(availability, schedule) == pytest.approx(2 / 4)


def test_empty_schedule_places_no_constraint() -> None:
    assert overlap({}, {}) == 1.0
    assert overlap({"monday": frozenset({"morning"})}, {}) == 1.0


def test_empty_availability_yields_zero() -> None:
    assert overlap({}, {"sunday": frozenset({"afternoon"})}) == 0.0


def test_slot_tags_compare_case_insensitively() -> None:
    assert overlap({"Monday": ["Morning"]}, {"monday": ["morning"]}) == 1.0


def test_unknown_weekday_raises() -> None:
    with pytest.raises(InvalidArgument):
        slot_pairs({"funday": ["morning"]})


def test_slots_must_be_a_collection() -> None:
    with pytest.raises(InvalidArgument):
        slot_pairs({"monday": "morning"})
