from __future__ import annotations

import pytest

from volunteer_match.errors import InvalidArgument
from volunteer_match.matching.skills import SkillScale, compatibility

SCALE = SkillScale()


def test_no_requirements_is_full_credit() -> None:
    match = compatibility({"cooking": "beginner"}, {}, SCALE)

    assert match.fraction == 1.0
    assert match.meets_minimum is True


def test_exceeding_a_requirement_is_capped() -> None:
    match = compatibility(
        {"teaching": "expert", "mathematics": "expert"},
        {"teaching": "beginner", "mathematics": "intermediate"},
        SCALE,
    )

    assert match.fraction == 1.0
    assert match.met == 2
    assert match.meets_minimum is True


def test_level_below_minimum_and_missing_skill_are_not_met() -> None:
    match = compatibility(
        {"javascript": "intermediate", "git": "advanced"},
        {"javascript": "advanced", "git": "intermediate", "react": "beginner", "html": "beginner"},
        SCALE,
    )

    assert match.met == 1
    assert match.required == 4
    assert match.fraction == pytest.approx(0.25)
    assert match.meets_minimum is False
    assert match.missing == ("html", "javascript", "react")


def test_skill_names_compare_case_insensitively() -> None:
    match = compatibility({"First  Aid": "advanced"}, {"first aid": "advanced"}, SCALE)

    assert match.meets_minimum is True


def test_unknown_level_raises() -> None:
    with pytest.raises(InvalidArgument):
        compatibility({"teaching": "guru"}, {"teaching": "beginner"}, SCALE)


def test_custom_scale_ordering() -> None:
    scale = SkillScale(["novice", "skilled", "master"])

    assert scale.rank("Master") > scale.rank("skilled") > scale.rank("novice")
    assert compatibility({"sewing": "skilled"}, {"sewing": "master"}, scale).meets_minimum is False


def test_scale_rejects_duplicates() -> None:
    with pytest.raises(InvalidArgument):
        SkillScale(["low", "high", "Low"])
