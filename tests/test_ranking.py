from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from volunteer_match import InvalidArgument, MatchRanker, rank
from volunteer_match.matching.scoring import ScoreCalculator, ScoringWeights
from volunteer_match.models import (
    Coordinate,
    Opportunity,
    OpportunityStatus,
    VolunteerProfile,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
SAO_PAULO = Coordinate(-23.5505, -46.6333)
SIXTY_KM_NORTH = Coordinate(-23.0105, -46.6333)


def _volunteer(**overrides: object) -> VolunteerProfile:
    base = VolunteerProfile(
        id="vol-1",
        categories=frozenset({"Environmental"}),
        max_distance_km=10.0,
        location=SAO_PAULO,
        availability={"monday": frozenset({"morning"})},
        skills={},
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


def _ids(ranking) -> list[str]:
    return [result.opportunity_id for result in ranking.results]


def test_perfect_match_is_returned_with_full_score() -> None:
    ranking = rank(_volunteer(), [_opportunity()], NOW, 10)

    assert _ids(ranking) == ["opp-1"]
    assert ranking.results[0].score == 100.0
    assert ranking.considered == 1
    assert ranking.eligible == 1
    assert ranking.warnings == []


def test_category_mismatch_is_excluded_not_low_scored() -> None:
    ranking = rank(_volunteer(), [_opportunity(categories=frozenset({"Health"}))], NOW, 10)

    assert ranking.results == []
    assert ranking.eligible == 0


def test_distance_cutoff_excludes_far_opportunities() -> None:
    ranking = rank(_volunteer(), [_opportunity(location=SIXTY_KM_NORTH)], NOW, 10)

    assert ranking.results == []


def test_capacity_breaks_ties_between_equal_scores() -> None:
    ranker = MatchRanker(
        calculator=ScoreCalculator(ScoringWeights(capacity=0)),
    )
    crowded = _opportunity(id="a-crowded", current_volunteers=9)
    empty = _opportunity(id="b-empty", current_volunteers=0)

    ranking = ranker.rank(_volunteer(), [crowded, empty], NOW, 10)

    assert ranking.results[0].score == ranking.results[1].score
    assert _ids(ranking) == ["b-empty", "a-crowded"]


def test_capacity_also_lifts_score_with_default_weights() -> None:
    crowded = _opportunity(id="a-crowded", current_volunteers=9)
    empty = _opportunity(id="b-empty", current_volunteers=0)

    ranking = rank(_volunteer(), [crowded, empty], NOW, 10)

    assert _ids(ranking) == ["b-empty", "a-crowded"]
    assert ranking.results[0].score > ranking.results[1].score


def test_earlier_start_then_id_break_remaining_ties() -> None:
    later = _opportunity(id="a-later", start_date=NOW + timedelta(days=20))
    sooner = _opportunity(id="z-sooner", start_date=NOW + timedelta(days=2))
    same_start_b = _opportunity(id="m-b", start_date=NOW + timedelta(days=10))
    same_start_a = _opportunity(id="m-a", start_date=NOW + timedelta(days=10))

    ranking = rank(_volunteer(), [later, same_start_b, sooner, same_start_a], NOW, 10)

    assert _ids(ranking) == ["z-sooner", "m-a", "m-b", "a-later"]


def test_results_are_sorted_and_limited() -> None:
    opportunities = [
        _opportunity(id="full-schedule"),
        _opportunity(id="half-schedule", schedule={"monday": ["morning", "evening"]}),
        _opportunity(id="no-overlap", schedule={"friday": ["night"]}),
    ]

    ranking = rank(_volunteer(), opportunities, NOW, 2)

    assert _ids(ranking) == ["full-schedule", "half-schedule"]
    scores = [result.score for result in ranking.results]
    assert scores == sorted(scores, reverse=True)
    assert ranking.eligible == 3


def test_ranking_is_deterministic_regardless_of_input_order() -> None:
    opportunities = [
        _opportunity(id=f"opp-{index}", current_volunteers=index % 4, start_date=NOW + timedelta(days=index % 3))
        for index in range(12)
    ]

    first = rank(_volunteer(), opportunities, NOW, 12)
    second = rank(_volunteer(), list(reversed(opportunities)), NOW, 12)

    assert json.dumps([r.to_dict() for r in first.results]) == json.dumps(
        [r.to_dict() for r in second.results]
    )


def test_computed_at_is_the_supplied_now() -> None:
    ranking = rank(_volunteer(), [_opportunity()], NOW, 1)

    assert ranking.results[0].computed_at == NOW


def test_volunteer_without_categories_gets_no_results() -> None:
    ranking = rank(_volunteer(categories=frozenset()), [_opportunity()], NOW, 10)

    assert ranking.results == []


@pytest.mark.parametrize("limit", [0, -1, True, 2.5])
def test_invalid_limit_raises(limit: object) -> None:
    with pytest.raises(InvalidArgument):
        rank(_volunteer(), [_opportunity()], NOW, limit)  # type: ignore[arg-type]


def test_malformed_volunteer_raises() -> None:
    with pytest.raises(InvalidArgument):
        rank(_volunteer(max_distance_km=0), [_opportunity()], NOW, 10)
    with pytest.raises(InvalidArgument):
        rank(_volunteer(location=Coordinate(95.0, 0.0)), [_opportunity()], NOW, 10)


def test_malformed_opportunity_is_skipped_with_warning() -> None:
    broken = _opportunity(id="broken", max_volunteers=0)
    backwards = _opportunity(
        id="backwards",
        start_date=NOW + timedelta(days=5),
        end_date=NOW + timedelta(days=1),
    )

    ranking = rank(_volunteer(), [broken, _opportunity(), backwards], NOW, 10)

    assert _ids(ranking) == ["opp-1"]
    assert len(ranking.warnings) == 2
    assert "broken" in ranking.warnings[0]
    assert ranking.considered == 3


def test_structurally_wrong_opportunities_are_skipped_with_warning() -> None:
    opportunities = [
        _opportunity(id="list-skills", required_skills=["python"]),
        _opportunity(id="tuple-location", location=(-23.5, -46.6)),
        None,
        _opportunity(),
    ]

    ranking = rank(_volunteer(), opportunities, NOW, 10)

    assert _ids(ranking) == ["opp-1"]
    assert len(ranking.warnings) == 3
    assert "list-skills" in ranking.warnings[0]
    assert "tuple-location" in ranking.warnings[1]
    assert ranking.considered == 4


@pytest.mark.parametrize(
    "overrides",
    [
        {"skills": ["python"]},
        {"skills": {3: "beginner"}},
        {"location": (-23.5, -46.6)},
    ],
)
def test_structurally_wrong_volunteer_raises_invalid_argument(overrides: dict[str, object]) -> None:
    with pytest.raises(InvalidArgument):
        rank(_volunteer(**overrides), [_opportunity()], NOW, 10)


def test_non_volunteer_input_raises_invalid_argument() -> None:
    with pytest.raises(InvalidArgument):
        rank(None, [_opportunity()], NOW, 10)  # type: ignore[arg-type]


def test_min_score_drops_weak_matches() -> None:
    opportunities = [
        _opportunity(id="strong"),
        _opportunity(id="weak", schedule={"friday": ["night"]}),
    ]

    ranking = MatchRanker(min_score=90).rank(_volunteer(), opportunities, NOW, 10)

    assert _ids(ranking) == ["strong"]


def test_parallel_scoring_matches_sequential() -> None:
    opportunities = [
        _opportunity(
            id=f"opp-{index:02d}",
            current_volunteers=index % 5,
            schedule={"monday": ["morning"], "tuesday": ["evening"]} if index % 2 else {},
        )
        for index in range(20)
    ]

    sequential = MatchRanker().rank(_volunteer(), opportunities, NOW, 20)
    parallel = MatchRanker(parallel_threshold=2, max_workers=2).rank(
        _volunteer(), opportunities, NOW, 20
    )

    assert [r.to_dict() for r in parallel.results] == [r.to_dict() for r in sequential.results]


def test_rank_volunteers_orders_by_score_then_id() -> None:
    opportunity = _opportunity(schedule={"monday": ["morning", "evening"]})
    volunteers = [
        _volunteer(id="vol-b"),
        _volunteer(id="vol-a"),
        _volunteer(id="vol-c", availability={"monday": ["morning", "evening"]}),
        _volunteer(id="vol-far", location=SIXTY_KM_NORTH),
    ]

    ranking = MatchRanker().rank_volunteers(opportunity, volunteers, NOW, 10)

    assert [result.volunteer_id for result in ranking.results] == ["vol-c", "vol-a", "vol-b"]
    assert ranking.considered == 4
    assert ranking.eligible == 3
