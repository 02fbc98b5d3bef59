from __future__ import annotations

import logging
import math
import os
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Iterable, Sequence

from volunteer_match.errors import InvalidArgument
from volunteer_match.filters import CandidateFilter, Filter, FilterResult
from volunteer_match.models import MatchResult, Opportunity, VolunteerProfile
from volunteer_match.utils.datetime_utils import to_utc

from .scoring import ScoreCalculator
from .validation import validate_limit, validate_opportunity, validate_volunteer

logger = logging.getLogger(__name__)

DEFAULT_PARALLEL_THRESHOLD = 2000


@dataclass(slots=True)
class Ranking:
    results: list[MatchResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    considered: int = 0
    eligible: int = 0


@dataclass(slots=True)
class MatchExplanation:
    """Why a single pair is or is not recommended."""

    eligibility: FilterResult
    result: MatchResult | None = None

    @property
    def eligible(self) -> bool:
        return self.eligibility.matched

    def to_dict(self) -> dict[str, object]:
        return {
            "eligible": self.eligible,
            "reasons": list(self.eligibility.reasons),
            "distance_km": self.eligibility.distance_km,
            "result": self.result.to_dict() if self.result is not None else None,
        }


class MatchRanker:
    def __init__(
        self,
        *,
        calculator: ScoreCalculator | None = None,
        candidate_filter: Filter | None = None,
        min_score: float | None = None,
        parallel_threshold: int = DEFAULT_PARALLEL_THRESHOLD,
        max_workers: int | None = None,
    ) -> None:
        self.calculator = calculator or ScoreCalculator()
        self.candidate_filter = candidate_filter or CandidateFilter(self.calculator.scale)
        self.min_score = min_score
        self.parallel_threshold = parallel_threshold
        self.max_workers = max_workers

    def rank(
        self,
        volunteer: VolunteerProfile,
        opportunities: Iterable[Opportunity],
        now: datetime,
        limit: int,
    ) -> Ranking:
        validate_limit(limit)
        validate_volunteer(volunteer, self.calculator.scale)

        ranking = Ranking()
        candidates: list[Opportunity] = []
        for opportunity in opportunities:
            ranking.considered += 1
            try:
                validate_opportunity(opportunity, self.calculator.scale)
            except InvalidArgument as exc:
                message = f"skipped opportunity {getattr(opportunity, 'id', None)!r}: {exc}"
                logger.warning(message)
                ranking.warnings.append(message)
                continue

            if self.candidate_filter.eligible(volunteer, opportunity, now):
                candidates.append(opportunity)

        ranking.eligible = len(candidates)
        scored = self._score_all(volunteer, candidates, now)
        if self.min_score is not None:
            scored = [item for item in scored if item[0].score >= self.min_score]

        scored.sort(key=_opportunity_order)
        ranking.results = [result for result, _ in scored[:limit]]

        logger.debug(
            "Ranked volunteer %s | considered=%d eligible=%d returned=%d skipped=%d",
            volunteer.id,
            ranking.considered,
            ranking.eligible,
            len(ranking.results),
            len(ranking.warnings),
        )
        return ranking

    def rank_volunteers(
        self,
        opportunity: Opportunity,
        volunteers: Iterable[VolunteerProfile],
        now: datetime,
        limit: int,
    ) -> Ranking:
        """Rank volunteers for a single opportunity."""
        validate_limit(limit)
        validate_opportunity(opportunity, self.calculator.scale)

        ranking = Ranking()
        scored: list[MatchResult] = []
        for volunteer in volunteers:
            ranking.considered += 1
            try:
                validate_volunteer(volunteer, self.calculator.scale)
            except InvalidArgument as exc:
                message = f"skipped volunteer {getattr(volunteer, 'id', None)!r}: {exc}"
                logger.warning(message)
                ranking.warnings.append(message)
                continue

            if not self.candidate_filter.eligible(volunteer, opportunity, now):
                continue
            ranking.eligible += 1

            result = self.calculator.score(volunteer, opportunity, now)
            if self.min_score is None or result.score >= self.min_score:
                scored.append(result)

        scored.sort(key=lambda result: (-result.score, result.volunteer_id))
        ranking.results = scored[:limit]
        return ranking

    def explain(
        self,
        volunteer: VolunteerProfile,
        opportunity: Opportunity,
        now: datetime,
    ) -> MatchExplanation:
        """Evaluate one pair, scoring it only when it passes the eligibility gate."""
        validate_volunteer(volunteer, self.calculator.scale)
        validate_opportunity(opportunity, self.calculator.scale)

        eligibility = self.candidate_filter.evaluate(volunteer, opportunity, now)
        if not eligibility.matched:
            return MatchExplanation(eligibility=eligibility)
        return MatchExplanation(
            eligibility=eligibility,
            result=self.calculator.score(volunteer, opportunity, now),
        )

    def _score_all(
        self,
        volunteer: VolunteerProfile,
        candidates: Sequence[Opportunity],
        now: datetime,
    ) -> list[tuple[MatchResult, Opportunity]]:
        if len(candidates) < self.parallel_threshold or self.max_workers == 1:
            return [
                (self.calculator.score(volunteer, opportunity, now), opportunity)
                for opportunity in candidates
            ]

        workers = self.max_workers or os.cpu_count() or 1
        chunksize = max(1, math.ceil(len(candidates) / (workers * 4)))
        logger.debug(
            "Scoring %d candidates across %d processes (chunksize=%d)",
            len(candidates),
            workers,
            chunksize,
        )
        score_one = partial(_score_one, self.calculator, volunteer, now)
        with ProcessPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(score_one, candidates, chunksize=chunksize))
        return list(zip(results, candidates))


def rank(
    volunteer: VolunteerProfile,
    opportunities: Iterable[Opportunity],
    now: datetime,
    limit: int,
) -> Ranking:
    return MatchRanker().rank(volunteer, opportunities, now, limit)


def _score_one(
    calculator: ScoreCalculator,
    volunteer: VolunteerProfile,
    now: datetime,
    opportunity: Opportunity,
) -> MatchResult:
    return calculator.score(volunteer, opportunity, now)


def _opportunity_order(item: tuple[MatchResult, Opportunity]) -> tuple:
    result, opportunity = item
    return (
        -result.score,
        -opportunity.capacity_headroom,
        to_utc(opportunity.start_date),
        opportunity.id,
    )
