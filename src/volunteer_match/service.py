from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from volunteer_match.matching.ranking import MatchExplanation, MatchRanker
from volunteer_match.matching.stats import MatchingStats, compute_stats
from volunteer_match.models import MatchResult, Opportunity, VolunteerProfile
from volunteer_match.sources import OpportunityQuery, OpportunitySource
from volunteer_match.store import MatchStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RecommendationRun:
    results: list[MatchResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    fetched: int = 0
    duplicates: int = 0
    considered: int = 0
    eligible: int = 0
    saved: int = 0
    opportunities: dict[str, Opportunity] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class MatchingService:
    """Caller-side orchestration: sources -> ranker -> match store."""

    def __init__(
        self,
        *,
        sources: list[OpportunitySource],
        ranker: MatchRanker,
        store: MatchStore | None,
        default_limit: int = 10,
        dry_run: bool = False,
    ) -> None:
        self.sources = sources
        self.ranker = ranker
        self.store = store
        self.default_limit = default_limit
        self.dry_run = dry_run

    def recommend(
        self,
        volunteer: VolunteerProfile,
        *,
        now: datetime,
        limit: int | None = None,
    ) -> RecommendationRun:
        run = RecommendationRun()
        query = OpportunityQuery(categories=frozenset(volunteer.categories))
        opportunities = self._collect(run, query)
        run.opportunities = {opportunity.id: opportunity for opportunity in opportunities}

        if limit is None:
            limit = self.default_limit
        ranking = self.ranker.rank(volunteer, opportunities, now, limit)
        run.results = ranking.results
        run.warnings.extend(ranking.warnings)
        run.considered = ranking.considered
        run.eligible = ranking.eligible

        if self.dry_run or self.store is None:
            return run

        for result in run.results:
            try:
                self.store.save(result)
            except Exception as exc:  # noqa: BLE001
                message = (
                    f"failed to save match {result.volunteer_id}/{result.opportunity_id}: {exc}"
                )
                logger.exception(message)
                run.errors.append(message)
                continue
            run.saved += 1

        return run

    def candidates_for(
        self,
        opportunity: Opportunity,
        volunteers: Sequence[VolunteerProfile],
        *,
        now: datetime,
        limit: int | None = None,
    ) -> RecommendationRun:
        run = RecommendationRun()
        if limit is None:
            limit = self.default_limit
        ranking = self.ranker.rank_volunteers(opportunity, volunteers, now, limit)
        run.results = ranking.results
        run.warnings.extend(ranking.warnings)
        run.considered = ranking.considered
        run.eligible = ranking.eligible
        return run

    def explain(
        self,
        volunteer: VolunteerProfile,
        opportunity: Opportunity,
        *,
        now: datetime,
    ) -> MatchExplanation:
        explanation = self.ranker.explain(volunteer, opportunity, now)
        logger.debug(
            "Explained %s/%s | eligible=%s reasons=%s",
            volunteer.id,
            opportunity.id,
            explanation.eligible,
            explanation.eligibility.reason_text(),
        )
        return explanation

    def find_opportunity(self, opportunity_id: str) -> Opportunity | None:
        query = OpportunityQuery(statuses=frozenset())
        for opportunity in self._collect(RecommendationRun(), query):
            if opportunity.id == opportunity_id:
                return opportunity
        return None

    def stats(self, volunteers: Sequence[VolunteerProfile], *, now: datetime) -> MatchingStats:
        opportunities = self._collect(RecommendationRun(), OpportunityQuery(statuses=frozenset()))
        return compute_stats(volunteers, opportunities, now)

    def _collect(self, run: RecommendationRun, query: OpportunityQuery) -> list[Opportunity]:
        collected: list[Opportunity] = []
        seen_ids: set[str] = set()

        for source in self.sources:
            try:
                opportunities = source.fetch(query)
            except Exception as exc:  # noqa: BLE001
                message = f"source {source.source_id} fetch failed: {exc}"
                logger.exception(message)
                run.errors.append(message)
                continue

            logger.info("Source %s returned %d opportunities", source.source_id, len(opportunities))
            run.fetched += len(opportunities)

            for opportunity in opportunities:
                if opportunity.id in seen_ids:
                    run.duplicates += 1
                    continue
                seen_ids.add(opportunity.id)
                collected.append(opportunity)

        return collected
