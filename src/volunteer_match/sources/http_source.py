from __future__ import annotations

import logging

import requests

from volunteer_match.config import SourceSettings
from volunteer_match.loaders import parse_opportunities, records_from_document
from volunteer_match.matching.skills import SkillScale
from volunteer_match.models import Opportunity

from .base import OpportunityQuery, OpportunitySource
from .registry import register_source

logger = logging.getLogger(__name__)


class HttpOpportunitySource(OpportunitySource):
    """Opportunities from a JSON endpoint of the opportunity store."""

    def __init__(self, settings: SourceSettings, scale: SkillScale | None = None) -> None:
        super().__init__(source_id=settings.id)
        self.url = settings.location
        self.scale = scale or SkillScale()
        timeout_raw = settings.options.get("timeout_seconds", 30)
        self.timeout_seconds = int(timeout_raw) if timeout_raw is not None else 30

    def fetch(self, query: OpportunityQuery | None = None) -> list[Opportunity]:
        headers = {
            "Accept": "application/json",
            "User-Agent": "volunteer-match/0.1",
        }
        response = requests.get(
            self.url,
            params=query.as_params() if query is not None else None,
            timeout=self.timeout_seconds,
            headers=headers,
        )
        response.raise_for_status()

        records = records_from_document(response.json(), "opportunities")
        opportunities = parse_opportunities(records, self.scale, origin=self.source_id)
        if len(opportunities) != len(records):
            logger.warning(
                "Source %s returned %d malformed records",
                self.source_id,
                len(records) - len(opportunities),
            )
        if query is None:
            return opportunities
        # the endpoint may ignore the hints
        return query.apply(opportunities)


@register_source("http")
def _build_http_source(settings: SourceSettings, scale: SkillScale) -> OpportunitySource:
    return HttpOpportunitySource(settings, scale)
