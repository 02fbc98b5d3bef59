from __future__ import annotations

import logging
from pathlib import Path

from volunteer_match.config import SourceSettings
from volunteer_match.loaders import load_document, parse_opportunities, records_from_document
from volunteer_match.matching.skills import SkillScale
from volunteer_match.models import Opportunity

from .base import OpportunityQuery, OpportunitySource
from .registry import register_source

logger = logging.getLogger(__name__)


class FileOpportunitySource(OpportunitySource):
    """Opportunities from a local YAML or JSON export, re-read on every fetch."""

    def __init__(self, settings: SourceSettings, scale: SkillScale | None = None) -> None:
        super().__init__(source_id=settings.id)
        self.path = Path(settings.location)
        self.scale = scale or SkillScale()

    def fetch(self, query: OpportunityQuery | None = None) -> list[Opportunity]:
        records = records_from_document(load_document(self.path), "opportunities")
        opportunities = parse_opportunities(records, self.scale, origin=self.source_id)
        logger.debug(
            "Loaded %d/%d opportunities from %s", len(opportunities), len(records), self.path
        )
        if query is None:
            return opportunities
        return query.apply(opportunities)


@register_source("file")
def _build_file_source(settings: SourceSettings, scale: SkillScale) -> OpportunitySource:
    return FileOpportunitySource(settings, scale)
