from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable

from volunteer_match.models import Opportunity, OpportunityStatus


@dataclass(frozen=True, slots=True)
class OpportunityQuery:
    """Pre-filtering hint for sources; the engine does not rely on it."""

    categories: frozenset[str] = frozenset()
    statuses: frozenset[OpportunityStatus] = field(
        default_factory=lambda: frozenset({OpportunityStatus.ACTIVE})
    )
    limit: int | None = None

    def accepts(self, opportunity: Opportunity) -> bool:
        if self.statuses and opportunity.status not in self.statuses:
            return False
        if self.categories:
            wanted = {category.casefold() for category in self.categories}
            if not any(category.casefold() in wanted for category in opportunity.categories):
                return False
        return True

    def apply(self, opportunities: Iterable[Opportunity]) -> list[Opportunity]:
        selected = [opportunity for opportunity in opportunities if self.accepts(opportunity)]
        if self.limit is not None:
            selected = selected[: self.limit]
        return selected

    def as_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.categories:
            params["categories"] = ",".join(sorted(self.categories))
        if self.statuses:
            params["status"] = ",".join(sorted(status.value for status in self.statuses))
        if self.limit is not None:
            params["limit"] = str(self.limit)
        return params


class OpportunitySource(ABC):
    def __init__(self, source_id: str) -> None:
        self.source_id = source_id

    @abstractmethod
    def fetch(self, query: OpportunityQuery | None = None) -> list[Opportunity]:
        """Fetch a bounded list of opportunity snapshots."""
