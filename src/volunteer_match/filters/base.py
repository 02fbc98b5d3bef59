from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime

from volunteer_match.models import Opportunity, VolunteerProfile


@dataclass(slots=True)
class FilterResult:
    matched: bool
    reasons: list[str] = field(default_factory=list)
    distance_km: float | None = None

    def reason_text(self) -> str:
        return "; ".join(self.reasons) if self.reasons else "no specific reason"


class Filter(ABC):
    @abstractmethod
    def evaluate(
        self,
        volunteer: VolunteerProfile,
        opportunity: Opportunity,
        now: datetime,
    ) -> FilterResult:
        """Evaluate a pair and return the eligibility decision with reasons."""

    def eligible(
        self,
        volunteer: VolunteerProfile,
        opportunity: Opportunity,
        now: datetime,
    ) -> bool:
        return self.evaluate(volunteer, opportunity, now).matched
