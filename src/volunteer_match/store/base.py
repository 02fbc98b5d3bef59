from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from volunteer_match.models import MatchResult


@dataclass(slots=True)
class MatchRecord:
    volunteer_id: str
    opportunity_id: str
    score: float
    reasons: list[dict[str, object]]
    computed_at: datetime
    saved_at: datetime


class MatchStore(ABC):
    @abstractmethod
    def init_db(self) -> None:
        """Create any required schema."""

    @abstractmethod
    def save(self, result: MatchResult) -> None:
        """Persist one emitted match result for audit history."""

    @abstractmethod
    def history(self, volunteer_id: str, limit: int = 50) -> list[MatchRecord]:
        """Return the most recent records for a volunteer, newest first."""
