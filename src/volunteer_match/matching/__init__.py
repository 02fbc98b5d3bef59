"""Pure scoring primitives. Ranking lives in ``volunteer_match.matching.ranking``."""

from .availability import overlap, slot_pairs
from .geo import distance_km, validate_coordinate
from .scoring import FACTORS, ScoreCalculator, ScoringWeights
from .skills import SkillMatch, SkillScale, compatibility

__all__ = [
    "FACTORS",
    "ScoreCalculator",
    "ScoringWeights",
    "SkillMatch",
    "SkillScale",
    "compatibility",
    "distance_km",
    "overlap",
    "slot_pairs",
    "validate_coordinate",
]
