from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from volunteer_match.errors import InvalidArgument

DEFAULT_SKILL_LEVELS: tuple[str, ...] = ("beginner", "intermediate", "advanced", "expert")

# rank of a skill the volunteer does not have at all
NO_LEVEL = -1


class SkillScale:
    """Ordered proficiency scale, lowest level first."""

    def __init__(self, levels: Iterable[str] = DEFAULT_SKILL_LEVELS) -> None:
        normalized = tuple(str(level).strip().lower() for level in levels)
        if not normalized or any(not level for level in normalized):
            raise InvalidArgument("skill scale needs at least one non-empty level")
        if len(set(normalized)) != len(normalized):
            raise InvalidArgument(f"skill scale has duplicate levels: {normalized}")
        self.levels = normalized
        self._ranks = {level: index for index, level in enumerate(normalized)}

    def rank(self, level: str) -> int:
        key = str(level).strip().lower()
        try:
            return self._ranks[key]
        except KeyError:
            raise InvalidArgument(
                f"unknown skill level {level!r}; expected one of {', '.join(self.levels)}"
            ) from None

    def __repr__(self) -> str:
        return f"SkillScale({list(self.levels)!r})"


@dataclass(frozen=True, slots=True)
class SkillMatch:
    fraction: float
    meets_minimum: bool
    met: int
    required: int
    missing: tuple[str, ...] = ()


def compatibility(
    volunteer_skills: Mapping[str, str],
    required_skills: Mapping[str, str],
    scale: SkillScale,
) -> SkillMatch:
    """Compare volunteer skill levels against minimum required levels.

    Exceeding a requirement earns no more than full credit for that skill.
    """
    held = {
        _skill_key(name): scale.rank(level)
        for name, level in volunteer_skills.items()
    }

    met = 0
    missing: list[str] = []
    for name, minimum in sorted(required_skills.items()):
        required_rank = scale.rank(minimum)
        if held.get(_skill_key(name), NO_LEVEL) >= required_rank:
            met += 1
        else:
            missing.append(name)

    required = len(required_skills)
    if required == 0:
        return SkillMatch(fraction=1.0, meets_minimum=True, met=0, required=0)

    return SkillMatch(
        fraction=met / required,
        meets_minimum=not missing,
        met=met,
        required=required,
        missing=tuple(missing),
    )


def _skill_key(name: str) -> str:
    return " ".join(str(name).split()).casefold()
