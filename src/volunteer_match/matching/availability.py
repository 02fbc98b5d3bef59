from __future__ import annotations

from typing import Mapping

from volunteer_match.errors import InvalidArgument
from volunteer_match.models import WEEKDAYS

_WEEKDAY_SET = frozenset(WEEKDAYS)


def slot_pairs(weekly: Mapping[str, object]) -> frozenset[tuple[str, str]]:
    """Flatten a weekday -> slots mapping into normalized (day, slot) pairs."""
    if not isinstance(weekly, Mapping):
        raise InvalidArgument(f"weekly slots must be a mapping, got {type(weekly).__name__}")

    pairs: set[tuple[str, str]] = set()
    for raw_day, raw_slots in weekly.items():
        day = str(raw_day).strip().lower()
        if day not in _WEEKDAY_SET:
            raise InvalidArgument(f"unknown weekday: {raw_day!r}")
        if isinstance(raw_slots, (str, bytes)) or not hasattr(raw_slots, "__iter__"):
            raise InvalidArgument(f"time slots for {day} must be a collection of tags")
        for raw_slot in raw_slots:
            slot = str(raw_slot).strip().lower()
            if slot:
                pairs.add((day, slot))
    return frozenset(pairs)


def overlap(availability: Mapping[str, object], schedule: Mapping[str, object]) -> float:
    """Share of the schedule's (day, slot) pairs the volunteer can cover.

    An empty schedule places no constraint and yields 1.0.
    """
    required = slot_pairs(schedule)
    offered = slot_pairs(availability)
    if not required:
        return 1.0
    if not offered:
        return 0.0
    return len(required & offered) / len(required)
