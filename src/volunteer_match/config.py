from __future__ import annotations

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from volunteer_match.errors import InvalidArgument
from volunteer_match.matching.scoring import FACTORS, ScoringWeights
from volunteer_match.matching.skills import DEFAULT_SKILL_LEVELS, SkillScale


class ConfigError(ValueError):
    """Raised when configuration is invalid."""


@dataclass(slots=True)
class SourceSettings:
    id: str
    type: str
    location: str
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ScoringSettings:
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    skill_levels: list[str] = field(default_factory=lambda: list(DEFAULT_SKILL_LEVELS))

    def scale(self) -> SkillScale:
        return SkillScale(self.skill_levels)


@dataclass(slots=True)
class FilterSettings:
    include_categories: list[str] = field(default_factory=list)
    min_score: float | None = None


@dataclass(slots=True)
class RankingSettings:
    default_limit: int = 10
    parallel_threshold: int = 2000
    max_workers: int | None = None


@dataclass(slots=True)
class StorageSettings:
    type: str = "sqlite"
    path: str = "data/matches.sqlite"
    record_matches: bool = True


@dataclass(slots=True)
class AppConfig:
    sources: list[SourceSettings] = field(default_factory=list)
    scoring: ScoringSettings = field(default_factory=ScoringSettings)
    filters: FilterSettings = field(default_factory=FilterSettings)
    ranking: RankingSettings = field(default_factory=RankingSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    log_level: str = "INFO"


def _as_string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"Expected a list of strings, got: {type(value)!r}")
    return [str(item).strip() for item in value if str(item).strip()]


def _as_bool(value: Any, *, field_name: str) -> bool:
    if isinstance(value, bool):
        return value

    if isinstance(value, int) and value in {0, 1}:
        return bool(value)

    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes", "on"}:
            return True
        if normalized in {"false", "0", "no", "off"}:
            return False

    raise ConfigError(f"{field_name} must be a boolean")


def _as_int(value: Any, *, field_name: str, minimum: int | None = None) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be an integer")

    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be an integer") from exc

    if minimum is not None and parsed < minimum:
        raise ConfigError(f"{field_name} must be >= {minimum}")
    return parsed


def _as_float(value: Any, *, field_name: str, minimum: float | None = None) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be a number")

    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be a number") from exc

    if not math.isfinite(parsed):
        raise ConfigError(f"{field_name} must be a finite number")
    if minimum is not None and parsed < minimum:
        raise ConfigError(f"{field_name} must be >= {minimum}")
    return parsed


def _as_mapping(value: Any, *, field_name: str) -> dict[str, Any]:
    value = value or {}
    if not isinstance(value, dict):
        raise ConfigError(f"{field_name} must be a mapping")
    return value


def _resolve_relative_path(config_path: Path, raw_path: str) -> str:
    candidate = Path(raw_path).expanduser()
    if candidate.is_absolute():
        return str(candidate)
    return str((config_path.parent / candidate).resolve())


def _parse_sources(config_path: Path, raw_sources: Any) -> list[SourceSettings]:
    if raw_sources is None:
        return []
    if not isinstance(raw_sources, list):
        raise ConfigError("sources must be a list")

    sources: list[SourceSettings] = []
    for index, source in enumerate(raw_sources, start=1):
        if not isinstance(source, dict):
            raise ConfigError(f"Source entry #{index} must be a mapping")

        source_id = str(source.get("id", "")).strip()
        source_type = str(source.get("type", "")).strip()
        url = str(source.get("url", "") or "").strip()
        path = str(source.get("path", "") or "").strip()
        if not source_id or not source_type or not (url or path):
            raise ConfigError(f"Source entry #{index} missing one of: id, type, url/path")

        options = {
            key: value
            for key, value in source.items()
            if key not in {"id", "type", "url", "path"}
        }

        sources.append(
            SourceSettings(
                id=source_id,
                type=source_type,
                location=url or _resolve_relative_path(config_path, path),
                options=options,
            )
        )

    seen_ids = [source.id for source in sources]
    duplicates = sorted({source_id for source_id in seen_ids if seen_ids.count(source_id) > 1})
    if duplicates:
        raise ConfigError(f"Duplicate source ids: {', '.join(duplicates)}")
    return sources


def _parse_scoring(raw_scoring: dict[str, Any]) -> ScoringSettings:
    raw_weights = _as_mapping(raw_scoring.get("weights"), field_name="scoring.weights")
    unknown = sorted(set(raw_weights) - set(FACTORS))
    if unknown:
        raise ConfigError(
            f"Unknown scoring factors: {', '.join(unknown)} (known: {', '.join(FACTORS)})"
        )

    defaults = ScoringWeights()
    weight_values = {
        name: _as_float(
            raw_weights.get(name, getattr(defaults, name)),
            field_name=f"scoring.weights.{name}",
            minimum=0,
        )
        for name in FACTORS
    }
    try:
        weights = ScoringWeights(**weight_values)
    except InvalidArgument as exc:
        raise ConfigError(f"scoring.weights: {exc}") from exc

    raw_levels = raw_scoring.get("skill_levels")
    skill_levels = (
        [level.lower() for level in _as_string_list(raw_levels)]
        if raw_levels is not None
        else list(DEFAULT_SKILL_LEVELS)
    )
    settings = ScoringSettings(weights=weights, skill_levels=skill_levels)
    try:
        settings.scale()
    except InvalidArgument as exc:
        raise ConfigError(f"scoring.skill_levels: {exc}") from exc
    return settings


def load_config(path: str | Path) -> AppConfig:
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        try:
            parsed = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Config file is not valid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ConfigError("Config root must be a mapping")

    sources = _parse_sources(config_path, parsed.get("sources"))
    scoring_settings = _parse_scoring(
        _as_mapping(parsed.get("scoring"), field_name="scoring")
    )

    raw_filters = _as_mapping(parsed.get("filters"), field_name="filters")
    min_score_raw = raw_filters.get("min_score")
    filter_settings = FilterSettings(
        include_categories=_as_string_list(raw_filters.get("include_categories")),
        min_score=(
            _as_float(min_score_raw, field_name="filters.min_score", minimum=0)
            if min_score_raw is not None
            else None
        ),
    )

    raw_ranking = _as_mapping(parsed.get("ranking"), field_name="ranking")
    max_workers_raw = raw_ranking.get("max_workers")
    ranking_settings = RankingSettings(
        default_limit=_as_int(
            raw_ranking.get("default_limit", 10),
            field_name="ranking.default_limit",
            minimum=1,
        ),
        parallel_threshold=_as_int(
            raw_ranking.get("parallel_threshold", 2000),
            field_name="ranking.parallel_threshold",
            minimum=1,
        ),
        max_workers=(
            _as_int(max_workers_raw, field_name="ranking.max_workers", minimum=1)
            if max_workers_raw is not None
            else None
        ),
    )

    raw_storage = _as_mapping(parsed.get("storage"), field_name="storage")
    storage_path = (
        str(raw_storage.get("path", "data/matches.sqlite")).strip() or "data/matches.sqlite"
    )
    storage_settings = StorageSettings(
        type=str(raw_storage.get("type", "sqlite")).strip() or "sqlite",
        path=_resolve_relative_path(config_path, storage_path),
        record_matches=_as_bool(
            raw_storage.get("record_matches", True),
            field_name="storage.record_matches",
        ),
    )

    return AppConfig(
        sources=sources,
        scoring=scoring_settings,
        filters=filter_settings,
        ranking=ranking_settings,
        storage=storage_settings,
        log_level=str(parsed.get("log_level", "INFO")).upper(),
    )
