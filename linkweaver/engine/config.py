"""Configuration helpers for the link injection engine."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)


class LinkweaverError(Exception):
    """Base class for errors raised at the package boundary."""


class ConfigError(LinkweaverError):
    """Raised when a configuration file or option value is unusable."""


DEFAULT_LINK_STYLE = (
    "color: #3b82f6; text-decoration: none; font-weight: 600; "
    "border-bottom: 2px solid rgba(59, 130, 246, 0.3); "
    "transition: all 0.2s ease; padding-bottom: 1px;"
)


@dataclass(frozen=True)
class EngineConfig:
    """Typed wrapper around the engine configuration dictionary."""

    raw: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.raw.get(key, default)


DEFAULTS: Dict[str, Any] = {
    "min_links": 12,
    "max_links": 25,
    "min_relevance": 0.55,
    "relevance_threshold": 0.55,
    "link_style": DEFAULT_LINK_STYLE,
    "min_distance_between_links": 500,
    "max_links_per_section": 2,
    "max_anchor_candidates": 12,
    "min_title_length": 10,
    "generic_titles": ["home"],
    "exact_match_score": 0.95,
    "min_sentence_length": 40,
    "boundary_expansion_limit": 20,
    "length_tolerance": [0.6, 1.8],
}


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load configuration from YAML, merging with defaults."""

    data: Dict[str, Any] = copy.deepcopy(DEFAULTS)

    if path is not None and Path(path).exists():
        with Path(path).open("r", encoding="utf-8") as stream:
            try:
                user = yaml.safe_load(stream) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"Could not parse {path}: {exc}") from exc
        if not isinstance(user, dict):
            raise ConfigError(f"{path} must contain a mapping at the top level")
        merge_into(data, user)
    elif path is not None:
        logger.debug("Config file %s not found, using defaults", path)

    return EngineConfig(data)


def merge_into(base: Dict[str, Any], override: Mapping[str, Any]) -> None:
    """Recursively merge override into base dict."""

    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merge_into(base[key], value)
        else:
            base[key] = value


# Caller-facing option names as they appear in the public contract.
_OPTION_ALIASES = {
    "minLinks": "min_links",
    "maxLinks": "max_links",
    "minRelevance": "min_relevance",
    "linkStyle": "link_style",
    "minDistanceBetweenLinks": "min_distance_between_links",
    "maxLinksPerSection": "max_links_per_section",
}


@dataclass(frozen=True)
class InjectionOptions:
    """Per-call options resolved from configuration plus caller overrides."""

    min_links: int
    max_links: int
    min_relevance: float
    link_style: str
    min_distance_between_links: int
    max_links_per_section: int
    relevance_threshold: float = 0.55
    max_anchor_candidates: int = 12
    min_title_length: int = 10
    generic_titles: frozenset = frozenset({"home"})
    exact_match_score: float = 0.95
    min_sentence_length: int = 40
    boundary_expansion_limit: int = 20
    length_tolerance: tuple = (0.6, 1.8)

    @classmethod
    def from_config(
        cls,
        config: Optional[EngineConfig] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> "InjectionOptions":
        engine_config = config or load_config(None)
        values = dict(engine_config.raw)
        for key, value in (overrides or {}).items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in DEFAULTS:
                logger.debug("Ignoring unknown injection option %r", key)
                continue
            if value is None:
                continue
            values[name] = value

        try:
            options = cls(
                min_links=int(values["min_links"]),
                max_links=int(values["max_links"]),
                min_relevance=float(values["min_relevance"]),
                link_style=str(values["link_style"]),
                min_distance_between_links=int(values["min_distance_between_links"]),
                max_links_per_section=int(values["max_links_per_section"]),
                relevance_threshold=float(values["relevance_threshold"]),
                max_anchor_candidates=int(values["max_anchor_candidates"]),
                min_title_length=int(values["min_title_length"]),
                generic_titles=frozenset(str(title).lower() for title in values["generic_titles"]),
                exact_match_score=float(values["exact_match_score"]),
                min_sentence_length=int(values["min_sentence_length"]),
                boundary_expansion_limit=int(values["boundary_expansion_limit"]),
                length_tolerance=tuple(float(bound) for bound in values["length_tolerance"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid injection option: {exc}") from exc

        if options.max_links < 0 or options.min_links < 0:
            raise ConfigError("min_links and max_links must not be negative")
        if options.max_links_per_section < 0 or options.min_distance_between_links < 0:
            raise ConfigError("max_links_per_section and min_distance_between_links must not be negative")
        if len(options.length_tolerance) != 2 or options.length_tolerance[0] > options.length_tolerance[1]:
            raise ConfigError("length_tolerance must be a [low, high] pair")
        return options
