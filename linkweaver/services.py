"""Service functions wrapping the injection engine.

These functions are the public surface of the package: they load
destination lists, run the injection engine against a rendered document and
read back the links it placed. Downstream consumers such as content QA read
injected anchors through :func:`extract_injected_links`, which relies on the
provenance marker and the escaped title attribute written by the engine.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

import yaml
from bs4 import BeautifulSoup, FeatureNotFound  # type: ignore

from .engine.config import EngineConfig, LinkweaverError, load_config
from .engine.filters import coerce_target
from .engine.index import inject_links
from .engine.placement import PROVENANCE_ATTRIBUTE, PROVENANCE_MARKER, SCORE_ATTRIBUTE
from .engine.types import InjectedLink, InjectionResult, LinkTarget


class TargetLoadError(LinkweaverError):
    """Raised when a destinations file cannot be read or has the wrong shape."""


def inject_internal_links(
    html: str,
    links: Iterable[Any],
    current_url: str = "",
    options: Optional[Mapping[str, Any]] = None,
    *,
    config: EngineConfig | str | Path | None = None,
) -> InjectionResult:
    """Insert semantic internal links into ``html``.

    Parameters
    ----------
    html:
        Rendered markup to enrich. It does not need to be a well-formed tree.
    links:
        Destination pages as ``LinkTarget`` objects or ``{url, title}``
        mappings, already ordered by topical relevance.
    current_url:
        URL of the page being edited; links back to it are never inserted.
    options:
        Per-call overrides (``minLinks``, ``maxLinks``, ``minRelevance``,
        ``linkStyle``, ``minDistanceBetweenLinks``, ``maxLinksPerSection`` or
        their snake_case equivalents).
    config:
        An ``EngineConfig`` or a path to a YAML file merged over the defaults.

    Returns
    -------
    InjectionResult
        The enriched document, the insertions made and a skip reason per
        destination that was not linked.
    """

    engine_config = config if isinstance(config, EngineConfig) else load_config(config)
    return inject_links(html, links, current_url, options, engine_config)


def _parse(html: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html, "lxml")
    except FeatureNotFound:
        return BeautifulSoup(html, "html.parser")


def extract_injected_links(html: str) -> List[InjectedLink]:
    """Return every anchor in ``html`` carrying the semantic provenance marker."""

    if not html:
        return []

    soup = _parse(html)
    found: List[InjectedLink] = []
    for anchor in soup.find_all("a", attrs={PROVENANCE_ATTRIBUTE: PROVENANCE_MARKER}):
        raw_score = anchor.get(SCORE_ATTRIBUTE)
        try:
            score = float(raw_score) if raw_score is not None else None
        except ValueError:
            score = None
        found.append(
            InjectedLink(
                url=anchor.get("href", ""),
                title=anchor.get("title", ""),
                text=" ".join(anchor.get_text().split()),
                score=score,
            )
        )
    return found


def strip_injected_links(html: str) -> str:
    """Remove injected semantic anchors while preserving their inner content.

    The document is re-serialized through BeautifulSoup's ``html.parser``
    tree, so markup outside the unwrapped anchors comes back normalized
    (void elements as ``<br/>``, attribute quoting). ``html.parser`` is used
    instead of lxml so that a fragment stays a fragment and is not wrapped in
    ``<html><body>``.
    """

    if not html:
        return html

    soup = BeautifulSoup(html, "html.parser")
    for anchor in soup.find_all("a", attrs={PROVENANCE_ATTRIBUTE: PROVENANCE_MARKER}):
        anchor.unwrap()
    return str(soup)


def load_targets(path: str | Path) -> List[LinkTarget]:
    """Load destinations from a YAML or JSON file.

    The file holds a list of ``{url, title}`` mappings, or a mapping with a
    ``links`` key holding that list.
    """

    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise TargetLoadError(f"Could not read {source}: {exc}") from exc

    try:
        if source.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise TargetLoadError(f"Could not parse {source}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("links")
    if not isinstance(data, list):
        raise TargetLoadError(f"{source} must contain a list of {{url, title}} entries")

    targets: List[LinkTarget] = []
    for position, item in enumerate(data, start=1):
        target = coerce_target(item)
        if target is None:
            raise TargetLoadError(f"Entry {position} in {source} needs at least a url")
        targets.append(target)
    return targets
