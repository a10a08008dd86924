"""Guardrails and ranking for link destinations."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .config import InjectionOptions
from .types import LinkTarget


def coerce_target(item: Any) -> Optional[LinkTarget]:
    """Accept a ``LinkTarget`` or a ``{url, title}`` mapping."""

    if isinstance(item, LinkTarget):
        return item
    if isinstance(item, Mapping):
        url = item.get("url")
        title = item.get("title")
        if url is None:
            return None
        return LinkTarget(url=str(url).strip(), title=str(title or "").strip())
    return None


def same_url(first: str, second: str) -> bool:
    if not first or not second:
        return False
    return first.strip().rstrip("/").lower() == second.strip().rstrip("/").lower()


def rejection_reason(target: LinkTarget, current_url: str, options: InjectionOptions) -> Optional[str]:
    """Return why the destination must not be linked, or ``None`` when it is allowed."""

    if not target.url:
        return "Missing destination URL"
    if same_url(target.url, current_url):
        return "Self-referencing URL"
    if not target.title or len(target.title) < options.min_title_length:
        return f"Title shorter than {options.min_title_length} characters"
    if target.title.strip().lower() in options.generic_titles:
        return f'Generic placeholder title "{target.title}"'
    return None


def importance(target: LinkTarget) -> int:
    """Coarse priority; longer, more descriptive titles first."""

    return 70 if len(target.title) > 30 else 50


def filter_destinations(
    destinations: Iterable[Any],
    current_url: str,
    options: InjectionOptions,
) -> Tuple[List[LinkTarget], Dict[str, str]]:
    """Drop unusable destinations and rank the rest (stable on ties)."""

    kept: List[LinkTarget] = []
    skipped: Dict[str, str] = {}
    for item in destinations:
        target = coerce_target(item)
        if target is None:
            continue
        reason = rejection_reason(target, current_url, options)
        if reason:
            skipped[target.url or "<missing>"] = reason
            continue
        kept.append(target)

    kept.sort(key=importance, reverse=True)
    return kept, skipped
