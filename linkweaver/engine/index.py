"""Coordinator for the link injection pipeline.

Every (destination, anchor candidate) attempt runs through the same gates:
candidate quality, semantic match in the live document, re-validation of
the text actually found, edge characters and word boundaries, spacing, and
the section quota. Only an attempt that clears all of them produces a
mutation; a failed attempt leaves no trace besides its skip reason.
"""

from __future__ import annotations

import html as html_lib
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from . import anchors as anchors_module
from . import filters as filters_module
from . import matching as matching_module
from .config import EngineConfig, InjectionOptions
from .mapping import boundary_violation
from .placement import PlacementState, build_anchor_markup, splice
from .text import normalize_anchor_text, strip_markup, valid_first_char, valid_last_char
from .types import InjectionResult, Insertion, LinkTarget

logger = logging.getLogger(__name__)

ACCEPTED_TIERS = frozenset({"excellent", "good", "acceptable"})
MIN_CANDIDATE_SCORE = 55
MIN_ANCHOR_WORDS = 3


@dataclass(frozen=True)
class AttemptOutcome:
    """Tagged result of one placement attempt: an insertion or a reason."""

    insertion: Optional[Insertion] = None
    document: Optional[str] = None
    anchor_keys: tuple = ()
    reason: Optional[str] = None
    recordable: bool = True

    @property
    def succeeded(self) -> bool:
        return self.insertion is not None


def _reject(reason: str, recordable: bool = True) -> AttemptOutcome:
    return AttemptOutcome(reason=reason, recordable=recordable)


def inject_links(
    document: str,
    destinations: Iterable[Any],
    current_url: str = "",
    options: Optional[Mapping[str, Any] | InjectionOptions] = None,
    config: Optional[EngineConfig] = None,
) -> InjectionResult:
    """Insert up to ``max_links`` internal links into ``document``.

    ``destinations`` are ``LinkTarget`` instances or ``{url, title}`` mappings,
    already ranked by topical relevance. ``options`` may be an
    ``InjectionOptions`` or a mapping of overrides (camelCase or snake_case).
    """

    opts = options if isinstance(options, InjectionOptions) else InjectionOptions.from_config(config, options)
    destinations = list(destinations or [])
    if not document or not destinations:
        return InjectionResult(document=document)

    state = PlacementState(document=document, max_links_per_section=opts.max_links_per_section)
    state.seed_from_document()
    logger.info("[INTERNAL LINKS] %d H2 sections detected", len(state.index.heading_offsets))

    targets, skipped = filters_module.filter_destinations(destinations, current_url, opts)
    prepared = []
    for target in targets:
        phrases = anchors_module.generate_anchor_candidates(target.title, opts.max_anchor_candidates)
        if not phrases:
            skipped[target.url] = "No usable anchor candidates in title"
            continue
        prepared.append((target, phrases))
    logger.info("[INTERNAL LINKS] %d link candidates prepared", len(prepared))

    for target, phrases in prepared:
        if len(state.insertions) >= opts.max_links:
            skipped.setdefault(target.url, f"Link budget exhausted ({opts.max_links})")
            continue
        if state.url_used(target.url):
            skipped[target.url] = "URL already linked"
            continue

        last_reason: Optional[str] = None
        for phrase in phrases:
            outcome = _attempt(state, target, phrase, opts)
            if outcome.succeeded:
                state.apply(outcome.insertion, outcome.document, list(outcome.anchor_keys))
                skipped.pop(target.url, None)
                logger.debug(
                    "[INTERNAL LINKS] Linked %s with %r (%s, %.2f)",
                    target.url,
                    outcome.insertion.anchor_text,
                    outcome.insertion.match_type,
                    outcome.insertion.relevance_score,
                )
                break
            if outcome.recordable or last_reason is None:
                # Candidate-level rejections only surface when nothing more specific happened.
                last_reason = outcome.reason
        else:
            skipped[target.url] = last_reason or "No relevant match found in document"

    if len(state.insertions) >= opts.max_links and opts.max_links:
        logger.info("[INTERNAL LINKS] Reached max links limit (%d)", opts.max_links)

    logger.info(
        "[INTERNAL LINKS] Added %d links across %d sections",
        len(state.insertions),
        len({insertion.section for insertion in state.insertions}),
    )
    for section, count in sorted(state.section_counts.items()):
        logger.info("[INTERNAL LINKS]    Section %d: %d link(s)", section, count)

    result = InjectionResult(document=state.document, insertions=list(state.insertions), skipped=skipped)
    if len(state.insertions) < opts.min_links:
        warning = f"Only {len(state.insertions)} links added (minimum target: {opts.min_links})"
        result.warnings.append(warning)
        logger.warning("[INTERNAL LINKS] %s", warning)
        for url, reason in list(skipped.items())[:10]:
            logger.warning("[INTERNAL LINKS]    - %s: %s", url[:40], reason)
    return result


def _attempt(state: PlacementState, target: LinkTarget, phrase: str, opts: InjectionOptions) -> AttemptOutcome:
    """Run every gate for one anchor candidate without touching ``state``."""

    if state.anchor_used(phrase):
        return _reject(f'Anchor text already used: "{phrase}"', recordable=False)

    validation = anchors_module.validate_anchor(phrase, target.title)
    if (
        not validation.valid
        or validation.quality_tier not in ACCEPTED_TIERS
        or validation.score < MIN_CANDIDATE_SCORE
    ):
        return _reject(f'Candidate anchor rejected: {validation.reason or "low quality"}', recordable=False)

    index = state.index
    match = matching_module.find_semantic_match(
        index,
        phrase,
        html_lib.unescape(target.title),
        state.used_text_offsets,
        opts,
        used_raw_offsets=state.used_offsets,
    )
    if match is None:
        return _reject(f'No relevant match for "{phrase}"')
    if match.score < opts.min_relevance:
        return _reject(f"Match relevance {match.score:.2f} below {opts.min_relevance:.2f}")

    matched_clean = strip_markup(match.matched_text)
    words = matched_clean.split()
    if len(words) < MIN_ANCHOR_WORDS:
        return _reject(f"Matched text too short: {len(words)} words")

    final = anchors_module.validate_anchor(matched_clean)
    if not final.valid:
        return _reject(f"Final validation failed: {final.reason}")
    if state.anchor_used(matched_clean):
        return _reject(f'Anchor text already used: "{matched_clean}"')

    if not valid_first_char(matched_clean[0]):
        return _reject(f'Invalid first char: "{matched_clean[0]}"')
    if not valid_last_char(matched_clean[-1]):
        return _reject(f'Invalid last char: "{matched_clean[-1]}"')
    violation = boundary_violation(index, match.start_offset, match.end_offset)
    if violation is not None:
        return _reject(f"Word boundary validation failed: {violation}")
    if state.too_close(match.text_offset, match.start_offset, opts.min_distance_between_links):
        return _reject("Too close to an existing link")

    section = state.sections.section_of(index, match.start_offset)
    if not state.sections.has_room(section):
        return _reject(
            f"Section {section} at capacity ({state.sections.count(section)}/{opts.max_links_per_section})"
        )

    markup = build_anchor_markup(target.url, target.title, opts.link_style, match.score, match.matched_text)
    insertion = Insertion(
        url=target.url,
        anchor_text=matched_clean,
        match_type=match.match_type,
        relevance_score=match.score,
        inserted_at_offset=match.start_offset,
        text_offset=match.text_offset,
        section=section,
        context=match.context,
    )
    return AttemptOutcome(
        insertion=insertion,
        document=splice(state.document, match.start_offset, match.end_offset, markup),
        anchor_keys=(normalize_anchor_text(phrase), normalize_anchor_text(matched_clean)),
    )


def skip_summary(result: InjectionResult) -> Dict[str, List[str]]:
    """Group skipped destinations by reason."""

    grouped: Dict[str, List[str]] = {}
    for url, reason in result.skipped.items():
        grouped.setdefault(reason, []).append(url)
    return grouped
