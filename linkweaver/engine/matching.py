"""Locating candidate anchor phrases inside the working document."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .config import InjectionOptions
from .mapping import boundary_violation, map_text_span
from .markup import MarkupIndex
from .text import STOP_WORDS, phrase_similarity, strip_markup, too_close, word_count
from .types import SemanticMatch, Span

logger = logging.getLogger(__name__)

PHRASE_WEIGHT = 0.55
TITLE_WEIGHT = 0.45
MIN_MATCH_WORDS = 3

_EDGE_PUNCTUATION = ".,;:!?()[]{}\"'“”‘’«»-–—"


@dataclass(frozen=True)
class _Window:
    text_offset: int
    length: int
    score: float
    context: str


def find_semantic_match(
    document: Union[str, MarkupIndex],
    candidate_phrase: str,
    destination_title: str,
    used_offsets: Iterable[int] = (),
    options: Optional[InjectionOptions] = None,
    *,
    used_raw_offsets: Iterable[int] = (),
) -> Optional[SemanticMatch]:
    """Find the best span of real document text corresponding to ``candidate_phrase``.

    An exact, case-insensitive occurrence wins outright. Otherwise sentences
    are scanned with 5..3 token windows scored against both the phrase and the
    destination title, and the best window is accepted when it clears the
    relevance threshold. ``used_offsets`` are plain-text offsets of links
    already placed; ``used_raw_offsets`` are their raw markup offsets.
    Returns ``None`` when neither phase yields a safe span.
    """

    index = MarkupIndex.ensure(document)
    opts = options or InjectionOptions.from_config()
    phrase = " ".join((candidate_phrase or "").split())
    if not phrase or not index.text:
        return None

    used_text = list(used_offsets)
    used_raw = list(used_raw_offsets)
    min_distance = opts.min_distance_between_links

    exact = _exact_match(index, phrase, used_text, used_raw, opts)
    if exact is not None:
        return exact

    window = _best_window(index, phrase, destination_title or "", used_text, opts)
    if window is None or window.score < opts.relevance_threshold:
        return None

    span = map_text_span(
        index,
        window.text_offset,
        window.length,
        expansion_limit=opts.boundary_expansion_limit,
        length_tolerance=opts.length_tolerance,
    )
    if span is None or not _acceptable_span(index, span, used_raw, min_distance):
        logger.debug("Best semantic window for %r could not be mapped safely", phrase)
        return None

    return SemanticMatch(
        start_offset=span.start,
        end_offset=span.end,
        matched_text=index.document[span.start:span.end],
        score=window.score,
        match_type="semantic",
        text_offset=index.text_offset_for(span.start),
        context=window.context,
    )


def _exact_match(
    index: MarkupIndex,
    phrase: str,
    used_text: list,
    used_raw: list,
    opts: InjectionOptions,
) -> Optional[SemanticMatch]:
    pattern = re.compile(r"\s+".join(re.escape(word) for word in phrase.split()), re.IGNORECASE)
    for found in pattern.finditer(index.text):
        if too_close(found.start(), used_text, opts.min_distance_between_links):
            continue
        span = map_text_span(
            index,
            found.start(),
            found.end() - found.start(),
            expansion_limit=opts.boundary_expansion_limit,
            length_tolerance=opts.length_tolerance,
        )
        if span is None or not _acceptable_span(index, span, used_raw, opts.min_distance_between_links):
            continue
        return SemanticMatch(
            start_offset=span.start,
            end_offset=span.end,
            matched_text=index.document[span.start:span.end],
            score=opts.exact_match_score,
            match_type="exact",
            text_offset=index.text_offset_for(span.start),
            context=index.context(found.start(), found.end() - found.start()),
        )
    return None


def _best_window(
    index: MarkupIndex,
    phrase: str,
    title: str,
    used_text: list,
    opts: InjectionOptions,
) -> Optional[_Window]:
    best: Optional[_Window] = None
    for sentence in index.sentences:
        if len(sentence.text) < opts.min_sentence_length:
            continue
        if too_close(sentence.start, used_text, opts.min_distance_between_links):
            continue

        tokens = sentence.tokens
        for size in range(min(5, len(tokens)), MIN_MATCH_WORDS - 1, -1):
            for position in range(len(tokens) - size + 1):
                window = _trimmed_window(index, tokens[position:position + size])
                if window is None:
                    continue
                start, end = window
                text = index.text[start:end]
                words = text.split()
                if _core(words[0]) in STOP_WORDS or _core(words[-1]) in STOP_WORDS:
                    continue
                score = PHRASE_WEIGHT * phrase_similarity(text, phrase) + TITLE_WEIGHT * phrase_similarity(text, title)
                if best is None or score > best.score:
                    best = _Window(
                        text_offset=start,
                        length=end - start,
                        score=score,
                        context=sentence.text[:80],
                    )
    return best


def _trimmed_window(index: MarkupIndex, tokens) -> Optional[tuple]:
    """Window bounds with leading/trailing punctuation dropped."""

    start = tokens[0][0]
    end = tokens[-1][1]
    text = index.text
    while start < end and text[start] in _EDGE_PUNCTUATION:
        start += 1
    while end > start and text[end - 1] in _EDGE_PUNCTUATION:
        end -= 1
    if end <= start:
        return None
    return start, end


def _core(word: str) -> str:
    return word.strip(_EDGE_PUNCTUATION).lower()


def _acceptable_span(index: MarkupIndex, span: Span, used_raw: list, min_distance: int) -> bool:
    if too_close(span.start, used_raw, min_distance):
        return False
    if index.protected_element(span.start, span.end) is not None:
        return False
    if word_count(strip_markup(index.document[span.start:span.end])) < MIN_MATCH_WORDS:
        return False
    return boundary_violation(index, span.start, span.end) is None
