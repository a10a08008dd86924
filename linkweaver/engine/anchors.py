"""Anchor text validation and anchor candidate generation."""

from __future__ import annotations

import html as html_lib
import re
from typing import Dict, List, Optional

from .text import STOP_WORDS, letters_only, significant_tokens, strip_markup
from .types import AnchorCandidate, AnchorMetrics, AnchorValidationResult

MIN_WORDS = 3
MAX_WORDS = 7
IDEAL_WORDS = (4, 5)
MIN_CHARS = 15
MAX_CHARS = 65
MIN_MEANINGFUL_RATIO = 0.40

EXCELLENT_THRESHOLD = 85
GOOD_THRESHOLD = 70
ACCEPTABLE_THRESHOLD = 55

# Leftovers of negative contractions cut at the apostrophe ("doesn't" -> "doesn").
_CONTRACTION_FRAGMENTS = frozenset(
    {
        "isn", "doesn", "wasn", "weren", "hasn", "haven", "hadn", "wouldn",
        "couldn", "shouldn", "won", "don", "can", "aren", "didn", "mustn",
        "mightn", "needn", "shan", "daren",
    }
)

WEAK_START_WORDS = frozenset(
    {
        # articles
        "the", "a", "an",
        # conjunctions
        "and", "or", "but", "nor", "yet", "so",
        # prepositions
        "with", "for", "to", "in", "on", "at", "by", "from", "about", "into",
        # demonstratives
        "this", "that", "these", "those",
        # auxiliaries
        "is", "are", "was", "were", "be", "been", "being", "have", "has", "had",
        "do", "does", "did", "will", "would", "could", "should", "may", "might",
        "must", "can",
        "if", "when", "where", "while", "as",
        "just", "also", "only", "very", "really", "actually",
        # possessives
        "our", "your", "my", "their", "its",
        # quantifiers
        "some", "any", "all", "both", "each", "every", "few", "many", "much",
        "more", "most", "other", "such", "even", "still", "already",
        "here", "there", "now", "then", "why", "how", "what", "which", "who",
    }
)

WEAK_END_WORDS = WEAK_START_WORDS | frozenset({"of", "etc", "whom", "whose"})

BANNED_PATTERNS = (
    re.compile(r"^click\s+here", re.IGNORECASE),
    re.compile(r"click\s+here$", re.IGNORECASE),
    re.compile(r"^read\s+more", re.IGNORECASE),
    re.compile(r"read\s+more$", re.IGNORECASE),
    re.compile(r"^learn\s+more", re.IGNORECASE),
    re.compile(r"learn\s+more$", re.IGNORECASE),
    re.compile(r"^find\s+out$", re.IGNORECASE),
    re.compile(r"^check\s+(out|this)\b", re.IGNORECASE),
    re.compile(r"^this\s+(article|post|guide|page|link)\b", re.IGNORECASE),
    re.compile(r"^here\s+is\b", re.IGNORECASE),
    re.compile(r"^see\s+(here|more|this|our)\b", re.IGNORECASE),
    re.compile(r"^go\s+(here|to)\b", re.IGNORECASE),
    re.compile(r"more\s+info(rmation)?$", re.IGNORECASE),
    re.compile(r"^view\s+(all|more|our)\b", re.IGNORECASE),
    re.compile(r"^get\s+(started|more|your)\b", re.IGNORECASE),
    re.compile(r"^https?://", re.IGNORECASE),
    re.compile(r"^www\.", re.IGNORECASE),
)

_TITLE_SUFFIXES = (
    re.compile(r"\s*[-–—|:]\s*(?:the\s+)?(?:complete\s+|ultimate\s+|definitive\s+)?guide\s*$", re.IGNORECASE),
    re.compile(r"\s*[-–—|:(]\s*(?:19|20)\d{2}\s*\)?\s*$"),
    re.compile(r"\s*[-–—|]\s*[a-z\s]+blog\s*$", re.IGNORECASE),
)
_TITLE_SEPARATORS = re.compile(r"[|–—:;\[\](){}\"“”‘’«»<>]|\s-\s")
_WHITESPACE = re.compile(r"\s+")

_NOUN_PHRASE_PATTERNS = (
    re.compile(r"(?:complete|ultimate|definitive|comprehensive)\s+guide\s+(?:to|for)\s+(\w+(?:\s+\w+){1,3})", re.IGNORECASE),
    re.compile(r"how\s+to\s+(\w+(?:\s+\w+){1,3})", re.IGNORECASE),
    re.compile(r"best\s+(\w+(?:\s+\w+){0,2})\s+for\b", re.IGNORECASE),
    re.compile(r"(\w+(?:\s+\w+)?\s+vs\.?\s+\w+(?:\s+\w+)?)", re.IGNORECASE),
)

_WEAK_LEADERS = frozenset({"the", "a", "an", "how", "what", "why", "when", "where"})
_ACTION_PREFIXES = ("mastering", "understanding", "implementing", "optimizing", "creating")


def validate_anchor(phrase: Optional[str], target_title: Optional[str] = None) -> AnchorValidationResult:
    """Score ``phrase`` as anchor text and classify it into a quality tier.

    Hard rejections short-circuit with score 0 and tier ``rejected``; weak
    leading or trailing words reject with score 25, and a low share of
    meaningful words yields a ``poor`` result with score 30.
    """

    if not phrase or not isinstance(phrase, str) or not phrase.strip():
        return _rejected("Empty phrase")

    clean = strip_markup(phrase)
    words = clean.split()
    if not words:
        return _rejected("Empty phrase")

    first = letters_only(words[0])
    last = letters_only(words[-1])
    if last in _CONTRACTION_FRAGMENTS:
        return _rejected(f'Ends with contraction fragment "{last}"')
    if first in _CONTRACTION_FRAGMENTS:
        return _rejected(f'Starts with contraction fragment "{first}"')

    count = len(words)
    if count < MIN_WORDS:
        return _rejected(f"Only {count} word(s), minimum {MIN_WORDS} required", count, len(clean))
    if count > MAX_WORDS:
        return _rejected(f"{count} words exceeds maximum {MAX_WORDS}", count, len(clean))

    for pattern in BANNED_PATTERNS:
        if pattern.search(clean):
            return _rejected("Matches banned generic anchor pattern", count, len(clean))

    if first in WEAK_START_WORDS:
        return _rejected(f'Starts with weak word "{first}"', count, len(clean), score=25)
    if last in WEAK_END_WORDS:
        return _rejected(f'Ends with weak word "{last}"', count, len(clean), score=25)

    if len(clean) < MIN_CHARS:
        return _rejected(f"Only {len(clean)} chars, minimum {MIN_CHARS}", count, len(clean))
    if len(clean) > MAX_CHARS:
        return _rejected(f"{len(clean)} chars exceeds maximum {MAX_CHARS}", count, len(clean))

    meaningful = [
        word for word in (letters_only(w) for w in words) if len(word) >= 3 and word not in STOP_WORDS
    ]
    ratio = len(meaningful) / count
    if ratio < MIN_MEANINGFUL_RATIO:
        return AnchorValidationResult(
            valid=False,
            score=30,
            quality_tier="poor",
            reason=f"Only {round(ratio * 100)}% meaningful words (need {round(MIN_MEANINGFUL_RATIO * 100)}%+)",
            metrics=AnchorMetrics(word_count=count, char_count=len(clean), meaningful_word_ratio=ratio),
        )

    score = 50 + round(ratio * 20)
    if IDEAL_WORDS[0] <= count <= IDEAL_WORDS[1]:
        score += 15
    elif count in (MIN_WORDS, 6):
        score += 8

    relevance = 0.0
    if target_title:
        relevance = anchor_relevance(clean, target_title)
        score += round(relevance * 15)

    starts_strong = bool(meaningful) and meaningful[0] == first
    if starts_strong:
        score += 5
    if any(char.isdigit() for char in clean):
        score += 3
    proper_nouns = [word for word in words[1:] if word[:1].isupper()]
    if proper_nouns:
        score += min(5, len(proper_nouns) * 2)
    score = min(100, score)

    tier = quality_tier(score)
    return AnchorValidationResult(
        valid=tier != "poor",
        score=score,
        quality_tier=tier,
        reason="Low quality score" if tier == "poor" else None,
        metrics=AnchorMetrics(
            word_count=count,
            char_count=len(clean),
            meaningful_word_ratio=ratio,
            starts_with_strong_word=starts_strong,
            ends_with_strong_word=last not in STOP_WORDS,
            has_proper_nouns=bool(proper_nouns),
            semantic_relevance=relevance,
        ),
    )


def quality_tier(score: int) -> str:
    if score >= EXCELLENT_THRESHOLD:
        return "excellent"
    if score >= GOOD_THRESHOLD:
        return "good"
    if score >= ACCEPTABLE_THRESHOLD:
        return "acceptable"
    return "poor"


def anchor_relevance(anchor: str, title: str) -> float:
    """Jaccard similarity between the meaningful tokens of anchor and title."""

    anchor_tokens = set(significant_tokens(anchor))
    title_tokens = set(significant_tokens(_TITLE_SEPARATORS.sub(" ", html_lib.unescape(title))))
    if not anchor_tokens or not title_tokens:
        return 0.0
    return len(anchor_tokens & title_tokens) / len(anchor_tokens | title_tokens)


def _rejected(reason: str, word_count: int = 0, char_count: int = 0, score: int = 0) -> AnchorValidationResult:
    return AnchorValidationResult(
        valid=False,
        score=score,
        quality_tier="rejected",
        reason=reason,
        metrics=AnchorMetrics(word_count=word_count, char_count=char_count),
    )


def clean_title(title: str) -> str:
    """Strip guide/year/blog suffixes and separator punctuation from a title."""

    clean = html_lib.unescape(title).strip()
    for pattern in _TITLE_SUFFIXES:
        clean = pattern.sub("", clean)
    clean = _TITLE_SEPARATORS.sub(" ", clean)
    return _WHITESPACE.sub(" ", clean).strip()


def rank_anchor_candidates(title: str, max_candidates: int = 12) -> List[AnchorCandidate]:
    """Return scored anchor candidates derived from ``title``, best first."""

    if not title or not isinstance(title, str) or len(title) < 10:
        return []

    clean = clean_title(title)
    words = [word for word in clean.split() if len(word) >= 2]
    if len(words) < 3:
        return []

    scored: Dict[str, AnchorCandidate] = {}

    def consider(phrase: str, bonus: int, floor: int) -> None:
        validation = validate_anchor(phrase, title)
        if not validation.valid or validation.score < floor:
            return
        candidate = AnchorCandidate(phrase=phrase, score=validation.score + bonus)
        key = phrase.lower()
        if key not in scored or scored[key].score < candidate.score:
            scored[key] = candidate

    for pattern in _NOUN_PHRASE_PATTERNS:
        match = pattern.search(clean)
        if match and match.group(1):
            consider(match.group(1).strip(), 20, 50)

    for window in (5, 4, 3):
        if len(words) < window:
            continue
        for start in range(len(words) - window + 1):
            position_bonus = 15 if start == 0 else (8 if start == 1 else 0)
            length_bonus = 10 if window in (4, 5) else 0
            consider(" ".join(words[start:start + window]), position_bonus + length_bonus, 55)

    if len(words) >= 4 and words[0].lower() in _WEAK_LEADERS:
        remainder = words[1:]
        for window in (4, 3):
            if len(remainder) >= window:
                consider(" ".join(remainder[:window]), 5, 55)

    for lead in (3, 2):
        core = " ".join(words[:lead])
        for prefix in _ACTION_PREFIXES:
            consider(f"{prefix} {core}", 0, 50)

    ranked = sorted(scored.values(), key=lambda candidate: candidate.score, reverse=True)
    return ranked[:max_candidates]


def generate_anchor_candidates(title: str, max_candidates: int = 12) -> List[str]:
    """Return anchor phrases for ``title``, best first."""

    return [candidate.phrase for candidate in rank_anchor_candidates(title, max_candidates)]


def generate_optimal_anchors(title: str, max_candidates: int = 8) -> List[str]:
    """Shorter, conservative variant favouring leading 4-5 word windows."""

    if not title or len(title) < 15:
        return []

    words = [word for word in clean_title(title).split() if len(word) >= 2]
    if len(words) < 3:
        return []

    candidates: List[AnchorCandidate] = []
    start = 1 if words[0].lower() in WEAK_START_WORDS else 0
    for window in (5, 4):
        if len(words) - start >= window:
            phrase = " ".join(words[start:start + window])
            validation = validate_anchor(phrase, title)
            if validation.valid and validation.score >= 60:
                candidates.append(AnchorCandidate(phrase, validation.score + 20))

    for offset in range(min(2, len(words) - 3) + 1):
        phrase = " ".join(words[offset:offset + 3])
        validation = validate_anchor(phrase, title)
        if validation.valid and validation.score >= 55:
            candidates.append(AnchorCandidate(phrase, validation.score))

    core = " ".join(words[:2])
    for prefix in _ACTION_PREFIXES[:2]:
        phrase = f"{prefix} {core}"
        validation = validate_anchor(phrase, title)
        if validation.valid:
            candidates.append(AnchorCandidate(phrase, validation.score - 5))

    seen = set()
    unique: List[AnchorCandidate] = []
    for candidate in candidates:
        key = candidate.phrase.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    unique.sort(key=lambda candidate: candidate.score, reverse=True)
    return [candidate.phrase for candidate in unique[:max_candidates]]
