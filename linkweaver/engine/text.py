"""Shared text utilities for the injection engine."""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence

_TOKEN_RE = re.compile(r"[\w']+")
_TAG_RE = re.compile(r"<[^>]*>")
_ENTITY_RE = re.compile(r"&(?:[a-zA-Z][a-zA-Z0-9]*|#\d+|#[xX][0-9a-fA-F]+);")
_WHITESPACE_RE = re.compile(r"\s+")

# Void elements never carry a closing tag, so they do not count towards balance.
VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

_TAG_TOKEN_RE = re.compile(r"<(/?)\s*([a-zA-Z][\w:-]*)\b[^>]*?(/?)>")

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
        "be", "have", "has", "had", "do", "does", "did", "will", "would",
        "could", "should", "may", "might", "must", "shall", "can", "need",
        "this", "that", "these", "those", "i", "you", "he", "she", "it", "we",
        "they", "what", "which", "who", "whom", "your", "his", "her", "its",
        "our", "their", "my", "how", "why", "when", "where", "best", "top",
        "most", "more", "very", "just", "also", "only", "even", "still",
        "about", "into", "through", "during", "before", "after", "above",
        "below", "between", "under", "again", "further", "then", "once",
    }
)

# Characters that may sit directly next to an anchor without splitting a word.
BOUNDARY_CHARS = frozenset(".,;:!?()[]{}'\"<>-–—/&")
TERMINAL_CHARS = frozenset(".!?'\"")


def tokenize(text: str) -> List[str]:
    """Return lower-cased word tokens from the provided text."""

    return [token.lower() for token in _TOKEN_RE.findall(text)]


def letters_only(word: str) -> str:
    """Lower-case ``word`` and drop everything that is not a letter."""

    return "".join(char for char in word.lower() if char.isalpha())


def significant_tokens(text: str) -> List[str]:
    """Tokens longer than three characters that are not stop words, in order."""

    return [token for token in tokenize(text) if len(token) > 3 and token not in STOP_WORDS]


def strip_markup(fragment: str) -> str:
    """Remove tags, blank out entity references and collapse whitespace."""

    without_tags = _TAG_RE.sub("", fragment)
    without_entities = _ENTITY_RE.sub(" ", without_tags)
    return _WHITESPACE_RE.sub(" ", without_entities).strip()


def visible_text(fragment: str) -> str:
    """Markup-stripped text keeping one character per entity reference.

    Used for length comparisons against the plain-text projection, where every
    entity occupies exactly one character.
    """

    without_tags = _TAG_RE.sub("", fragment)
    return _ENTITY_RE.sub(" ", without_tags).strip()


def word_count(text: str) -> int:
    return len([word for word in text.split() if word])


def is_boundary_char(char: str) -> bool:
    return char.isspace() or char in BOUNDARY_CHARS


def valid_first_char(char: str) -> bool:
    return char.isalnum()


def valid_last_char(char: str) -> bool:
    return char.isalnum() or char in TERMINAL_CHARS


def tags_balanced(fragment: str) -> bool:
    """True when every tag opened in ``fragment`` is closed inside it, in order.

    A closing tag with no matching opener earlier in the fragment (as in
    ``"a</li><li>b"``) makes the fragment unbalanced. Void and self-closing
    elements are ignored.
    """

    stack: List[str] = []
    for match in _TAG_TOKEN_RE.finditer(fragment):
        closing, name, self_closing = match.group(1), match.group(2).lower(), match.group(3)
        if closing:
            if not stack or stack[-1] != name:
                return False
            stack.pop()
        elif not self_closing and name not in VOID_ELEMENTS:
            stack.append(name)
    return not stack


def jaccard(set_a: Iterable[str], set_b: Iterable[str]) -> float:
    """Return Jaccard similarity for two iterables."""

    set_a = set(set_a)
    set_b = set(set_b)
    if not set_a and not set_b:
        return 0.0
    intersection = set_a & set_b
    union = set_a | set_b
    if not union:
        return 0.0
    return len(intersection) / len(union)


def phrase_similarity(text_a: str, text_b: str, bigram_boost: float = 0.12) -> float:
    """Jaccard over significant tokens plus a boost per shared bigram.

    Bigrams are taken from consecutive significant tokens of whichever operand
    has fewer of them and counted when they occur verbatim in the other.
    The result is capped at 1.0.
    """

    tokens_a = significant_tokens(text_a)
    tokens_b = significant_tokens(text_b)
    base = jaccard(tokens_a, tokens_b)
    if not tokens_a or not tokens_b:
        return base

    if len(tokens_a) <= len(tokens_b):
        shorter, longer_text = tokens_a, text_b
    else:
        shorter, longer_text = tokens_b, text_a
    haystack = " " + " ".join(tokenize(longer_text)) + " "

    boost = 0.0
    for bigram in _bigrams(shorter):
        if f" {bigram} " in haystack:
            boost += bigram_boost
    return min(1.0, base + boost)


def _bigrams(tokens: Sequence[str]) -> List[str]:
    seen: List[str] = []
    for first, second in zip(tokens, tokens[1:]):
        bigram = f"{first} {second}"
        if bigram not in seen:
            seen.append(bigram)
    return seen


def normalize_anchor_text(text: str) -> str:
    """Case-folded, whitespace-collapsed key used for anchor de-duplication."""

    return _WHITESPACE_RE.sub(" ", strip_markup(text)).strip().casefold()


def too_close(position: int, used: Iterable[int], min_distance: int) -> bool:
    return any(abs(position - other) < min_distance for other in used)
