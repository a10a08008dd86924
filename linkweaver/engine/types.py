"""Typed data structures used by the link injection engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class LinkTarget:
    """Candidate destination page supplied by the caller."""

    url: str
    title: str


@dataclass(frozen=True)
class AnchorCandidate:
    """Anchor phrase generated from a target title, ranked by estimated quality."""

    phrase: str
    score: float


@dataclass(frozen=True)
class AnchorMetrics:
    word_count: int = 0
    char_count: int = 0
    meaningful_word_ratio: float = 0.0
    starts_with_strong_word: bool = False
    ends_with_strong_word: bool = False
    has_proper_nouns: bool = False
    semantic_relevance: float = 0.0


@dataclass(frozen=True)
class AnchorValidationResult:
    """Outcome of scoring a phrase as anchor text."""

    valid: bool
    score: int
    quality_tier: str
    reason: Optional[str] = None
    metrics: AnchorMetrics = field(default_factory=AnchorMetrics)


@dataclass(frozen=True)
class Span:
    """Half-open ``[start, end)`` range of raw markup offsets."""

    start: int
    end: int


@dataclass(frozen=True)
class SemanticMatch:
    """A located span in the current working document.

    Offsets are only meaningful for the exact document the match was computed
    against; any mutation invalidates them.
    """

    start_offset: int
    end_offset: int
    matched_text: str
    score: float
    match_type: str
    text_offset: int = 0
    context: str = ""


@dataclass(frozen=True)
class Insertion:
    """A link that was placed into the document."""

    url: str
    anchor_text: str
    match_type: str
    relevance_score: float
    inserted_at_offset: int
    text_offset: int = 0
    section: int = -1
    context: str = ""


@dataclass(frozen=True)
class InjectedLink:
    """A semantic link read back from rendered markup."""

    url: str
    title: str
    text: str
    score: Optional[float]


@dataclass
class InjectionResult:
    """Final document plus diagnostics for one injection run."""

    document: str
    insertions: List[Insertion] = field(default_factory=list)
    skipped: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def links_added(self) -> int:
        return len(self.insertions)
