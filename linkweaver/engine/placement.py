"""Placement bookkeeping and the markup mutation for one injection run."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .markup import MarkupIndex
from .sections import SectionTracker
from .text import normalize_anchor_text, too_close
from .types import Insertion

logger = logging.getLogger(__name__)

_BARE_AMPERSAND_RE = re.compile(r"&(?!(?:[a-zA-Z][a-zA-Z0-9]*|#\d+|#[xX][0-9a-fA-F]+);)")

PROVENANCE_ATTRIBUTE = "data-internal-link"
PROVENANCE_MARKER = "semantic"
SCORE_ATTRIBUTE = "data-score"


def escape_attribute(value: str) -> str:
    """Quote ``value`` for a double-quoted attribute, keeping existing entity references."""

    value = _BARE_AMPERSAND_RE.sub("&amp;", value)
    return value.replace('"', "&quot;").replace("<", "&lt;").replace(">", "&gt;")


def build_anchor_markup(url: str, title: str, style: str, score: float, inner_markup: str) -> str:
    """Anchor element wrapping ``inner_markup`` untouched."""

    return (
        f'<a href="{escape_attribute(url)}"'
        f' title="{escape_attribute(title)}"'
        f' style="{escape_attribute(style)}"'
        f' {PROVENANCE_ATTRIBUTE}="{PROVENANCE_MARKER}"'
        f' {SCORE_ATTRIBUTE}="{score:.2f}">'
        f"{inner_markup}</a>"
    )


def splice(document: str, start: int, end: int, replacement: str) -> str:
    return document[:start] + replacement + document[end:]


@dataclass
class PlacementState:
    """All mutable bookkeeping of a single injection run.

    ``used_offsets`` holds raw markup offsets at insertion time;
    ``used_text_offsets`` holds the matching plain-text offsets, which stay
    valid across later insertions because anchors add no visible text.
    """

    document: str
    max_links_per_section: int
    used_urls: Set[str] = field(default_factory=set)
    used_offsets: Set[int] = field(default_factory=set)
    used_text_offsets: Set[int] = field(default_factory=set)
    used_anchor_texts: Set[str] = field(default_factory=set)
    insertions: List[Insertion] = field(default_factory=list)
    sections: SectionTracker = field(init=False)
    _index: Optional[MarkupIndex] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.sections = SectionTracker(self.max_links_per_section)

    @property
    def section_counts(self) -> Dict[int, int]:
        return self.sections.counts

    @property
    def index(self) -> MarkupIndex:
        """Index of the current working document, rebuilt only after a mutation."""

        if self._index is None or self._index.document is not self.document:
            self._index = MarkupIndex(self.document)
        return self._index

    def url_used(self, url: str) -> bool:
        return url.strip().rstrip("/").lower() in self.used_urls

    def anchor_used(self, text: str) -> bool:
        return normalize_anchor_text(text) in self.used_anchor_texts

    def too_close(self, text_offset: int, raw_offset: int, min_distance: int) -> bool:
        return too_close(text_offset, self.used_text_offsets, min_distance) or too_close(
            raw_offset, self.used_offsets, min_distance
        )

    def seed_from_document(self) -> None:
        """Treat links already present in the document as used.

        Every existing anchor marks its destination and visible text as used;
        anchors carrying the provenance marker also claim their position and
        section quota.
        """

        index = self.index
        for anchor in index.anchors:
            href = anchor.attrs.get("href", "")
            if href:
                self.used_urls.add(href.strip().rstrip("/").lower())
            inner = index.document[anchor.open_end:anchor.close_start]
            label = normalize_anchor_text(inner)
            if label:
                self.used_anchor_texts.add(label)
            if anchor.attrs.get(PROVENANCE_ATTRIBUTE) == PROVENANCE_MARKER:
                self.used_offsets.add(anchor.open_start)
                self.used_text_offsets.add(index.text_offset_for(anchor.open_end))
                self.sections.record(self.sections.section_of(index, anchor.open_start))
        if index.anchors:
            logger.debug(
                "Seeded %d used URLs and %d anchor texts from existing links",
                len(self.used_urls),
                len(self.used_anchor_texts),
            )

    def apply(self, insertion: Insertion, document: str, anchor_keys: List[str]) -> None:
        """Commit a validated insertion and its mutated document."""

        self.document = document
        self._index = None
        self.used_urls.add(insertion.url.strip().rstrip("/").lower())
        self.used_offsets.add(insertion.inserted_at_offset)
        self.used_text_offsets.add(insertion.text_offset)
        for key in anchor_keys:
            if key:
                self.used_anchor_texts.add(key)
        self.sections.record(insertion.section)
        self.insertions.append(insertion)
