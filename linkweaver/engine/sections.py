"""Section detection and per-section link quotas."""

from __future__ import annotations

import bisect
from typing import Dict, Mapping, Union

from .markup import MarkupIndex

LEAD_SECTION = -1


def section_index(document: Union[str, MarkupIndex], offset: int) -> int:
    """Index of the level-2 section containing ``offset``.

    Sections are numbered from 0 at the first ``<h2>``; anything before it is
    the lead zone, ``-1``.
    """

    index = MarkupIndex.ensure(document)
    return bisect.bisect_right(index.heading_offsets, offset) - 1


def section_has_room(counts: Mapping[int, int], section: int, max_links_per_section: int) -> bool:
    return counts.get(section, 0) < max_links_per_section


class SectionTracker:
    """Counts insertions per section for one injection run."""

    def __init__(self, max_links_per_section: int) -> None:
        self.max_links_per_section = max_links_per_section
        self.counts: Dict[int, int] = {}

    def section_of(self, document: Union[str, MarkupIndex], offset: int) -> int:
        return section_index(document, offset)

    def has_room(self, section: int) -> bool:
        return section_has_room(self.counts, section, self.max_links_per_section)

    def count(self, section: int) -> int:
        return self.counts.get(section, 0)

    def record(self, section: int) -> None:
        self.counts[section] = self.counts.get(section, 0) + 1
