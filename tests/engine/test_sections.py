"""Section detection and quota tests."""

from __future__ import annotations

import pytest

from linkweaver.engine.sections import LEAD_SECTION, SectionTracker, section_has_room, section_index

DOCUMENT = "<p>Intro</p><h2>One</h2><p>a</p><h2>Two</h2><p>b</p>"


@pytest.mark.parametrize("offset, expected", [(0, LEAD_SECTION), (11, -1), (12, 0), (20, 0), (32, 1), (100, 1)])
def test_section_index(offset, expected):
    assert section_index(DOCUMENT, offset) == expected


def test_document_without_headings_is_one_lead_section():
    assert section_index("<p>No headings at all here.</p>", 10) == LEAD_SECTION


def test_section_quota():
    tracker = SectionTracker(max_links_per_section=2)

    tracker.record(0)
    assert tracker.has_room(0)
    tracker.record(0)
    assert not tracker.has_room(0)
    assert tracker.has_room(1)
    assert tracker.count(0) == 2


def test_zero_quota_blocks_every_section():
    assert not section_has_room({}, LEAD_SECTION, 0)
