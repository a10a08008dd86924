"""Plain-text projection and structure index tests."""

from __future__ import annotations

from linkweaver.engine.markup import MarkupIndex


def test_projection_collapses_entities_to_one_character():
    index = MarkupIndex("<p>Caf&eacute; &amp; bar</p>")

    assert index.text == "Café & bar"
    assert index.raw_start(3) == 6
    assert index.raw_end(3) == 14
    assert index.text_offset_for(14) == 4


def test_literal_angle_brackets_are_text():
    index = MarkupIndex("<p>1 < 2 and 3 > 2</p>")

    assert index.text == "1 < 2 and 3 > 2"


def test_comments_and_declarations_are_skipped():
    index = MarkupIndex("<!DOCTYPE html><!-- note --><p>Body text</p>")

    assert index.text == "Body text"
    assert [tag.kind for tag in index.tags][:2] == ["declaration", "comment"]


def test_anchor_elements_and_attributes():
    index = MarkupIndex('<p>See <a href="/x" data-internal-link="semantic">foo bar baz</a> now</p>')

    (anchor,) = index.anchors
    assert anchor.attrs["href"] == "/x"
    assert anchor.attrs["data-internal-link"] == "semantic"
    assert index.document[anchor.open_end:anchor.close_start] == "foo bar baz"


def test_heading_offsets_are_level_two_only():
    document = "<h2>A</h2><p>x</p><h2 class='b'>B</h2><h3>C</h3>"

    assert MarkupIndex(document).heading_offsets == [0, 18]


def test_sentences_split_on_blocks_and_punctuation():
    index = MarkupIndex("<p>First block without period</p><p>Second block here. Third one!</p>")

    assert [sentence.text for sentence in index.sentences] == [
        "First block without period",
        "Second block here.",
        "Third one!",
    ]
    first = index.sentences[0]
    assert index.text[first.tokens[1][0]:first.tokens[1][1]] == "block"


def test_protected_element_lookup():
    document = "<h2>Keyword research basics</h2><p>Plain body copy.</p>"
    index = MarkupIndex(document)

    heading = index.protected_element(4, 20)
    assert heading is not None and heading.name == "h2"
    body_start = document.index("Plain")
    assert index.protected_element(body_start, body_start + 10) is None


def test_tag_position_queries():
    index = MarkupIndex("<p><em>word</em></p>")

    assert index.in_tag(3)
    assert not index.strictly_inside_tag(3)
    assert index.strictly_inside_tag(4)
    assert not index.in_tag(7)
