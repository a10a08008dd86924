"""Mapping plain-text spans back into safe raw markup offsets."""

from __future__ import annotations

from typing import Optional, Sequence, Union

from .markup import MarkupIndex
from .text import is_boundary_char, tags_balanced, valid_first_char, valid_last_char, visible_text
from .types import Span

Document = Union[str, MarkupIndex]


def map_text_span(
    document: Document,
    text_offset: int,
    length: int,
    *,
    expansion_limit: int = 20,
    length_tolerance: Sequence[float] = (0.6, 1.8),
) -> Optional[Span]:
    """Return the raw ``[start, end)`` span for a projection range, or ``None``.

    The span is widened to whole words (at most ``expansion_limit`` characters
    in each direction) and then checked for tag balance, stray absorbed text,
    edge characters and word boundaries. ``None`` means there is no safe span
    at that location.
    """

    index = MarkupIndex.ensure(document)
    if length <= 0 or text_offset < 0 or text_offset + length > len(index.text):
        return None

    html = index.document
    start = index.raw_start(text_offset)
    end = index.raw_end(text_offset + length - 1)

    expanded = 0
    while start > 0 and expanded < expansion_limit:
        if is_boundary_char(html[start - 1]) or index.in_tag(start - 1):
            break
        start -= 1
        expanded += 1

    expanded = 0
    while end < len(html) and expanded < expansion_limit:
        if is_boundary_char(html[end]) or index.in_tag(end):
            break
        end += 1
        expanded += 1

    fragment = html[start:end]
    if not tags_balanced(fragment):
        return None

    visible = visible_text(fragment)
    low, high = length_tolerance
    if not visible or len(visible) > length * high or len(visible) < length * low:
        return None
    if not valid_first_char(visible[0]) or not valid_last_char(visible[-1]):
        return None

    if boundary_violation(index, start, end) is not None:
        return None
    return Span(start=start, end=end)


def boundary_violation(document: Document, start: int, end: int) -> Optional[str]:
    """Return why ``[start, end)`` would split a word or a tag, or ``None`` if it is safe."""

    index = MarkupIndex.ensure(document)
    html = index.document
    if start < 0 or end > len(html) or start >= end:
        return "Empty or out-of-range selection"

    if start > 0 and not is_boundary_char(html[start - 1]):
        return f'Invalid char before: "{html[start - 1]}"'
    if end < len(html) and not is_boundary_char(html[end]):
        return f'Invalid char after: "{html[end]}"'
    if index.strictly_inside_tag(start) or index.strictly_inside_tag(end):
        return "Selection cuts through a tag"

    fragment = html[start:end]
    if not tags_balanced(fragment):
        return "Unbalanced HTML tags in selection"
    if not visible_text(fragment):
        return "Selection is empty after removing HTML"
    return None


def validate_word_boundaries(document: Document, start: int, end: int) -> bool:
    """True when a link may wrap ``[start, end)`` without breaking a word or tag."""

    return boundary_violation(document, start, end) is None
