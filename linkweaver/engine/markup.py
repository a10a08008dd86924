"""Single-pass index over a markup string.

One scan produces everything the engine asks of a document: the plain-text
projection with per-character raw offsets, the sorted list of tag spans,
matched element intervals (anchors, headings, code blocks, ...), level-2
heading offsets and the sentence arena used by the semantic matcher. The
index is immutable; a mutated document needs a new index.
"""

from __future__ import annotations

import bisect
import html as html_lib
import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, List, Optional, Tuple

from .text import VOID_ELEMENTS

_ENTITY_RE = re.compile(r"&(?:[a-zA-Z][a-zA-Z0-9]*|#\d+|#[xX][0-9a-fA-F]+);")
_TAG_NAME_RE = re.compile(r"<\s*(/?)\s*([a-zA-Z][\w:-]*)")
_ATTR_RE = re.compile(r"""([\w:-]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""")
_SENTENCE_END_RE = re.compile(r"[.!?]+")
_TOKEN_SPAN_RE = re.compile(r"\S+")

# Elements whose closing or opening starts a new block of text.
BLOCK_ELEMENTS = frozenset(
    {
        "address", "article", "aside", "blockquote", "br", "dd", "div", "dl",
        "dt", "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5",
        "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section",
        "table", "td", "th", "tr", "ul",
    }
)

# Links must never be placed inside these elements.
SKIP_ELEMENTS = frozenset(
    {"a", "h1", "h2", "h3", "h4", "h5", "h6", "code", "pre", "script", "style", "button", "textarea"}
)


@dataclass(frozen=True)
class Tag:
    """A tag span ``[start, end)`` in the raw document."""

    start: int
    end: int
    name: str
    kind: str  # open, close, void, comment, declaration
    attrs: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Element:
    """Matched open/close pair. ``close_end`` is the document length when unclosed."""

    name: str
    open_start: int
    open_end: int
    close_start: int
    close_end: int
    attrs: Dict[str, str] = field(default_factory=dict)

    def overlaps(self, start: int, end: int) -> bool:
        return self.open_start < end and start < self.close_end


@dataclass(frozen=True)
class Sentence:
    """A sentence of the projection with its token spans (projection offsets)."""

    start: int
    end: int
    text: str
    tokens: Tuple[Tuple[int, int], ...]


class MarkupIndex:
    """Plain-text projection of a markup document with a map back to raw offsets."""

    def __init__(self, document: str) -> None:
        self.document = document or ""
        self.tags: List[Tag] = []
        self.elements: List[Element] = []
        self._raw_starts: List[int] = []
        self._raw_ends: List[int] = []
        self._breaks: List[int] = []
        chars: List[str] = []
        self._scan(chars)
        self.text = "".join(chars)
        self._tag_starts = [tag.start for tag in self.tags]

    @classmethod
    def ensure(cls, document: "str | MarkupIndex") -> "MarkupIndex":
        if isinstance(document, MarkupIndex):
            return document
        return cls(document)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def _scan(self, chars: List[str]) -> None:
        doc = self.document
        length = len(doc)
        open_stacks: Dict[str, List[Tag]] = {}
        pending: List[Tuple[Tag, Optional[Tag]]] = []
        i = 0
        while i < length:
            char = doc[i]
            if char == "<" and i + 1 < length and (doc[i + 1].isalpha() or doc[i + 1] in "/!?"):
                tag = self._read_tag(i)
                self.tags.append(tag)
                if tag.name in BLOCK_ELEMENTS:
                    self._breaks.append(len(chars))
                if tag.kind == "open":
                    open_stacks.setdefault(tag.name, []).append(tag)
                elif tag.kind == "close":
                    stack = open_stacks.get(tag.name)
                    if stack:
                        pending.append((stack.pop(), tag))
                i = tag.end
                continue
            if char == "&":
                entity = _ENTITY_RE.match(doc, i)
                if entity:
                    resolved = html_lib.unescape(entity.group(0))
                    if len(resolved) != 1 or resolved.isspace():
                        resolved = " "
                    chars.append(resolved)
                    self._raw_starts.append(i)
                    self._raw_ends.append(entity.end())
                    i = entity.end()
                    continue
            chars.append(char)
            self._raw_starts.append(i)
            self._raw_ends.append(i + 1)
            i += 1

        for stack in open_stacks.values():
            for opened in stack:
                pending.append((opened, None))
        for opened, closed in pending:
            self.elements.append(
                Element(
                    name=opened.name,
                    open_start=opened.start,
                    open_end=opened.end,
                    close_start=closed.start if closed else length,
                    close_end=closed.end if closed else length,
                    attrs=opened.attrs,
                )
            )
        self.elements.sort(key=lambda element: element.open_start)

    def _read_tag(self, start: int) -> Tag:
        doc = self.document
        if doc.startswith("<!--", start):
            close = doc.find("-->", start + 4)
            end = len(doc) if close == -1 else close + 3
            return Tag(start=start, end=end, name="", kind="comment")
        close = doc.find(">", start + 1)
        end = len(doc) if close == -1 else close + 1
        raw = doc[start:end]
        if raw.startswith(("<!", "<?")):
            return Tag(start=start, end=end, name="", kind="declaration")
        name_match = _TAG_NAME_RE.match(raw)
        name = name_match.group(2).lower() if name_match else ""
        if name_match and name_match.group(1):
            return Tag(start=start, end=end, name=name, kind="close")
        attrs = _parse_attrs(raw)
        if name in VOID_ELEMENTS or raw.rstrip(">").rstrip().endswith("/"):
            kind = "void"
        else:
            kind = "open"
        return Tag(start=start, end=end, name=name, kind=kind, attrs=attrs)

    # ------------------------------------------------------------------
    # Offset mapping
    # ------------------------------------------------------------------

    def raw_start(self, text_offset: int) -> int:
        return self._raw_starts[text_offset]

    def raw_end(self, text_offset: int) -> int:
        return self._raw_ends[text_offset]

    def text_offset_for(self, raw_offset: int) -> int:
        """Projection offset of the first plain-text character at or after ``raw_offset``."""

        return bisect.bisect_left(self._raw_starts, raw_offset)

    def in_tag(self, raw_offset: int) -> bool:
        """True when ``raw_offset`` points into a tag span (including its delimiters)."""

        position = bisect.bisect_right(self._tag_starts, raw_offset) - 1
        if position < 0:
            return False
        tag = self.tags[position]
        return tag.start <= raw_offset < tag.end

    def strictly_inside_tag(self, raw_offset: int) -> bool:
        """True when a cut at ``raw_offset`` would split a tag."""

        position = bisect.bisect_right(self._tag_starts, raw_offset) - 1
        if position < 0:
            return False
        tag = self.tags[position]
        return tag.start < raw_offset < tag.end

    # ------------------------------------------------------------------
    # Structure queries
    # ------------------------------------------------------------------

    @cached_property
    def anchors(self) -> List[Element]:
        return [element for element in self.elements if element.name == "a"]

    @cached_property
    def heading_offsets(self) -> List[int]:
        """Raw start offsets of level-2 heading open tags, ascending."""

        return [tag.start for tag in self.tags if tag.kind == "open" and tag.name == "h2"]

    def protected_element(self, start: int, end: int) -> Optional[Element]:
        """Return an element the span ``[start, end)`` must not be linked inside."""

        for element in self.elements:
            if element.open_start >= end:
                break
            if element.name in SKIP_ELEMENTS and element.overlaps(start, end):
                return element
        return None

    @cached_property
    def sentences(self) -> List[Sentence]:
        """Sentences of the projection, split on terminal punctuation and block boundaries."""

        cuts = {0, len(self.text)}
        cuts.update(self._breaks)
        for match in _SENTENCE_END_RE.finditer(self.text):
            cuts.add(match.end())
        ordered = sorted(cut for cut in cuts if 0 <= cut <= len(self.text))

        result: List[Sentence] = []
        for start, end in zip(ordered, ordered[1:]):
            chunk = self.text[start:end]
            stripped = chunk.strip()
            if not stripped:
                continue
            offset = start + (len(chunk) - len(chunk.lstrip()))
            tokens = tuple(
                (offset + match.start(), offset + match.end())
                for match in _TOKEN_SPAN_RE.finditer(stripped)
            )
            result.append(Sentence(start=offset, end=offset + len(stripped), text=stripped, tokens=tokens))
        return result

    def context(self, text_offset: int, length: int, window: int = 40) -> str:
        """Trimmed plain-text snippet around a projection span."""

        start = max(0, text_offset - window)
        end = min(len(self.text), text_offset + length + window)
        return " ".join(self.text[start:end].split())


def _parse_attrs(raw_tag: str) -> Dict[str, str]:
    attrs: Dict[str, str] = {}
    for match in _ATTR_RE.finditer(raw_tag):
        value = next(group for group in match.groups()[1:] if group is not None)
        attrs.setdefault(match.group(1).lower(), html_lib.unescape(value))
    return attrs
