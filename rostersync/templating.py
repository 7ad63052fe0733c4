"""
templating.py - Placeholder templates for generated pages

A template is parsed once into an ordered list of parts:

    Literal("<h1>")  Slot("STUDENT_NAME")  Literal("</h1> ...")  Block("TEACHER_CONFIGURATION")

Slots are {{UPPER_SNAKE}} tokens. Blocks are whole regions that run from a
start marker to the first end marker after it (the teacher dashboard's
configuration <script> is one). Rendering walks the parts once, so a
substituted value is never scanned again for tokens.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from rostersync.errors import template_read_error


TOKEN_RE = re.compile(r"\{\{([A-Z][A-Z0-9_]*)\}\}")


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Slot:
    name: str

    @property
    def token(self) -> str:
        return "{{" + self.name + "}}"


@dataclass(frozen=True)
class Block:
    name: str
    original: str


Part = Union[Literal, Slot, Block]


@dataclass(frozen=True)
class BlockMarker:
    """Region from `start` through the first `end` that follows it."""
    name: str
    start: str
    end: str

    def find(self, text: str) -> Optional[Tuple[int, int]]:
        begin = text.find(self.start)
        if begin < 0:
            return None
        close = text.find(self.end, begin + len(self.start))
        if close < 0:
            return None
        return begin, close + len(self.end)


def _split_tokens(text: str) -> List[Part]:
    parts: List[Part] = []
    pos = 0
    for match in TOKEN_RE.finditer(text):
        if match.start() > pos:
            parts.append(Literal(text[pos:match.start()]))
        parts.append(Slot(match.group(1)))
        pos = match.end()
    if pos < len(text):
        parts.append(Literal(text[pos:]))
    return parts


class Template:
    def __init__(self, parts: Iterable[Part]):
        self.parts: Tuple[Part, ...] = tuple(parts)

    @classmethod
    def parse(cls, text: str, blocks: Sequence[BlockMarker] = ()) -> "Template":
        """
        Parse template text.

        Blocks are located first (first occurrence of each marker; a
        marker whose region overlaps an earlier one is ignored), then the
        remaining text is split into literals and slots.
        """
        spans = []
        for marker in blocks:
            found = marker.find(text)
            if found:
                spans.append((found[0], found[1], marker.name))
        spans.sort()

        parts: List[Part] = []
        pos = 0
        for begin, end, name in spans:
            if begin < pos:
                continue
            parts.extend(_split_tokens(text[pos:begin]))
            parts.append(Block(name, text[begin:end]))
            pos = end
        parts.extend(_split_tokens(text[pos:]))
        return cls(parts)

    @property
    def slot_names(self) -> Set[str]:
        return {p.name for p in self.parts if isinstance(p, Slot)}

    @property
    def block_names(self) -> Set[str]:
        return {p.name for p in self.parts if isinstance(p, Block)}

    def render(self, values: Optional[Mapping[str, Optional[str]]] = None) -> str:
        """
        Substitute slots and blocks.

        A slot with no value (missing or None) renders as "". A block with
        no value keeps its original text.
        """
        values = values or {}
        out: List[str] = []
        for part in self.parts:
            if isinstance(part, Literal):
                out.append(part.text)
            elif isinstance(part, Slot):
                out.append(values.get(part.name) or "")
            else:
                replacement = values.get(part.name)
                out.append(part.original if replacement is None else replacement)
        return "".join(out)


def render_template(
    text: str,
    values: Optional[Mapping[str, Optional[str]]] = None,
    blocks: Sequence[BlockMarker] = (),
) -> str:
    return Template.parse(text, blocks).render(values)


def read_template(path: Path, blocks: Sequence[BlockMarker] = ()) -> Template:
    """
    Load and parse a template file.

    Raises:
        TemplateReadError: missing, unreadable or undecodable file
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise template_read_error(Path(path), e) from e
    return Template.parse(text, blocks)
