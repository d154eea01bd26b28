from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence


@dataclass
class Block:
    """Base class for block-level nodes."""


@dataclass
class Document:
    blocks: List[Block] = field(default_factory=list)


class CalloutKind(Enum):
    NOTE = "NOTE"
    TIP = "TIP"
    IMPORTANT = "IMPORTANT"
    WARNING = "WARNING"
    CAUTION = "CAUTION"

    @classmethod
    def from_marker(cls, marker: str) -> Optional["CalloutKind"]:
        """Return the kind named by a ``[!KIND]`` marker, or None if unknown."""
        try:
            return cls(marker.upper())
        except ValueError:
            return None


@dataclass
class Heading(Block):
    level: int
    inline: List["InlineElement"]


@dataclass
class Paragraph(Block):
    inline: List["InlineElement"]


@dataclass
class ListItem:
    inline: List["InlineElement"]
    checked: bool | None = None
    children: Optional["ListBlock"] = None


@dataclass
class ListBlock(Block):
    items: List[ListItem]
    ordered: bool


@dataclass
class TableBlock(Block):
    headers: Sequence[List["InlineElement"]]
    rows: Sequence[Sequence[List["InlineElement"]]]
    # "left" / "center" / "right" / None per separator cell
    alignments: Sequence[str | None] = ()


@dataclass
class Blockquote(Block):
    paragraphs: List[List["InlineElement"]]
    callout: CalloutKind | None = None


@dataclass
class CodeBlock(Block):
    language: str
    lines: List[str]

    @property
    def code(self) -> str:
        return "\n".join(self.lines)


@dataclass
class HorizontalRule(Block):
    """Horizontal rule / thematic break."""


@dataclass
class InlineElement:
    """Base class for inline nodes."""


@dataclass
class InlineText(InlineElement):
    text: str


@dataclass
class InlineBold(InlineElement):
    children: List[InlineElement]


@dataclass
class InlineItalic(InlineElement):
    children: List[InlineElement]


@dataclass
class InlineStrikethrough(InlineElement):
    children: List[InlineElement]


@dataclass
class InlineCode(InlineElement):
    text: str


@dataclass
class InlineLink(InlineElement):
    children: List[InlineElement]
    url: str


@dataclass
class InlineImage(InlineElement):
    alt: str
    url: str


@dataclass(frozen=True)
class Fragment:
    """A piece of a highlighted source line; ``category`` is None for plain text."""

    text: str
    category: str | None = None

    @property
    def classified(self) -> bool:
        return self.category is not None
