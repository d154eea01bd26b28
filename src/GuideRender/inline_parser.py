"""Inline span parsing: emphasis, strikethrough, code, links and images.

Spans are found with a single left-to-right alternation. Bold comes before
italic in the alternation so ``**x**`` is never read as two italic runs, and
the captured text of every span except inline code is parsed again, so
``**bold *and italic***`` yields a bold node holding an italic one.
"""

from __future__ import annotations

import re
from typing import List

from .model import (
    InlineBold,
    InlineCode,
    InlineElement,
    InlineImage,
    InlineItalic,
    InlineLink,
    InlineStrikethrough,
    InlineText,
)

_INLINE_PATTERN = re.compile(
    r"(?P<bold>\*\*(?P<bold_text>.+?)\*\*(?!\*))"
    r"|(?P<strike>~~(?P<strike_text>.+?)~~)"
    r"|(?P<code>`(?P<code_text>[^`]*)`)"
    r"|(?P<image>!\[(?P<image_alt>[^\]]*)\]\((?P<image_url>[^)]*)\))"
    r"|(?P<link>\[(?P<link_text>[^\]]*)\]\((?P<link_url>[^)]*)\))"
    r"|(?P<italic>(?<!\*)\*(?!\*)(?P<italic_text>.+?)(?<!\*)\*(?!\*))"
)


def parse_inline(text: str) -> List[InlineElement]:
    """Parse a run of text into inline nodes. Never raises."""
    result: List[InlineElement] = []
    pos = 0
    for match in _INLINE_PATTERN.finditer(text):
        if match.start() > pos:
            _append_text(result, text[pos : match.start()])
        node = _build_span(match)
        if node is not None:
            result.append(node)
        pos = match.end()
    if pos < len(text):
        _append_text(result, text[pos:])
    return result


def _build_span(match: re.Match) -> InlineElement | None:
    kind = match.lastgroup
    if kind == "bold":
        return InlineBold(parse_inline(match.group("bold_text")))
    if kind == "italic":
        return InlineItalic(parse_inline(match.group("italic_text")))
    if kind == "strike":
        return InlineStrikethrough(parse_inline(match.group("strike_text")))
    if kind == "code":
        code = match.group("code_text")
        return InlineCode(code) if code else None
    if kind == "image":
        alt, url = match.group("image_alt"), match.group("image_url")
        if not alt and not url:
            return None
        return InlineImage(alt=alt, url=url)
    # link
    label, url = match.group("link_text"), match.group("link_url")
    if not label and not url:
        return None
    children = parse_inline(label) if label else [InlineText(url)]
    return InlineLink(children=children, url=url)


def _append_text(result: List[InlineElement], text: str) -> None:
    if result and isinstance(result[-1], InlineText):
        result[-1] = InlineText(result[-1].text + text)
    else:
        result.append(InlineText(text))
