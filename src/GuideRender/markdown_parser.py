from __future__ import annotations

import logging
import re
from typing import List

from .inline_parser import parse_inline
from .model import (
    Block,
    Blockquote,
    CalloutKind,
    CodeBlock,
    Document,
    Heading,
    HorizontalRule,
    InlineElement,
    ListBlock,
    ListItem,
    Paragraph,
    TableBlock,
)

logger = logging.getLogger(__name__)

DEFAULT_CODE_LANGUAGE = "bash"
MAX_HEADING_LEVEL = 6

_HEADING_RE = re.compile(r"^(?P<marks>#+)\s+(?P<text>.*)$")
_RULE_RE = re.compile(r"^(?:---|\*\*\*|\* \* \*)$")
_TABLE_SEPARATOR_RE = re.compile(r"^\|(?:\s*:?-+:?\s*\|)+$")
_TABLE_CELL_SPLIT_RE = re.compile(r"(?<!\\)\|")
_ORDERED_MARKER_RE = re.compile(r"^\d+\.\s")
_LIST_MARKER_RE = re.compile(r"^(\*|-|\d+\.)\s+")
_TASK_ITEM_RE = re.compile(r"^(\*|-|\d+\.)\s+\[(x| )\]\s+(.*)", re.IGNORECASE)
_CALLOUT_RE = re.compile(r"^\[!(?P<kind>\w+)\]\s*")
_SHELL_PROMPT_RE = re.compile(r"^\$\s*")
_QUOTE_PREFIX_RE = re.compile(r"^> ?")
_FENCE = "```"


def parse_markdown(text: str) -> Document:
    """Parse a guide into a Document. Total over all strings."""
    # only "\n" ends a line; other separators belong to the line content
    lines = [line.removesuffix("\r") for line in text.strip().split("\n")]
    blocks = _parse_blocks(lines)
    logger.debug("Parsed %d lines into %d blocks", len(lines), len(blocks))
    return Document(blocks=blocks)


def _parse_blocks(lines: List[str]) -> list[Block]:
    blocks: list[Block] = []
    i = 0
    while i < len(lines):
        stripped = lines[i].strip()
        heading = _HEADING_RE.match(stripped)
        if heading:
            level = min(len(heading.group("marks")), MAX_HEADING_LEVEL)
            blocks.append(Heading(level=level, inline=parse_inline(heading.group("text").strip())))
            i += 1
        elif _is_horizontal_rule(stripped):
            blocks.append(HorizontalRule())
            i += 1
        elif _is_table_line(stripped) and i + 1 < len(lines) and _is_table_separator(lines[i + 1]):
            table_block, i = _parse_table(lines, i)
            blocks.append(table_block)
        elif stripped.startswith(">"):
            quote, i = _parse_blockquote(lines, i)
            blocks.append(quote)
        elif stripped.startswith(_FENCE):
            code_block, i = _parse_fence(lines, i)
            blocks.append(code_block)
        elif stripped.startswith("$"):
            blocks.append(CodeBlock(language=DEFAULT_CODE_LANGUAGE, lines=[_SHELL_PROMPT_RE.sub("", stripped)]))
            i += 1
        elif _is_list_item(stripped):
            list_block, i = _parse_list(lines, i)
            blocks.append(list_block)
        elif not stripped:
            i += 1
        else:
            paragraph, i = _parse_paragraph(lines, i)
            blocks.append(paragraph)
    return blocks


def _parse_paragraph(lines: List[str], index: int) -> tuple[Paragraph, int]:
    # The first line is always taken: a line that only looks special (``#tag``,
    # a lone ``|cell|``) would otherwise never be consumed.
    parts = [lines[index].strip()]
    i = index + 1
    while i < len(lines) and lines[i].strip() and not _is_special_line(lines[i]):
        parts.append(lines[i].strip())
        i += 1
    return Paragraph(inline=parse_inline(" ".join(parts))), i


def _parse_fence(lines: List[str], index: int) -> tuple[CodeBlock, int]:
    language = lines[index].strip()[len(_FENCE) :].strip().lower() or DEFAULT_CODE_LANGUAGE
    code_lines: list[str] = []
    i = index + 1
    while i < len(lines) and not lines[i].strip().startswith(_FENCE):
        code_lines.append(lines[i])
        i += 1
    while code_lines and not code_lines[-1].strip():
        code_lines.pop()
    # skip the closing fence; an unterminated block simply ends at EOF
    return CodeBlock(language=language, lines=code_lines), min(i + 1, len(lines))


def _parse_list(lines: List[str], index: int) -> tuple[ListBlock, int]:
    return _parse_list_level(lines, index, _indent_of(lines[index]))


def _parse_list_level(lines: List[str], index: int, indent: int) -> tuple[ListBlock, int]:
    ordered = bool(_ORDERED_MARKER_RE.match(lines[index].strip()))
    items: list[ListItem] = []
    # The newest item stays open until its nested lists (if any) are complete.
    pending: tuple[List[InlineElement], bool | None] | None = None
    pending_children: ListBlock | None = None
    i = index
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()
        if not stripped:
            i += 1
            continue
        if not _is_list_item(stripped):
            break
        current_indent = _indent_of(line)
        if current_indent < indent:
            break
        if current_indent > indent:
            nested, i = _parse_list_level(lines, i, current_indent)
            if pending is not None:
                pending_children = _merge_lists(pending_children, nested)
            continue

        if pending is not None:
            items.append(ListItem(inline=pending[0], checked=pending[1], children=pending_children))
        pending = _parse_list_item_text(stripped)
        pending_children = None
        i += 1

    if pending is not None:
        items.append(ListItem(inline=pending[0], checked=pending[1], children=pending_children))
    return ListBlock(items=items, ordered=ordered), i


def _parse_list_item_text(stripped: str) -> tuple[List[InlineElement], bool | None]:
    task = _TASK_ITEM_RE.match(stripped)
    if task:
        return parse_inline(task.group(3)), task.group(2).lower() == "x"
    return parse_inline(_LIST_MARKER_RE.sub("", stripped, count=1)), None


def _merge_lists(existing: ListBlock | None, nested: ListBlock) -> ListBlock:
    if existing is None:
        return nested
    return ListBlock(items=[*existing.items, *nested.items], ordered=existing.ordered)


def _parse_table(lines: List[str], index: int) -> tuple[TableBlock, int]:
    headers = [parse_inline(cell) for cell in _split_table_row(lines[index])]
    alignments = [_cell_alignment(cell) for cell in _split_table_row(lines[index + 1])]
    rows: list[list[List[InlineElement]]] = []
    i = index + 2
    while i < len(lines) and _is_table_line(lines[i].strip()):
        rows.append([parse_inline(cell) for cell in _split_table_row(lines[i])])
        i += 1
    return TableBlock(headers=headers, rows=rows, alignments=alignments), i


def _split_table_row(line: str) -> list[str]:
    inner = line.strip()[1:-1]
    return [cell.strip().replace("\\|", "|") for cell in _TABLE_CELL_SPLIT_RE.split(inner)]


def _cell_alignment(cell: str) -> str | None:
    left, right = cell.startswith(":"), cell.endswith(":")
    if left and right:
        return "center"
    if right:
        return "right"
    if left:
        return "left"
    return None


def _parse_blockquote(lines: List[str], index: int) -> tuple[Blockquote, int]:
    quote_lines: list[str] = []
    i = index
    while i < len(lines) and lines[i].strip().startswith(">"):
        quote_lines.append(_QUOTE_PREFIX_RE.sub("", lines[i].strip()))
        i += 1

    content = "\n".join(quote_lines)
    callout = None
    marker = _CALLOUT_RE.match(content)
    if marker:
        callout = CalloutKind.from_marker(marker.group("kind"))
        if callout is not None:
            content = content[marker.end() :]
        else:
            logger.debug("Unknown callout kind %r, keeping a plain blockquote", marker.group("kind"))

    paragraphs = [parse_inline(" ".join(part)) for part in _split_paragraphs(content)]
    return Blockquote(paragraphs=paragraphs, callout=callout), i


def _split_paragraphs(content: str) -> list[list[str]]:
    paragraphs: list[list[str]] = []
    current: list[str] = []
    for line in content.split("\n"):
        if line.strip():
            current.append(line.strip())
        elif current:
            paragraphs.append(current)
            current = []
    if current:
        paragraphs.append(current)
    return paragraphs


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip())


def _is_list_item(stripped: str) -> bool:
    return stripped.startswith("* ") or stripped.startswith("- ") or bool(_ORDERED_MARKER_RE.match(stripped))


def _is_horizontal_rule(stripped: str) -> bool:
    return bool(_RULE_RE.match(stripped))


def _is_table_line(stripped: str) -> bool:
    return len(stripped) >= 2 and stripped.startswith("|") and stripped.endswith("|")


def _is_table_separator(line: str) -> bool:
    return bool(_TABLE_SEPARATOR_RE.match(line.strip()))


def _is_special_line(line: str) -> bool:
    stripped = line.strip()
    return (
        stripped.startswith("#")
        or _is_list_item(stripped)
        or stripped.startswith(">")
        or stripped.startswith("$")
        or stripped.startswith(_FENCE)
        or _is_table_line(stripped)
        or _is_horizontal_rule(stripped)
    )
