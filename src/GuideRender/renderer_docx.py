from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable

from docx import Document as DocxDocument
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.image.exceptions import UnrecognizedImageError
from docx.shared import Cm, Pt

from . import guide_format
from .highlighter import Highlighter, get_highlighter
from .model import (
    Block,
    Blockquote,
    CodeBlock,
    Document,
    Heading,
    HorizontalRule,
    InlineBold,
    InlineCode,
    InlineElement,
    InlineImage,
    InlineItalic,
    InlineLink,
    InlineStrikethrough,
    InlineText,
    ListBlock,
    Paragraph,
    TableBlock,
)

CHECKED_BOX = "☑"
UNCHECKED_BOX = "☐"
BULLET = "•"


@dataclass
class RenderState:
    asset_root: Path | None = None
    highlighter: Highlighter = field(default_factory=get_highlighter)


@dataclass(frozen=True)
class _RunStyle:
    bold: bool = False
    italic: bool = False
    strike: bool = False
    link: bool = False
    color: str | None = None


def render_document(
    doc: Document,
    output_path: str | Path,
    asset_root: Path | None = None,
    highlighter: Highlighter | None = None,
) -> None:
    output_path = Path(output_path)
    state = RenderState(asset_root=asset_root, highlighter=highlighter or get_highlighter())
    docx = DocxDocument()
    guide_format.apply_page_layout(docx)

    for block in doc.blocks:
        _dispatch_block(docx, block, state)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    docx.save(output_path)


def _dispatch_block(docx: DocxDocument, block: Block, state: RenderState) -> None:
    if isinstance(block, Heading):
        _render_heading(docx, block, state)
    elif isinstance(block, Paragraph):
        _render_paragraph(docx, block.inline, state)
    elif isinstance(block, ListBlock):
        _render_list(docx, block, state, depth=0)
    elif isinstance(block, TableBlock):
        _render_table_block(docx, block, state)
    elif isinstance(block, Blockquote):
        _render_blockquote(docx, block, state)
    elif isinstance(block, CodeBlock):
        _render_code_block(docx, block, state)
    elif isinstance(block, HorizontalRule):
        _render_horizontal_rule(docx)


def _render_heading(docx: DocxDocument, heading: Heading, state: RenderState) -> None:
    paragraph = docx.add_heading(level=heading.level)
    # heading styles carry their own size
    _add_inline_runs(paragraph, heading.inline, state, sized=False)


def _render_paragraph(docx: DocxDocument, inline_elements: Iterable[InlineElement], state: RenderState) -> None:
    paragraph = docx.add_paragraph()
    _add_inline_runs(paragraph, inline_elements, state)
    guide_format.apply_body_paragraph_format(paragraph)


def _render_list(docx: DocxDocument, block: ListBlock, state: RenderState, depth: int) -> None:
    for idx, item in enumerate(block.items, start=1):
        paragraph = docx.add_paragraph()
        if item.checked is not None:
            marker = CHECKED_BOX if item.checked else UNCHECKED_BOX
        else:
            marker = f"{idx}." if block.ordered else BULLET
        run = paragraph.add_run(f"{marker} ")
        guide_format.set_run_font(run)
        # completed tasks are struck through
        style = _RunStyle(strike=True, color=guide_format.MUTED_COLOR) if item.checked else _RunStyle()
        _add_inline_runs(paragraph, item.inline, state, style=style)

        guide_format.apply_body_paragraph_format(paragraph)
        paragraph.paragraph_format.left_indent = Cm(guide_format.LIST_INDENT_CM * (depth + 1))
        paragraph.paragraph_format.first_line_indent = Cm(-guide_format.LIST_INDENT_CM / 2)
        paragraph.paragraph_format.space_after = Pt(2)

        if item.children is not None:
            _render_list(docx, item.children, state, depth + 1)


def _render_table_block(docx: DocxDocument, block: TableBlock, state: RenderState) -> None:
    # ragged rows are padded on output only; the model keeps them as parsed
    col_count = max([len(block.headers), *(len(row) for row in block.rows), 1])
    table = docx.add_table(rows=1 + len(block.rows), cols=col_count)
    table.style = "Table Grid"
    table.alignment = WD_TABLE_ALIGNMENT.LEFT

    for c_idx, cell_inline in enumerate(block.headers):
        paragraph = table.cell(0, c_idx).paragraphs[0]
        _add_inline_runs(paragraph, cell_inline, state, style=_RunStyle(bold=True))
    for r_idx, row in enumerate(block.rows, start=1):
        for c_idx, cell_inline in enumerate(row):
            _add_inline_runs(table.cell(r_idx, c_idx).paragraphs[0], cell_inline, state)

    for row in table.rows:
        for c_idx, cell in enumerate(row.cells):
            alignment = block.alignments[c_idx] if c_idx < len(block.alignments) else None
            for paragraph in cell.paragraphs:
                paragraph.paragraph_format.space_after = Pt(0)
                if alignment:
                    paragraph.alignment = guide_format.ALIGNMENTS[alignment]

    spacer_after = docx.add_paragraph("")
    guide_format.apply_body_paragraph_format(spacer_after)


def _render_blockquote(docx: DocxDocument, block: Blockquote, state: RenderState) -> None:
    if block.callout is not None:
        color = guide_format.CALLOUT_COLORS[block.callout]
        title = docx.add_paragraph()
        guide_format.set_paragraph_border(title, "left", color, size=24)
        run = title.add_run(block.callout.name.capitalize())
        guide_format.set_run_font(run, bold=True, color=color)
        _format_quote_paragraph(title)
        style = _RunStyle()
    else:
        color = guide_format.QUOTE_BORDER_COLOR
        style = _RunStyle(italic=True, color=guide_format.MUTED_COLOR)

    for inline in block.paragraphs:
        paragraph = docx.add_paragraph()
        guide_format.set_paragraph_border(paragraph, "left", color, size=24 if block.callout else 12)
        _add_inline_runs(paragraph, inline, state, style=style)
        _format_quote_paragraph(paragraph)


def _format_quote_paragraph(paragraph) -> None:
    guide_format.apply_body_paragraph_format(paragraph)
    paragraph.paragraph_format.left_indent = Cm(guide_format.QUOTE_INDENT_CM)
    paragraph.paragraph_format.space_after = Pt(2)


def _render_code_block(docx: DocxDocument, block: CodeBlock, state: RenderState) -> None:
    caption = docx.add_paragraph(block.language.upper())
    guide_format.apply_caption_format(caption)

    highlighted = state.highlighter.highlight(block.code, block.language)
    width = len(str(len(highlighted)))
    for number, fragments in enumerate(highlighted, start=1):
        paragraph = docx.add_paragraph()
        guide_format.apply_code_line_format(paragraph)
        run = paragraph.add_run(f"{number:>{width}}  ")
        guide_format.set_run_font(run, code=True, color=guide_format.LINE_NUMBER_COLOR)
        for fragment in fragments:
            run = paragraph.add_run(fragment.text)
            category = fragment.category if fragment.classified else None
            guide_format.set_run_font(
                run,
                code=True,
                bold=category in guide_format.BOLD_CATEGORIES,
                italic=category in guide_format.ITALIC_CATEGORIES,
                color=guide_format.CATEGORY_COLORS.get(category or "", guide_format.CODE_TEXT_COLOR),
            )

    spacer_after = docx.add_paragraph("")
    guide_format.apply_body_paragraph_format(spacer_after)


def _render_horizontal_rule(docx: DocxDocument) -> None:
    paragraph = docx.add_paragraph()
    guide_format.set_paragraph_border(paragraph, "bottom", guide_format.RULE_COLOR, size=6)
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    paragraph.paragraph_format.space_after = Pt(12)


def _add_inline_runs(
    paragraph,
    inlines: Iterable[InlineElement],
    state: RenderState,
    style: _RunStyle = _RunStyle(),
    sized: bool = True,
) -> None:
    for inline in inlines:
        if isinstance(inline, InlineText):
            _styled_run(paragraph, inline.text, style, sized)
        elif isinstance(inline, InlineCode):
            run = paragraph.add_run(inline.text)
            guide_format.set_run_font(run, bold=style.bold, italic=style.italic, code=True, sized=sized)
        elif isinstance(inline, InlineBold):
            _add_inline_runs(paragraph, inline.children, state, replace(style, bold=True), sized)
        elif isinstance(inline, InlineItalic):
            _add_inline_runs(paragraph, inline.children, state, replace(style, italic=True), sized)
        elif isinstance(inline, InlineStrikethrough):
            _add_inline_runs(paragraph, inline.children, state, replace(style, strike=True), sized)
        elif isinstance(inline, InlineLink):
            _add_inline_runs(paragraph, inline.children, state, replace(style, link=True), sized)
        elif isinstance(inline, InlineImage):
            _add_inline_image(paragraph, inline, state)


def _styled_run(paragraph, text: str, style: _RunStyle, sized: bool):
    run = paragraph.add_run(text)
    color = guide_format.LINK_COLOR if style.link else style.color
    guide_format.set_run_font(
        run, bold=style.bold, italic=style.italic, strike=style.strike, color=color, sized=sized
    )
    if style.link:
        run.font.underline = True
    return run


def _add_inline_image(paragraph, image: InlineImage, state: RenderState) -> None:
    placeholder = f"[Image: {image.alt or image.url}]"
    muted = _RunStyle(italic=True, color=guide_format.MUTED_COLOR)
    if image.url.startswith(("http://", "https://", "data:")):
        _styled_run(paragraph, placeholder, muted, True)
        return

    image_path = _resolve_image_path(image.url, state.asset_root)
    if image_path is None:
        _styled_run(paragraph, placeholder, muted, True)
        return

    run = paragraph.add_run()
    try:
        shape = run.add_picture(str(image_path))
    except UnrecognizedImageError:
        run.add_text(placeholder)
        guide_format.set_run_font(run, italic=True, color=guide_format.MUTED_COLOR)
        return
    max_width = Cm(guide_format.MAX_IMAGE_WIDTH_CM)
    if shape.width > max_width:
        shape.height = int(shape.height * max_width / shape.width)
        shape.width = max_width


def _resolve_image_path(url: str, asset_root: Path | None) -> Path | None:
    # over-long names or NUL bytes in the url make the lookup itself fail
    try:
        image_path = Path(url)
        if asset_root:
            candidate = asset_root / url
            if candidate.exists():
                image_path = candidate
        return image_path if image_path.is_file() else None
    except (OSError, ValueError):
        return None
