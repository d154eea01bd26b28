from __future__ import annotations

from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Cm, Pt, RGBColor

from .model import CalloutKind

A4_WIDTH_MM = 210
A4_HEIGHT_MM = 297

FONT_NAME = "Calibri"
CODE_FONT_NAME = "Consolas"
FONT_SIZE_PT = 11
CODE_FONT_SIZE_PT = 9.5
LINE_SPACING_PT = 15

MARGIN_CM = 2.0
LIST_INDENT_CM = 0.75
QUOTE_INDENT_CM = 0.6
MAX_IMAGE_WIDTH_CM = 15.0

LINK_COLOR = "2563EB"
MUTED_COLOR = "64748B"
RULE_COLOR = "CBD5E1"
QUOTE_BORDER_COLOR = "CBD5E1"
CODE_BACKGROUND = "0F172A"
CODE_TEXT_COLOR = "CBD5E1"
LINE_NUMBER_COLOR = "475569"

# colour per highlight category; unknown categories keep the code text colour
CATEGORY_COLORS = {
    "comment": "64748B",
    "string": "34D399",
    "keyword": "F87171",
    "function": "60A5FA",
    "decorator": "FACC15",
    "number": "C084FC",
    "key": "22D3EE",
    "boolean": "F87171",
    "null": "64748B",
    "placeholder": "FACC15",
    "variable": "FACC15",
    "flag": "22D3EE",
    "operator": "F87171",
}
BOLD_CATEGORIES = {"keyword"}
ITALIC_CATEGORIES = {"comment"}

CALLOUT_COLORS = {
    CalloutKind.NOTE: "3B82F6",
    CalloutKind.TIP: "22C55E",
    CalloutKind.IMPORTANT: "A855F7",
    CalloutKind.WARNING: "EAB308",
    CalloutKind.CAUTION: "EF4444",
}

ALIGNMENTS = {
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
}


def apply_page_layout(doc) -> None:
    """Apply A4 page setup and uniform margins."""
    section = doc.sections[0]
    section.page_height = Cm(A4_HEIGHT_MM / 10)
    section.page_width = Cm(A4_WIDTH_MM / 10)
    section.left_margin = Cm(MARGIN_CM)
    section.right_margin = Cm(MARGIN_CM)
    section.top_margin = Cm(MARGIN_CM)
    section.bottom_margin = Cm(MARGIN_CM)


def set_run_font(
    run,
    bold: bool = False,
    italic: bool = False,
    code: bool = False,
    strike: bool = False,
    color: str | None = None,
    sized: bool = True,
) -> None:
    run.font.name = CODE_FONT_NAME if code else FONT_NAME
    if sized:
        run.font.size = Pt(CODE_FONT_SIZE_PT if code else FONT_SIZE_PT)
    run.bold = bold
    run.italic = italic
    run.font.strike = strike
    if color:
        run.font.color.rgb = RGBColor.from_string(color)


def apply_body_paragraph_format(paragraph) -> None:
    paragraph.alignment = WD_ALIGN_PARAGRAPH.LEFT
    paragraph.paragraph_format.space_before = Pt(0)
    paragraph.paragraph_format.space_after = Pt(6)
    paragraph.paragraph_format.line_spacing = Pt(LINE_SPACING_PT)


def apply_code_line_format(paragraph) -> None:
    # shading has to precede spacing and alignment inside w:pPr
    shade_paragraph(paragraph, CODE_BACKGROUND)
    paragraph.alignment = WD_ALIGN_PARAGRAPH.LEFT
    paragraph.paragraph_format.space_before = Pt(0)
    paragraph.paragraph_format.space_after = Pt(0)
    paragraph.paragraph_format.line_spacing = 1.0


def apply_caption_format(paragraph, space_after: int = 0) -> None:
    paragraph.alignment = WD_ALIGN_PARAGRAPH.LEFT
    paragraph.paragraph_format.space_before = Pt(6)
    paragraph.paragraph_format.space_after = Pt(space_after)
    for run in paragraph.runs:
        set_run_font(run, bold=True, color=MUTED_COLOR)


def shade_paragraph(paragraph, fill: str) -> None:
    p_pr = paragraph._p.get_or_add_pPr()
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill)
    p_pr.append(shd)


def set_paragraph_border(paragraph, side: str, color: str, size: int = 12) -> None:
    """Draw a single border line on one side ("left", "bottom", ...) of a paragraph."""
    p_pr = paragraph._p.get_or_add_pPr()
    borders = p_pr.find(qn("w:pBdr"))
    if borders is None:
        borders = OxmlElement("w:pBdr")
        p_pr.append(borders)
    border = OxmlElement(f"w:{side}")
    border.set(qn("w:val"), "single")
    border.set(qn("w:sz"), str(size))
    border.set(qn("w:space"), "8")
    border.set(qn("w:color"), color)
    borders.append(border)
