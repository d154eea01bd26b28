import textwrap

import pytest

from GuideRender import markdown_parser
from GuideRender.model import (
    Blockquote,
    CalloutKind,
    CodeBlock,
    Document,
    Heading,
    HorizontalRule,
    InlineBold,
    InlineCode,
    InlineItalic,
    InlineText,
    ListBlock,
    Paragraph,
    TableBlock,
)

GUIDE = textwrap.dedent(
    """
    # Nmap cheat sheet

    Scan hosts with **nmap** and read the *output* carefully.
    Results are written to `scan.xml`.

    ## Steps

    1. Discover hosts
    2. Scan ports
       - [x] TCP
       - [ ] UDP

    | Flag | Meaning |
    |:-----|--------:|
    | `-sV` | Version detection |
    | `-p-` | All ports |

    > [!TIP]
    > Use `-T4` on fast networks.

    ```python
    import nmap
    ```

    $ nmap -sV 10.0.0.1

    ---
    """
)


def test_parse_guide_structure():
    document = markdown_parser.parse_markdown(GUIDE)
    kinds = [type(block) for block in document.blocks]
    assert kinds == [
        Heading,
        Paragraph,
        Heading,
        ListBlock,
        TableBlock,
        Blockquote,
        CodeBlock,
        CodeBlock,
        HorizontalRule,
    ]
    paragraph = document.blocks[1]
    assert any(isinstance(item, InlineBold) for item in paragraph.inline)
    assert any(isinstance(item, InlineItalic) for item in paragraph.inline)
    assert InlineCode("scan.xml") in paragraph.inline


def test_parse_is_idempotent():
    assert markdown_parser.parse_markdown(GUIDE) == markdown_parser.parse_markdown(GUIDE)


def test_heading_level_and_text():
    document = markdown_parser.parse_markdown("# Title")
    assert document.blocks == [Heading(level=1, inline=[InlineText("Title")])]


def test_heading_level_is_clamped():
    document = markdown_parser.parse_markdown("######## Deep")
    assert document.blocks == [Heading(level=6, inline=[InlineText("Deep")])]


def test_hash_without_space_is_paragraph():
    document = markdown_parser.parse_markdown("#hashtag\nmore text")
    assert document.blocks == [Paragraph(inline=[InlineText("#hashtag more text")])]


def test_nested_list():
    document = markdown_parser.parse_markdown("- a\n  - b")
    assert len(document.blocks) == 1
    outer = document.blocks[0]
    assert isinstance(outer, ListBlock) and not outer.ordered
    assert outer.items[0].inline == [InlineText("a")]
    assert outer.items[0].children is not None
    assert [item.inline for item in outer.items[0].children.items] == [[InlineText("b")]]


def test_nested_list_returns_to_outer_level():
    document = markdown_parser.parse_markdown("- a\n  - b\n    - c\n- d")
    outer = document.blocks[0]
    assert [item.inline for item in outer.items] == [[InlineText("a")], [InlineText("d")]]
    child = outer.items[0].children
    assert [item.inline for item in child.items] == [[InlineText("b")]]
    assert [item.inline for item in child.items[0].children.items] == [[InlineText("c")]]
    assert outer.items[1].children is None


def test_second_nested_run_merges_into_item_children():
    document = markdown_parser.parse_markdown("- a\n    - b\n  - c")
    outer = document.blocks[0]
    assert len(outer.items) == 1
    assert [item.inline for item in outer.items[0].children.items] == [[InlineText("b")], [InlineText("c")]]


def test_list_ordering_is_decided_by_first_item():
    ordered = markdown_parser.parse_markdown("1. one\n2. two").blocks[0]
    assert ordered.ordered and len(ordered.items) == 2
    mixed = markdown_parser.parse_markdown("- a\n1. b").blocks[0]
    assert not mixed.ordered and len(mixed.items) == 2


def test_list_skips_blank_lines():
    document = markdown_parser.parse_markdown("- a\n\n- b\n\nAfter")
    assert len(document.blocks) == 2
    assert len(document.blocks[0].items) == 2
    assert document.blocks[1] == Paragraph(inline=[InlineText("After")])


def test_task_items():
    items = markdown_parser.parse_markdown("- [x] done\n- [X] also done\n- [ ] todo\n- plain").blocks[0].items
    assert [item.checked for item in items] == [True, True, False, None]
    assert items[0].inline == [InlineText("done")]
    assert items[3].inline == [InlineText("plain")]


def test_table_shape_alignment_and_escaped_pipe():
    text = "| Name | Value |\n|:---|---:|\n| a \\| b | `1` |"
    table = markdown_parser.parse_markdown(text).blocks[0]
    assert isinstance(table, TableBlock)
    assert table.headers == [[InlineText("Name")], [InlineText("Value")]]
    assert len(table.rows) == 1 and len(table.rows[0]) == 2
    assert table.rows[0][0] == [InlineText("a | b")]
    assert table.rows[0][1] == [InlineCode("1")]
    assert list(table.alignments) == ["left", "right"]


def test_table_keeps_ragged_rows():
    text = "| a | b |\n|---|:-:|\n| 1 | 2 | 3 |\n| 4 |"
    table = markdown_parser.parse_markdown(text).blocks[0]
    assert [len(row) for row in table.rows] == [3, 1]
    assert list(table.alignments) == [None, "center"]


def test_table_stops_at_blank_line():
    text = "| a |\n|---|\n| 1 |\n\n| 2 |"
    blocks = markdown_parser.parse_markdown(text).blocks
    assert isinstance(blocks[0], TableBlock) and len(blocks[0].rows) == 1
    assert blocks[1] == Paragraph(inline=[InlineText("| 2 |")])


def test_callout():
    document = markdown_parser.parse_markdown("> [!WARNING] Be careful")
    assert document.blocks == [Blockquote(paragraphs=[[InlineText("Be careful")]], callout=CalloutKind.WARNING)]


def test_callout_marker_on_own_line_is_case_insensitive():
    quote = markdown_parser.parse_markdown("> [!note]\n> Remember this").blocks[0]
    assert quote.callout is CalloutKind.NOTE
    assert quote.paragraphs == [[InlineText("Remember this")]]


def test_unknown_callout_is_plain_quote():
    quote = markdown_parser.parse_markdown("> [!DANGER] boom").blocks[0]
    assert quote.callout is None
    assert quote.paragraphs == [[InlineText("[!DANGER] boom")]]


def test_blockquote_paragraphs_split_on_blank_lines():
    quote = markdown_parser.parse_markdown(">one\n> two\n>\n> three").blocks[0]
    assert quote.callout is None
    assert quote.paragraphs == [[InlineText("one two")], [InlineText("three")]]


def test_fence_default_language():
    document = markdown_parser.parse_markdown("```\ncode\n```")
    assert document.blocks == [CodeBlock(language=markdown_parser.DEFAULT_CODE_LANGUAGE, lines=["code"])]


def test_fence_keeps_lines_verbatim_and_drops_trailing_blanks():
    text = "```Python\ndef f():\n    return 1\n\n```\nAfter"
    blocks = markdown_parser.parse_markdown(text).blocks
    assert blocks[0] == CodeBlock(language="python", lines=["def f():", "    return 1"])
    assert blocks[1] == Paragraph(inline=[InlineText("After")])


def test_fence_keeps_form_feed_and_crlf_line_endings():
    """Only \\n ends a line, so a form feed stays inside its code line."""
    blocks = markdown_parser.parse_markdown("```\na\x0cb\n```").blocks
    assert blocks == [CodeBlock(language="bash", lines=["a\x0cb"])]

    blocks = markdown_parser.parse_markdown("# T\r\ntext\r\n").blocks
    assert blocks == [Heading(level=1, inline=[InlineText("T")]), Paragraph(inline=[InlineText("text")])]


def test_unterminated_fence_runs_to_end():
    blocks = markdown_parser.parse_markdown('```json\n{"a": 1}\n# not a heading').blocks
    assert blocks == [CodeBlock(language="json", lines=['{"a": 1}', "# not a heading"])]


def test_shell_shorthand():
    blocks = markdown_parser.parse_markdown("$ nmap -sV host").blocks
    assert blocks == [CodeBlock(language="bash", lines=["nmap -sV host"])]


@pytest.mark.parametrize("rule", ["---", "***", "* * *"])
def test_horizontal_rules(rule):
    assert markdown_parser.parse_markdown(f"before\n\n{rule}\n\nafter").blocks[1] == HorizontalRule()


def test_paragraph_joins_lines_until_special_line():
    blocks = markdown_parser.parse_markdown("first line\n  second line\n- item").blocks
    assert blocks[0] == Paragraph(inline=[InlineText("first line second line")])
    assert isinstance(blocks[1], ListBlock)


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   \n  ",
        "```",
        ">",
        "|",
        "||\n|-|",
        "- ",
        "1.",
        "$",
        "**",
        "*" * 50,
        "[",
        "![](",
        "> [!]",
        "- b\n    - a\n  - c",
        "| a |\n|---|\n|",
    ],
)
def test_parser_is_total(text):
    assert isinstance(markdown_parser.parse_markdown(text), Document)
