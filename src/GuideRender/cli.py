from __future__ import annotations

import argparse
import logging
from pathlib import Path

from . import markdown_parser, renderer_docx
from .highlight_rules import load_rule_sets
from .highlighter import Highlighter
from .utils import configure_logging, read_guide, resolve_output_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="GuideRender",
        description="Render an operator guide (Markdown-style notes) into a DOCX document.",
    )
    parser.add_argument("input", type=str, help="Path to the guide file")
    parser.add_argument("-o", "--output", type=str, help="Output DOCX path")
    parser.add_argument("--rules", type=str, help="Extra YAML file with syntax highlighting rules")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)
    input_path = Path(args.input).expanduser()
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")
    output_path = resolve_output_path(input_path, args.output)

    highlighter = Highlighter(load_rule_sets(args.rules))
    logging.debug("Highlight languages: %s", ", ".join(sorted(highlighter.rule_sets.languages)))

    logging.info("Reading %s", input_path)
    guide_text = read_guide(input_path)
    logging.debug("Guide length: %d chars", len(guide_text))

    logging.info("Parsing guide...")
    document = markdown_parser.parse_markdown(guide_text)
    logging.debug("Parsed %d blocks", len(document.blocks))

    logging.info("Rendering DOCX to %s", output_path)
    renderer_docx.render_document(
        document, output_path=output_path, asset_root=input_path.parent, highlighter=highlighter
    )

    logging.info("Done. Saved to %s", output_path)


if __name__ == "__main__":
    main()
