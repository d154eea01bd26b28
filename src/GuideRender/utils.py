from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

DOCX_SUFFIX = ".docx"
# strips a leading byte-order mark left by editors that save "UTF-8 with BOM"
GUIDE_ENCODING = "utf-8-sig"


def configure_logging(verbose: bool = False) -> None:
    """Console logging for the GuideRender command."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )


def resolve_output_path(guide_path: Path, output: Optional[str]) -> Path:
    """Pick the DOCX target for a guide.

    No ``output`` writes next to the guide; a directory gets ``<stem>.docx``;
    a path without a suffix gets ``.docx`` appended.
    """
    if not output:
        return guide_path.with_suffix(DOCX_SUFFIX)
    out_path = Path(output).expanduser()
    if out_path.is_dir():
        return out_path / f"{guide_path.stem}{DOCX_SUFFIX}"
    if not out_path.suffix:
        return out_path.with_suffix(DOCX_SUFFIX)
    return out_path


def read_guide(path: Path) -> str:
    return path.read_text(encoding=GUIDE_ENCODING)
