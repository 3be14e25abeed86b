"""Read back generated PDFs to report how many pages they contain."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

try:
    from pdfminer.pdfexceptions import (  # type: ignore[import-not-found]
        PSException,
    )
    from pdfminer.pdfpage import PDFPage  # type: ignore[import-not-found]
except ImportError as exc:  # pragma: no cover - surfaces missing dependency
    raise SystemExit(
        (
            "Missing dependency 'pdfminer.six'. Install with "
            "pip install pdfminer.six"
        )
    ) from exc


def count_pdf_pages(pdf_path: Path | str) -> Tuple[int | None, str | None]:
    """Return ``(pages, None)`` for a readable PDF or ``(None, error)``."""

    source = Path(pdf_path)
    if not source.exists():
        return None, f"PDF not found: {source}"

    try:
        with source.open("rb") as pdf_file:
            pages = sum(1 for _ in PDFPage.get_pages(pdf_file))
    except (PSException, OSError) as exc:
        return None, str(exc)

    if pages == 0:
        return None, "PDF contains no pages"
    return pages, None


__all__ = ["count_pdf_pages"]
