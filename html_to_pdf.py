"""Render local HTML files to PDF with headless Chromium via Playwright."""

from __future__ import annotations

import re
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional

try:
    from playwright.sync_api import (  # type: ignore[import-not-found]
        Error as PlaywrightError,
        sync_playwright,
    )
except ImportError as exc:  # pragma: no cover - handled at runtime
    raise SystemExit(
        "Missing dependency 'playwright'. Install with pip install"
        " playwright && playwright install chromium"
    ) from exc

from html_resources import find_missing_resources

DEFAULT_OUTPUT_FILENAME = "output.pdf"
DEFAULT_PAGE_FORMAT = "A4"
LOAD_STATE = "networkidle"

# page.pdf arguments the converter sets itself.
RESERVED_PDF_OPTIONS = frozenset({"path"})

_ACRONYM_BOUNDARY_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY_RE = re.compile(r"([a-z0-9])([A-Z])")


class HtmlNotFoundError(FileNotFoundError):
    """Raised when the source HTML file does not exist."""


class RenderEngineError(RuntimeError):
    """Raised when Chromium fails to launch, load, or export a page."""


def snake_case_option(name: str) -> str:
    """Map ``preferCSSPageSize`` style names onto Playwright's Python names."""

    name = _ACRONYM_BOUNDARY_RE.sub(r"\1_\2", name)
    return _WORD_BOUNDARY_RE.sub(r"\1_\2", name).lower()


@dataclass(slots=True)
class RenderOptions:
    """Layout options forwarded to ``page.pdf``.

    ``extra`` carries any option this class does not name; it is passed to
    Playwright without validation, so a name ``page.pdf`` does not accept
    surfaces as :class:`RenderEngineError` at export time.
    """

    format: str = DEFAULT_PAGE_FORMAT
    print_background: bool = True
    landscape: bool = False
    margin: Optional[Dict[str, str]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls, overrides: Optional[Mapping[str, Any]] = None
    ) -> "RenderOptions":
        """Layer ``overrides`` over the defaults, one key at a time.

        camelCase keys are accepted and stored under their snake_case
        spelling. ``path`` is ignored; the output location is chosen by the
        converter.
        """

        known = {item.name for item in fields(cls) if item.name != "extra"}
        values: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in (overrides or {}).items():
            name = snake_case_option(key)
            if name in RESERVED_PDF_OPTIONS:
                print(f"⚠️ Ignoring render option '{key}'")
            elif name in known:
                values[name] = value
            else:
                extra[name] = value

        margin = values.get("margin")
        if margin is not None:
            values["margin"] = dict(margin)

        return cls(**values, extra=extra)

    def to_pdf_kwargs(self) -> Dict[str, Any]:
        """Return keyword arguments for Playwright's ``page.pdf``."""

        kwargs: Dict[str, Any] = {
            "format": self.format,
            "print_background": self.print_background,
            "landscape": self.landscape,
        }
        if self.margin:
            kwargs["margin"] = dict(self.margin)
        kwargs.update(
            (key, value)
            for key, value in self.extra.items()
            if key not in RESERVED_PDF_OPTIONS
        )
        return kwargs


@contextmanager
def open_render_page(*, headless: bool = True) -> Iterator[Any]:
    """Yield a fresh Chromium page and close its browser on every exit path.

    Playwright errors raised while launching the browser or while the
    caller drives the page are re-raised as :class:`RenderEngineError`.
    """

    try:
        with sync_playwright() as playwright_context:  # type: ignore[misc]
            browser: Any = playwright_context.chromium.launch(
                headless=headless
            )
            try:
                yield browser.new_page()
            finally:
                _close_browser(browser)
    except PlaywrightError as exc:
        raise RenderEngineError(str(exc)) from exc


def _close_browser(browser: Any) -> None:
    try:
        browser.close()
    except PlaywrightError as exc:
        print(f"⚠️ Unable to close browser cleanly: {exc}", file=sys.stderr)


def _export_pdf(page: Any, path: Path, options: RenderOptions) -> None:
    try:
        page.pdf(path=str(path), **options.to_pdf_kwargs())
    except TypeError as exc:
        raise RenderEngineError(f"Unsupported PDF option: {exc}") from exc


def convert_html_file_to_pdf(
    source_path: Path | str,
    output_directory: Path | str,
    output_filename: str = DEFAULT_OUTPUT_FILENAME,
    options: RenderOptions | Mapping[str, Any] | None = None,
) -> Path:
    """Render ``source_path`` into ``output_directory/output_filename``.

    The file is decoded as UTF-8 and that text is what Chromium lays out;
    the page is first committed at the file's ``file://`` URI so relative
    images and stylesheets resolve against its folder. The PDF is written
    to a hidden ``.part`` file next to the target and moved into place once
    Chromium has finished, so the target path only ever holds a complete
    document. Returns the absolute output path.
    """

    html_path = Path(source_path)
    if not html_path.is_file():
        raise HtmlNotFoundError(f"HTML file not found: {html_path}")
    html_path = html_path.resolve()

    if not isinstance(options, RenderOptions):
        options = RenderOptions.from_mapping(options)

    html_text = html_path.read_text(encoding="utf-8")

    out_dir = Path(output_directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    output_path = (out_dir / output_filename).resolve()
    partial_path = output_path.with_name(f".{output_path.name}.part")

    for reference in find_missing_resources(html_text, html_path.parent):
        print(f"⚠️ {html_path.name} references missing resource: {reference}")

    try:
        with open_render_page() as page:
            page.goto(html_path.as_uri(), wait_until="commit")
            page.set_content(html_text, wait_until=LOAD_STATE)
            _export_pdf(page, partial_path, options)
        partial_path.replace(output_path)
    finally:
        partial_path.unlink(missing_ok=True)

    print(f"✅ PDF created: {output_path}")
    return output_path


__all__ = [
    "DEFAULT_OUTPUT_FILENAME",
    "HtmlNotFoundError",
    "RenderEngineError",
    "RenderOptions",
    "convert_html_file_to_pdf",
    "open_render_page",
    "snake_case_option",
]
