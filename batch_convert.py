"""Convert every HTML file in a folder into a PDF in an output folder."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from config_loader import ConfigError, resolve_batch_settings
from html_to_pdf import (
    HtmlNotFoundError,
    RenderEngineError,
    RenderOptions,
    convert_html_file_to_pdf,
)
from pdf_inspect import count_pdf_pages

HTML_SUFFIX = ".html"
PDF_SUFFIX = ".pdf"

Converter = Callable[[Path, Path, str, RenderOptions], Path]

# Failures isolated per file; anything else is a bug and propagates.
CONVERSION_ERRORS = (
    HtmlNotFoundError,
    RenderEngineError,
    OSError,
    UnicodeDecodeError,
)


def _empty_result_list() -> list["FileConversionResult"]:
    return []


@dataclass(slots=True)
class FileConversionResult:
    """Outcome of converting a single HTML file."""

    source: Path
    output: Path
    success: bool
    error: Optional[str] = None
    pages: Optional[int] = None
    skipped: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": str(self.source),
            "output": str(self.output),
            "success": self.success,
            "error": self.error,
            "pages": self.pages,
            "skipped": self.skipped,
        }


@dataclass(slots=True)
class BatchReport:
    """Per-file results for one batch run."""

    input_dir: Path
    output_dir: Path
    results: list[FileConversionResult] = field(
        default_factory=_empty_result_list
    )
    not_attempted: list[Path] = field(default_factory=list)
    aborted: bool = False

    @property
    def succeeded(self) -> list[FileConversionResult]:
        return [r for r in self.results if r.success and not r.skipped]

    @property
    def failed(self) -> list[FileConversionResult]:
        return [r for r in self.results if not r.success]

    @property
    def skipped(self) -> list[FileConversionResult]:
        return [r for r in self.results if r.skipped]

    @property
    def ok(self) -> bool:
        """Return True when nothing failed and the batch ran to the end."""

        return not self.failed and not self.aborted

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input_dir": str(self.input_dir),
            "output_dir": str(self.output_dir),
            "generated_at": _now_iso(),
            "aborted": self.aborted,
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "skipped": len(self.skipped),
            "results": [result.to_dict() for result in self.results],
            "not_attempted": [str(path) for path in self.not_attempted],
        }


def find_html_files(input_dir: Path) -> List[Path]:
    """Return files directly under ``input_dir`` whose name ends in .html.

    Matching is case-sensitive, so ``page.HTML`` is not picked up.
    """

    if not input_dir.is_dir():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")

    return sorted(
        path
        for path in input_dir.iterdir()
        if path.is_file() and path.name.endswith(HTML_SUFFIX)
    )


def derive_pdf_name(html_name: str) -> str:
    """Swap the trailing ``.html`` of ``html_name`` for ``.pdf``."""

    if html_name.endswith(HTML_SUFFIX):
        html_name = html_name[: -len(HTML_SUFFIX)]
    return f"{html_name}{PDF_SUFFIX}"


def run_batch(
    input_dir: Path | str,
    output_dir: Path | str,
    *,
    options: RenderOptions | None = None,
    fail_fast: bool = False,
    skip_existing: bool = False,
    converter: Converter = convert_html_file_to_pdf,
) -> BatchReport:
    """Convert each HTML file in ``input_dir`` one after another.

    A failing file is recorded and the loop moves on, unless ``fail_fast``
    is set, in which case the remaining files are left untouched and listed
    in ``BatchReport.not_attempted``.
    """

    input_path = Path(input_dir)
    output_path = Path(output_dir)
    render_options = options or RenderOptions()
    report = BatchReport(input_dir=input_path, output_dir=output_path)

    html_files = find_html_files(input_path)
    output_path.mkdir(parents=True, exist_ok=True)

    if not html_files:
        print(f"No HTML files found in {input_path}.")
        return report

    for index, html_file in enumerate(html_files):
        pdf_name = derive_pdf_name(html_file.name)
        target = output_path / pdf_name

        if skip_existing and target.exists():
            print(f"Skipping {html_file.name}; {pdf_name} already present")
            report.results.append(
                FileConversionResult(
                    source=html_file,
                    output=target,
                    success=True,
                    skipped=True,
                )
            )
            continue

        try:
            written = converter(
                html_file, output_path, pdf_name, render_options
            )
        except CONVERSION_ERRORS as exc:
            print(
                f"⚠️ Failed to convert {html_file.name}: {exc}",
                file=sys.stderr,
            )
            report.results.append(
                FileConversionResult(
                    source=html_file,
                    output=target,
                    success=False,
                    error=str(exc),
                )
            )
            if fail_fast:
                report.aborted = True
                report.not_attempted.extend(html_files[index + 1:])
                print(
                    "Aborting batch after first failure;"
                    f" {len(report.not_attempted)} file(s) not attempted.",
                    file=sys.stderr,
                )
                break
            continue

        pages, _ = count_pdf_pages(written)
        page_note = f" ({pages} pages)" if pages is not None else ""
        print(f"✅ Converted: {html_file.name} -> {pdf_name}{page_note}")
        report.results.append(
            FileConversionResult(
                source=html_file,
                output=Path(written),
                success=True,
                pages=pages,
            )
        )

    print(
        f"Batch finished: {len(report.succeeded)} converted,"
        f" {len(report.failed)} failed, {len(report.skipped)} skipped,"
        f" {len(report.not_attempted)} not attempted."
    )
    return report


def write_report(report: BatchReport, path: Path | str) -> Path:
    """Persist ``report`` as pretty-printed JSON and return its path."""

    report_path = Path(path)
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(
        json.dumps(report.to_dict(), indent=2),
        encoding="utf-8",
    )
    return report_path


def _now_iso() -> str:
    """Return the current UTC timestamp formatted for report files."""

    return (
        datetime.now(timezone.utc)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z")
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI switches controlling the batch conversion."""

    parser = argparse.ArgumentParser(
        description=(
            "Convert every .html file in a folder into a PDF rendered by"
            " headless Chromium."
        )
    )
    parser.add_argument("--config", help="Path to config JSON file.")
    parser.add_argument(
        "--input-dir", help="Folder containing the HTML files to convert."
    )
    parser.add_argument(
        "--output-dir", help="Folder that receives the generated PDFs."
    )
    parser.add_argument(
        "--format", help="Page format such as A4 or Letter (default A4)."
    )
    parser.add_argument(
        "--landscape",
        action="store_true",
        default=None,
        help="Render pages in landscape orientation.",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        default=None,
        help="Stop the batch at the first file that fails to convert.",
    )
    parser.add_argument(
        "--skip-existing",
        action="store_true",
        default=None,
        help="Leave PDFs that already exist in the output folder alone.",
    )
    parser.add_argument(
        "--report", help="Write a JSON summary of the batch to this path."
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """Entrypoint for the batch HTML-to-PDF conversion CLI."""

    args = parse_args(argv)

    cli_options: Dict[str, Any] = {}
    if args.format:
        cli_options["format"] = args.format
    if args.landscape:
        cli_options["landscape"] = True

    try:
        settings = resolve_batch_settings(
            config_path=args.config,
            input_dir=args.input_dir,
            output_dir=args.output_dir,
            render_options=cli_options,
            fail_fast=args.fail_fast,
            skip_existing=args.skip_existing,
            report_path=args.report,
        )
    except ConfigError as exc:
        raise SystemExit(f"Config error: {exc}") from exc

    try:
        report = run_batch(
            settings["input_dir"],
            settings["output_dir"],
            options=RenderOptions.from_mapping(settings["render_options"]),
            fail_fast=settings["fail_fast"],
            skip_existing=settings["skip_existing"],
        )
    except OSError as exc:
        print(f"⚠️ Error converting HTML to PDF: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if settings["report_path"]:
        report_path = write_report(report, settings["report_path"])
        print(f"✅ Batch report written: {report_path}")

    if not report.ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
