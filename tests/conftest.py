"""Shared test fixtures for the HTML-to-PDF batch converter."""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, create_autospec

import pytest
from playwright.sync_api import Page

import html_to_pdf

FAKE_PDF_BYTES = b"%PDF-1.4\n% fake document\n%%EOF\n"


@pytest.fixture(autouse=True)
def _isolate_config_env(monkeypatch):
    monkeypatch.delenv("HTML2PDF_CONFIG", raising=False)


@pytest.fixture
def fake_browser(monkeypatch):
    """Replace Playwright with mocks; ``page.pdf`` writes a stub PDF.

    The page is autospecced from the real ``Page`` so keyword arguments
    Playwright would reject raise ``TypeError`` here too.
    """

    def _write_pdf(*, path, **kwargs):
        Path(path).write_bytes(FAKE_PDF_BYTES)

    page = create_autospec(Page, instance=True)
    page.pdf.side_effect = _write_pdf

    browser = MagicMock(name="browser")
    browser.new_page.return_value = page

    playwright = MagicMock(name="playwright")
    playwright.chromium.launch.return_value = browser

    factory = MagicMock(name="sync_playwright")
    factory.return_value.__enter__.return_value = playwright
    factory.return_value.__exit__.return_value = False

    monkeypatch.setattr(html_to_pdf, "sync_playwright", factory)
    return SimpleNamespace(
        factory=factory,
        playwright=playwright,
        browser=browser,
        page=page,
    )


@pytest.fixture
def html_file(tmp_path):
    source_dir = tmp_path / "templates"
    source_dir.mkdir()
    path = source_dir / "leaflet.html"
    path.write_text(
        "<html><body><h1>Leaflet</h1></body></html>", encoding="utf-8"
    )
    return path
