"""Tests for the relative resource pre-flight scan."""

from html_resources import find_missing_resources, iter_local_references
from pdf_inspect import count_pdf_pages


class TestIterLocalReferences:
    def test_collects_relative_references(self):
        html = (
            '<link rel="stylesheet" href="css/site.css">'
            '<script src="app.js"></script>'
            '<img src="img/logo.png">'
        )
        assert set(iter_local_references(html)) == {
            "css/site.css",
            "app.js",
            "img/logo.png",
        }

    def test_ignores_remote_and_inline_references(self):
        html = (
            '<img src="https://example.com/a.png">'
            '<img src="//cdn.example.com/b.png">'
            '<img src="data:image/png;base64,AAAA">'
            '<link href="#top">'
            "<img>"
        )
        assert iter_local_references(html) == []

    def test_only_fetching_link_rels_checked(self):
        html = (
            '<link rel="canonical" href="index.html">'
            '<link rel="alternate" hreflang="mr" href="mr/index.html">'
            '<link rel="next" href="page2.html">'
            '<link rel="shortcut icon" href="favicon.ico">'
            '<link rel="preload" href="fonts/body.woff2" as="font">'
            '<link rel="Stylesheet" href="print.css">'
        )
        assert iter_local_references(html) == [
            "favicon.ico",
            "fonts/body.woff2",
            "print.css",
        ]

    def test_link_without_rel_ignored(self):
        assert iter_local_references('<link href="notes.txt">') == []


class TestFindMissingResources:
    def test_reports_only_missing_files(self, tmp_path):
        (tmp_path / "img").mkdir()
        (tmp_path / "img" / "logo.png").write_bytes(b"png")
        html = '<img src="img/logo.png"><img src="img/missing.png">'

        assert find_missing_resources(html, tmp_path) == ["img/missing.png"]

    def test_strips_query_and_decodes_path(self, tmp_path):
        (tmp_path / "my logo.png").write_bytes(b"png")
        html = '<img src="my%20logo.png?v=2">'

        assert find_missing_resources(html, tmp_path) == []

    def test_duplicates_reported_once(self, tmp_path):
        html = '<img src="gone.png"><img src="gone.png">'
        assert find_missing_resources(html, tmp_path) == ["gone.png"]


class TestCountPdfPages:
    def test_missing_pdf(self, tmp_path):
        pages, error = count_pdf_pages(tmp_path / "absent.pdf")
        assert pages is None
        assert "PDF not found" in error
