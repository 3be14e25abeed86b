"""Locate relative resource references an HTML file expects on disk."""

from __future__ import annotations

from pathlib import Path
from typing import List
from urllib.parse import unquote, urlparse

try:
    from bs4 import BeautifulSoup  # type: ignore[import-not-found]
except ImportError as exc:  # pragma: no cover - surfaces missing dependency
    raise SystemExit(
        "Missing dependency 'beautifulsoup4'. Install with pip install"
        " beautifulsoup4 lxml"
    ) from exc

# (tag, attribute) pairs that make Chromium fetch a file while loading.
RESOURCE_ATTRIBUTES = (
    ("img", "src"),
    ("script", "src"),
    ("source", "src"),
    ("video", "poster"),
    ("link", "href"),
)

# <link rel> values that load a file; canonical, alternate and friends do not.
FETCHING_LINK_RELS = frozenset(
    {"stylesheet", "icon", "preload", "modulepreload"}
)


def _loads_resource(tag) -> bool:
    if tag.name != "link":
        return True
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return any(value.lower() in FETCHING_LINK_RELS for value in rel)


def iter_local_references(html_text: str) -> List[str]:
    """Return relative references from resource-loading tags in order."""

    soup = BeautifulSoup(html_text, "lxml")
    references: List[str] = []
    for tag_name, attribute in RESOURCE_ATTRIBUTES:
        for tag in soup.find_all(tag_name):
            if not _loads_resource(tag):
                continue
            value = tag.get(attribute)
            if not isinstance(value, str):
                continue
            value = value.strip()
            if not value or value.startswith(("#", "//")):
                continue
            if urlparse(value).scheme:
                continue
            references.append(value)
    return references


def find_missing_resources(html_text: str, base_dir: Path) -> List[str]:
    """Return references in ``html_text`` that do not exist under ``base_dir``.

    Absolute URLs, protocol-relative URLs, ``data:`` URIs, and fragment
    links are ignored; only paths Chromium would resolve against the file's
    own directory are checked.
    """

    missing: List[str] = []
    seen: set[str] = set()
    for reference in iter_local_references(html_text):
        if reference in seen:
            continue
        seen.add(reference)
        local_part = unquote(urlparse(reference).path)
        if not local_part:
            continue
        candidate = (
            Path(local_part)
            if local_part.startswith("/")
            else base_dir / local_part
        )
        if not candidate.exists():
            missing.append(reference)
    return missing


__all__ = ["find_missing_resources", "iter_local_references"]
