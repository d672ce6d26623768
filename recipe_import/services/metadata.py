"""Open Graph metadata as the last-resort supplement for title, description and images."""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from recipe_import.config import settings
from recipe_import.models.recipe import DocumentKind, ParsedFragment, RawDocument
from recipe_import.utils.recipe_normalization import clean_text, filter_image_urls

logger = logging.getLogger(__name__)


def og_values(soup: BeautifulSoup, key: str) -> List[str]:
    """``content`` of every ``<meta property|name="og:key">`` tag, in document order."""
    values = []
    for meta in soup.find_all("meta"):
        if meta.get("property") == key or meta.get("name") == key:
            content = (meta.get("content") or "").strip()
            if content:
                values.append(content)
    return values


class MetadataSupplementer:
    """Fills still-empty title, description and image fields from Open Graph tags."""

    name = "open_graph"

    def __init__(self, max_image_urls: Optional[int] = None):
        self.max_image_urls = max_image_urls or settings.max_image_urls

    def should_run(self, accumulator: ParsedFragment) -> bool:
        return not accumulator.title or not accumulator.description or not accumulator.imageUrls

    def attempt(self, document: RawDocument) -> Optional[ParsedFragment]:
        if document.kind is not DocumentKind.html:
            return None

        soup = BeautifulSoup(document.body or "", "html.parser")
        titles = og_values(soup, "og:title")
        descriptions = og_values(soup, "og:description")
        images = og_values(soup, "og:image")
        if document.source_id:
            images = [urljoin(document.source_id, url) for url in images]

        fragment = ParsedFragment(
            title=clean_text(titles[0]) if titles else None,
            description=clean_text(descriptions[0]) if descriptions else None,
            imageUrls=filter_image_urls(images, limit=self.max_image_urls),
        )
        if not (fragment.title or fragment.description or fragment.imageUrls):
            return None

        logger.debug(
            "Open Graph metadata found",
            extra={"stage": self.name, "has_title": bool(fragment.title), "images": len(fragment.imageUrls)},
        )
        return fragment
