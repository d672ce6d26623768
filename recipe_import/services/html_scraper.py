"""CSS-selector heuristics for pages without usable structured data."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from recipe_import.config import settings
from recipe_import.models.recipe import DocumentKind, ParsedFragment, RawDocument
from recipe_import.utils.exceptions import NoScrapedContent, UnparsableNumeric
from recipe_import.utils.recipe_normalization import (
    category_links,
    clean_text,
    filter_image_urls,
    first_int,
    is_blacklisted_image,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectorRule:
    """A CSS selector and the number of matches it needs to be trusted."""

    selector: str
    min_items: int = 1


# Most specific first; the first rule with enough usable matches wins
INGREDIENT_SELECTORS: Tuple[SelectorRule, ...] = (
    SelectorRule("[itemprop=recipeIngredient]"),
    SelectorRule("[itemprop=ingredients]"),
    SelectorRule("li[class*=ingredient]"),
    SelectorRule("ul[class*=ingredient] li"),
    SelectorRule("ol[class*=ingredient] li"),
    SelectorRule("[class*=ingredient] li"),
    SelectorRule("[id*=ingredient] li"),
    SelectorRule("[class*=ing] li"),
)

INSTRUCTION_SELECTORS: Tuple[SelectorRule, ...] = (
    SelectorRule("[itemprop=recipeInstructions] li"),
    SelectorRule("li[itemprop=recipeInstructions]"),
    SelectorRule("[itemprop=recipeInstructions] p"),
    SelectorRule("ol[class*=instruction] li"),
    SelectorRule("ol[class*=direction] li"),
    SelectorRule("[class*=instruction] li"),
    SelectorRule("[id*=instruction] li"),
    SelectorRule("[class*=direction] li"),
    SelectorRule("[id*=direction] li"),
    SelectorRule("[class*=method] li"),
    SelectorRule("[id*=method] li"),
    SelectorRule("[class*=step] li"),
    SelectorRule("li[class*=step]"),
    # Unrelated ordered lists are common, so a bare one needs a few items
    SelectorRule("ol li", min_items=3),
    SelectorRule("[class*=instruction] p"),
    SelectorRule("[class*=direction] p"),
    SelectorRule("[class*=method] p"),
    SelectorRule("[class*=step] p"),
)

SCOPED_IMAGE_SELECTORS: Tuple[SelectorRule, ...] = (
    SelectorRule("img[itemprop=image]"),
    SelectorRule("[class*=recipe] img"),
    SelectorRule("[id*=recipe] img"),
    SelectorRule("[class*=hero] img"),
    SelectorRule("figure img"),
    SelectorRule("article img"),
)

IMAGE_SOURCE_ATTRIBUTES = ("data-src", "data-lazy-src", "src")

MIN_INGREDIENT_LENGTH = 3
MIN_INSTRUCTION_LENGTH = 10


def element_text(element: Tag) -> str:
    return clean_text(element.get_text(" ", strip=True))


def select_first_match(
    soup: BeautifulSoup,
    rules: Tuple[SelectorRule, ...],
    keep: Callable[[str], bool],
) -> Tuple[List[str], Optional[str]]:
    """
    Texts from the first rule whose usable matches meet its ``min_items``.

    Returns:
        ``(texts, selector)``; ``([], None)`` when no rule qualifies
    """
    for rule in rules:
        texts = [text for text in (element_text(el) for el in soup.select(rule.selector)) if keep(text)]
        if not texts:
            continue
        if len(texts) < rule.min_items:
            logger.debug(
                f"Discarding {len(texts)} matches for '{rule.selector}' (needs {rule.min_items})",
                extra={"stage": HtmlFallbackScraper.name},
            )
            continue
        return texts, rule.selector
    return [], None


def image_url(img: Tag) -> Optional[str]:
    """The first usable source of an ``<img>``: lazy-load attributes, ``src``, then ``srcset``."""
    for attribute in IMAGE_SOURCE_ATTRIBUTES:
        value = (img.get(attribute) or "").strip()
        if value and not is_blacklisted_image(value):
            return value
    srcset = (img.get("srcset") or img.get("data-srcset") or "").strip()
    if srcset:
        candidate = srcset.split(",")[0].strip().split(" ")[0]
        if candidate and not is_blacklisted_image(candidate):
            return candidate
    return None


def _dimension(img: Tag, attribute: str) -> int:
    try:
        return first_int(img.get(attribute))
    except UnparsableNumeric:
        return 0


def is_large_image(img: Tag, min_dimension: int) -> bool:
    """Declared width and height are both at least ``min_dimension``."""
    return _dimension(img, "width") >= min_dimension and _dimension(img, "height") >= min_dimension


class HtmlFallbackScraper:
    """Scrapes ingredients, instructions and images with ordered selector lists."""

    name = "html_fallback"

    def __init__(self, max_image_urls: Optional[int] = None, min_image_dimension: Optional[int] = None):
        self.max_image_urls = max_image_urls or settings.max_image_urls
        self.min_image_dimension = min_image_dimension or settings.min_image_dimension

    def should_run(self, accumulator: ParsedFragment) -> bool:
        return not accumulator.ingredients or not accumulator.instructions

    def attempt(self, document: RawDocument) -> Optional[ParsedFragment]:
        if document.kind is not DocumentKind.html:
            return None
        try:
            return self.extract(document.body, document.source_id)
        except NoScrapedContent as e:
            logger.debug(f"HTML scraping found nothing: {e}", extra={"stage": self.name, "source_id": document.source_id})
            return None

    def extract(self, html: str, source_url: Optional[str] = None) -> ParsedFragment:
        """
        Scrape a partial recipe from page markup.

        Raises:
            NoScrapedContent: If neither ingredients nor instructions were found
        """
        soup = BeautifulSoup(html or "", "html.parser")

        ingredients, ingredient_selector = select_first_match(
            soup, INGREDIENT_SELECTORS, lambda text: len(text) > MIN_INGREDIENT_LENGTH
        )
        instructions, instruction_selector = select_first_match(
            soup, INSTRUCTION_SELECTORS, lambda text: len(text) > MIN_INSTRUCTION_LENGTH
        )
        logger.info(
            f"HTML scraping found {len(ingredients)} ingredients, {len(instructions)} instructions",
            extra={
                "stage": self.name,
                "ingredient_selector": ingredient_selector,
                "instruction_selector": instruction_selector,
            },
        )
        if not ingredients and not instructions:
            raise NoScrapedContent("no ingredient or instruction selectors matched")

        h1 = soup.find("h1")
        title = element_text(h1) if h1 else ""

        return ParsedFragment(
            title=title or None,
            ingredients=ingredients,
            instructions=instructions,
            tags=category_links(soup),
            imageUrls=self.find_images(soup, source_url),
        )

    def find_images(self, soup: BeautifulSoup, source_url: Optional[str] = None) -> List[str]:
        """
        Candidate recipe images.

        Container-scoped selectors are tried in order; only when none of them
        yields a usable image are all ``<img>`` tags considered, and then only
        those with a large enough declared size.
        """
        for rule in SCOPED_IMAGE_SELECTORS:
            urls = self._image_urls(soup.select(rule.selector), source_url)
            if urls:
                return urls

        large = [img for img in soup.find_all("img") if is_large_image(img, self.min_image_dimension)]
        return self._image_urls(large, source_url)

    def _image_urls(self, images: List[Tag], source_url: Optional[str]) -> List[str]:
        urls = []
        for img in images:
            url = image_url(img)
            if url:
                urls.append(urljoin(source_url, url) if source_url else url)
        return filter_image_urls(urls, limit=self.max_image_urls)
