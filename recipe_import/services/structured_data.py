"""
Schema.org ``Recipe`` extraction from JSON-LD script blocks.

This is the most authoritative stage of the HTML cascade: whatever it yields is
never overwritten by later stages.
"""

from __future__ import annotations

import json
import logging
import re
from types import MappingProxyType
from typing import Any, Iterator, List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from recipe_import.config import settings
from recipe_import.models.recipe import DocumentKind, ParsedFragment, RawDocument
from recipe_import.utils.exceptions import NoStructuredData
from recipe_import.utils.recipe_normalization import (
    category_links,
    clean_lines,
    clean_text,
    dedupe,
    filter_image_urls,
    parse_iso_duration,
    parse_servings,
)

logger = logging.getLogger(__name__)

RECIPE_TYPES = frozenset({"Recipe"})
# Recipe posts that CMS plugins mis-tag as articles
ARTICLE_TYPES = frozenset({"Article", "BlogPosting", "NewsArticle"})

_SCHEMA_PREFIX_RE = re.compile(r"^https?://schema\.org/", re.IGNORECASE)
_HTML_COMMENT_RE = re.compile(r"<!--|-->|/\*\s*<!\[CDATA\[\s*\*/|/\*\s*\]\]>\s*\*/|<!\[CDATA\[|\]\]>")
_DECODER = json.JSONDecoder(strict=False)
# Line breaks inside instruction markup
_BLOCK_TAGS = ["p", "li", "div", "br", "h1", "h2", "h3", "h4", "h5", "h6"]

CUISINES: Tuple[str, ...] = (
    # Americas
    "american", "southern", "cajun", "creole", "tex-mex", "soul food", "new england",
    "hawaiian", "californian", "southwestern", "midwestern", "canadian", "quebecois",
    "mexican", "central american", "guatemalan", "salvadoran", "honduran", "nicaraguan",
    "costa rican", "panamanian", "caribbean", "cuban", "puerto rican", "dominican",
    "jamaican", "haitian", "trinidadian", "south american", "brazilian", "argentinian",
    "argentine", "peruvian", "chilean", "colombian", "venezuelan", "ecuadorian", "bolivian",
    "uruguayan", "paraguayan",
    # Europe
    "british", "english", "scottish", "irish", "welsh", "french", "provencal", "italian",
    "sicilian", "tuscan", "neapolitan", "spanish", "catalan", "basque", "portuguese", "greek",
    "cypriot", "german", "austrian", "swiss", "belgian", "dutch", "scandinavian", "nordic",
    "swedish", "norwegian", "danish", "finnish", "icelandic", "polish", "czech", "slovak",
    "hungarian", "romanian", "bulgarian", "serbian", "croatian", "bosnian", "slovenian",
    "albanian", "ukrainian", "russian", "georgian", "armenian", "azerbaijani", "baltic",
    "lithuanian", "latvian", "estonian", "mediterranean",
    # Middle East and Africa
    "middle eastern", "lebanese", "syrian", "turkish", "persian", "iranian", "iraqi",
    "israeli", "jewish", "palestinian", "jordanian", "arab", "emirati", "saudi", "yemeni",
    "egyptian", "moroccan", "tunisian", "algerian", "libyan", "north african", "african",
    "west african", "east african", "south african", "ethiopian", "eritrean", "nigerian",
    "ghanaian", "senegalese", "kenyan", "somali",
    # Asia and Oceania
    "indian", "north indian", "south indian", "punjabi", "bengali", "gujarati", "kerala",
    "goan", "pakistani", "afghan", "nepalese", "sri lankan", "bangladeshi", "tibetan",
    "uzbek", "kazakh", "mongolian", "asian", "chinese", "cantonese", "sichuan", "szechuan",
    "hunan", "shanghainese", "taiwanese", "hong kong", "japanese", "okinawan", "korean",
    "thai", "vietnamese", "cambodian", "laotian", "burmese", "malaysian", "singaporean",
    "indonesian", "filipino", "pan-asian", "fusion", "australian", "new zealand", "polynesian",
)
KNOWN_CUISINES = frozenset(CUISINES)
_CUISINE_PATTERNS = MappingProxyType(
    {cuisine: re.compile(rf"(?<![a-z]){re.escape(cuisine)}(?![a-z])") for cuisine in CUISINES}
)


# =========================================================
# JSON-LD decoding
# =========================================================
def _strip_trailing_commas(json_text: str) -> str:
    # {"a": 1,} -> {"a": 1} and [1,2,] -> [1,2]
    return re.sub(r",(\s*[}\]])", r"\1", json_text)


def _decode_values(text: str) -> Tuple[List[Any], bool]:
    """Decode every JSON value in ``text``; the flag is False when decoding stopped early."""
    values: List[Any] = []
    index = 0
    length = len(text)
    while True:
        while index < length and text[index] in " \t\r\n;,":
            index += 1
        if index >= length:
            return values, True
        try:
            value, index = _DECODER.raw_decode(text, index)
        except json.JSONDecodeError:
            return values, False
        values.append(value)


def decode_json_ld(raw: Optional[str]) -> List[Any]:
    """
    Tolerant decoding of one ``application/ld+json`` block.

    Handles a BOM, HTML comment / CDATA wrappers, raw control characters
    inside strings, trailing commas and several concatenated values.
    Returns an empty list when nothing can be decoded.
    """
    text = (raw or "").strip().lstrip("\ufeff")
    text = _HTML_COMMENT_RE.sub("", text).strip()
    if not text:
        return []

    values, complete = _decode_values(text)
    if not complete:
        repaired, repaired_complete = _decode_values(_strip_trailing_commas(text))
        if repaired_complete or len(repaired) > len(values):
            values = repaired
    return values


def iter_nodes(value: Any) -> Iterator[dict]:
    """Depth-first walk over every JSON object, including ``@graph`` members."""
    if isinstance(value, dict):
        yield value
        for child in value.values():
            yield from iter_nodes(child)
    elif isinstance(value, list):
        for item in value:
            yield from iter_nodes(item)


def node_types(node: dict) -> List[str]:
    raw = node.get("@type")
    types = raw if isinstance(raw, list) else [raw]
    return [_SCHEMA_PREFIX_RE.sub("", t) for t in types if isinstance(t, str)]


def is_recipe_node(node: dict) -> bool:
    return any(t in RECIPE_TYPES for t in node_types(node))


def is_recipe_article(node: dict) -> bool:
    if not any(t in ARTICLE_TYPES for t in node_types(node)):
        return False
    return bool(node.get("recipeIngredient") or node.get("recipeInstructions"))


# =========================================================
# Field resolution
# =========================================================
def _text_of(value: Any) -> Optional[str]:
    """Scalar text of a string or a ``{text|name|@value}`` object."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, dict):
        for key in ("text", "name", "@value"):
            if isinstance(value.get(key), str):
                return value[key]
    return None


def _split_markup(value: str) -> List[str]:
    """Split a string that may hold HTML blocks or several lines into lines."""
    if "<" in value and ">" in value:
        soup = BeautifulSoup(value, "html.parser")
        for tag in soup.find_all(_BLOCK_TAGS):
            tag.insert_after("\n")
        value = soup.get_text()
    return clean_lines(value.splitlines())


def flatten_ingredients(value: Any) -> List[str]:
    if isinstance(value, list):
        return [line for item in value for line in flatten_ingredients(item)]
    if isinstance(value, dict):
        if "itemListElement" in value:
            return flatten_ingredients(value["itemListElement"])
        value = _text_of(value)
    if isinstance(value, str):
        return _split_markup(value)
    return []


def flatten_instructions(value: Any) -> List[str]:
    """
    Resolve ``recipeInstructions`` to a flat list of steps.

    Sections contribute a ``"Name:"`` header line followed by their steps.
    """
    if isinstance(value, list):
        return [step for item in value for step in flatten_instructions(item)]
    if isinstance(value, str):
        return _split_markup(value)
    if not isinstance(value, dict):
        return []

    steps: List[str] = []
    if "HowToSection" in node_types(value):
        name = clean_text(value.get("name"))
        if name:
            steps.append(f"{name}:")
        return steps + flatten_instructions(value.get("itemListElement"))

    text = value.get("text") or value.get("name") or value.get("@value")
    if isinstance(text, str):
        return _split_markup(text)
    if "itemListElement" in value:
        return flatten_instructions(value["itemListElement"])
    return steps


def flatten_strings(value: Any) -> List[str]:
    """Category, cuisine and keyword values; plain strings are comma-split."""
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, list):
        result = []
        for item in value:
            if isinstance(item, list):
                joined = ", ".join(flatten_strings(item))
                if joined:
                    result.append(joined)
            else:
                text = _text_of(item)
                if text and text.strip():
                    result.append(text.strip())
        return result
    text = _text_of(value)
    return [text.strip()] if text and text.strip() else []


def collect_images(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [url for item in value for url in collect_images(item)]
    if isinstance(value, dict):
        url = value.get("url") or value.get("contentUrl")
        return [url] if isinstance(url, str) else []
    return []


def infer_cuisine(title: Optional[str]) -> Optional[str]:
    """
    Guess a cuisine from the title.

    The longest vocabulary entry found as a word wins; ties go to the entry
    listed first.
    """
    if not title:
        return None
    lower = title.lower()
    best: Optional[str] = None
    for cuisine in CUISINES:
        if _CUISINE_PATTERNS[cuisine].search(lower):
            if best is None or len(cuisine) > len(best):
                best = cuisine
    return best


def known_cuisine(values: List[str]) -> Optional[str]:
    """First declared cuisine that is in the vocabulary."""
    for value in values:
        if value.strip().lower() in KNOWN_CUISINES:
            return value.strip()
    return None


# =========================================================
# Extractor
# =========================================================
class StructuredDataExtractor:
    """Reads Schema.org ``Recipe`` nodes out of JSON-LD."""

    name = "structured_data"

    def __init__(self, max_image_urls: Optional[int] = None):
        self.max_image_urls = max_image_urls or settings.max_image_urls

    def should_run(self, accumulator: ParsedFragment) -> bool:
        return True

    def attempt(self, document: RawDocument) -> Optional[ParsedFragment]:
        """Fragment from the document's JSON-LD, or ``None`` when it has none."""
        if document.kind is not DocumentKind.html:
            return None
        try:
            return self.extract(document.body, document.source_id)
        except NoStructuredData as e:
            logger.debug(f"No structured data: {e}", extra={"stage": self.name, "source_id": document.source_id})
            return None

    def extract(self, html: str, source_url: Optional[str] = None) -> ParsedFragment:
        """
        Extract a recipe fragment from JSON-LD script blocks.

        Args:
            html: Page markup
            source_url: Page URL, used to resolve relative image URLs

        Returns:
            Fragment built from the first recipe node

        Raises:
            NoStructuredData: If the page has no usable recipe node
        """
        soup = BeautifulSoup(html or "", "html.parser")
        scripts = soup.find_all("script", attrs={"type": re.compile(r"application/ld\+json", re.I)})
        if not scripts:
            raise NoStructuredData("no JSON-LD blocks")

        payloads: List[Any] = []
        for script in scripts:
            decoded = decode_json_ld(script.string or script.get_text())
            if not decoded:
                logger.debug("Skipping undecodable JSON-LD block", extra={"stage": self.name})
            payloads.extend(decoded)

        nodes = list(iter_nodes(payloads))
        node = next((n for n in nodes if is_recipe_node(n)), None)
        if node is None:
            node = next((n for n in nodes if is_recipe_article(n)), None)
            if node is not None:
                logger.info("Using recipe fields from an article node", extra={"stage": self.name})
        if node is None:
            raise NoStructuredData(f"no Recipe node in {len(payloads)} JSON-LD values")

        fragment = self._fragment_from_node(node, soup, source_url)
        logger.info(
            f"Structured data recipe found: {fragment.title}",
            extra={
                "stage": self.name,
                "ingredients": len(fragment.ingredients),
                "instructions": len(fragment.instructions),
            },
        )
        return fragment

    def _fragment_from_node(self, node: dict, soup: BeautifulSoup, source_url: Optional[str]) -> ParsedFragment:
        title = clean_text(_text_of(node.get("name")) or _text_of(node.get("headline"))) or None
        description = clean_text(_text_of(node.get("description"))) or None

        images = collect_images(node.get("image"))
        if source_url:
            images = [urljoin(source_url, url) for url in images]

        categories = flatten_strings(node.get("recipeCategory"))
        declared_cuisines = flatten_strings(node.get("recipeCuisine"))
        keywords = flatten_strings(node.get("keywords"))
        tags = categories + declared_cuisines + keywords + category_links(soup)

        cuisine = known_cuisine(declared_cuisines)
        if cuisine is None:
            inferred = infer_cuisine(title)
            if inferred:
                logger.debug(f"Inferred cuisine '{inferred}' from title", extra={"stage": self.name})
                tags.append(inferred)
                cuisine = inferred
            elif declared_cuisines:
                cuisine = declared_cuisines[0]

        return ParsedFragment(
            title=title,
            description=description,
            ingredients=flatten_ingredients(node.get("recipeIngredient") or node.get("ingredients")),
            instructions=flatten_instructions(node.get("recipeInstructions")),
            tags=dedupe(tags),
            imageUrls=filter_image_urls(images, limit=self.max_image_urls),
            servings=parse_servings(node.get("recipeYield")),
            prepTimeMinutes=parse_iso_duration(node.get("prepTime")),
            cookTimeMinutes=parse_iso_duration(node.get("cookTime")),
            totalTimeMinutes=parse_iso_duration(node.get("totalTime")),
            cuisine=cuisine,
        )
