"""Text and value normalization shared by the extractor stages."""

import html
import logging
import re
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup

from recipe_import.utils.exceptions import UnparsableNumeric

logger = logging.getLogger(__name__)

_ZERO_WIDTH = ("\u200b", "\u200c", "\u200d", "\ufeff")
_INT_RE = re.compile(r"\d+")
_ISO_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?(?:(?P<minutes>\d+(?:\.\d+)?)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$",
    re.IGNORECASE,
)
_HOURS_RE = re.compile(r"(\d+)\s*h(?:ou)?r?s?")
_MINUTES_RE = re.compile(r"(\d+)\s*m(?:in)?(?:ute)?s?")

# Decorative or tracking images, matched as substrings of the lowercased URL
IMAGE_URL_BLACKLIST = (
    "placeholder",
    "spacer",
    "pixel",
    "tracking",
    "icon",
    "logo",
    "avatar",
    "badge",
    "gravatar",
    "blank.gif",
    "1x1",
)


def clean_text(value: Optional[str]) -> str:
    """Unescape entities, strip inline markup and collapse whitespace."""
    if not value:
        return ""
    text = html.unescape(str(value))
    if "<" in text and ">" in text:
        text = BeautifulSoup(text, "html.parser").get_text(" ")
    for z in _ZERO_WIDTH:
        text = text.replace(z, "")
    text = text.replace("\u00a0", " ")
    return re.sub(r"\s+", " ", text).strip()


def clean_lines(lines: Iterable[str]) -> List[str]:
    """Clean every line and drop the ones that end up empty."""
    cleaned = []
    for line in lines:
        text = clean_text(line)
        if text:
            cleaned.append(text)
    return cleaned


def dedupe(values: Iterable[str]) -> List[str]:
    """Remove exact duplicates, keeping first occurrence order."""
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def first_int(text: object) -> int:
    """
    Return the first integer found in ``text``.

    Raises:
        UnparsableNumeric: If the value has no digits
    """
    if isinstance(text, bool):
        raise UnparsableNumeric(f"Not a number: {text!r}")
    if isinstance(text, (int, float)):
        return int(text)
    match = _INT_RE.search(str(text or ""))
    if not match:
        raise UnparsableNumeric(f"No number in {text!r}")
    return int(match.group())


def parse_servings(value: object, default: Optional[int] = None) -> Optional[int]:
    """
    Servings from a yield value such as ``"4 servings"``, ``6`` or ``["4", "4 servings"]``.

    Unreadable values fall back to ``default``.
    """
    if isinstance(value, list):
        for item in value:
            servings = parse_servings(item)
            if servings is not None:
                return servings
        return default
    try:
        servings = first_int(value)
    except UnparsableNumeric:
        logger.debug(f"Unparsable servings value: {value!r}")
        return default
    return servings if servings > 0 else default


def parse_iso_duration(value: Optional[str]) -> Optional[int]:
    """Parse an ISO 8601 duration (``PT1H30M``) to minutes; ``None`` when absent or zero."""
    if not value or not isinstance(value, str):
        return None
    match = _ISO_DURATION_RE.match(value.strip())
    if not match:
        # Some sites put human text ("30 minutes") where a duration belongs
        return parse_time_string(value)
    days = float(match.group("days") or 0)
    hours = float(match.group("hours") or 0)
    minutes = float(match.group("minutes") or 0)
    seconds = float(match.group("seconds") or 0)
    total = int(days * 1440 + hours * 60 + minutes + seconds // 60)
    return total or None


def parse_time_string(value: Optional[str]) -> Optional[int]:
    """Parse ``"1 hour 15 min"`` / ``"45m"`` style text to minutes; ``None`` when no time is found."""
    if not value:
        return None
    lower = value.lower()
    hours_match = _HOURS_RE.search(lower)
    minutes_match = _MINUTES_RE.search(lower)
    hours = int(hours_match.group(1)) if hours_match else 0
    minutes = int(minutes_match.group(1)) if minutes_match else 0
    total = hours * 60 + minutes
    return total if total > 0 else None


def is_blacklisted_image(url: str) -> bool:
    """True for placeholder, tracking and other decorative image URLs."""
    lower = url.lower()
    if lower.startswith("data:"):
        return True
    return any(token in lower for token in IMAGE_URL_BLACKLIST)


def filter_image_urls(urls: Iterable[str], limit: Optional[int] = None) -> List[str]:
    """Drop blank and blacklisted image URLs, dedupe, and cap the list."""
    kept: List[str] = []
    for url in urls:
        if not isinstance(url, str) or not url.strip():
            continue
        url = url.strip()
        if is_blacklisted_image(url) or url in kept:
            continue
        kept.append(url)
        if limit is not None and len(kept) >= limit:
            break
    return kept


CATEGORY_LINK_SELECTOR = "a[rel~=category], a[rel~=tag]"


def category_links(soup: BeautifulSoup) -> List[str]:
    """Text of ``rel=category`` / ``rel=tag`` links (WordPress and similar CMSs)."""
    links = (a.get_text(" ", strip=True) for a in soup.select(CATEGORY_LINK_SELECTOR))
    return [text for text in links if text]
