"""
Tag standardization.

Every tag goes through the same ordered steps: lowercase and trim, drop
characters outside ``[a-z0-9 -]``, map synonyms, strip noise words, map
synonyms again, then drop junk. The result list is deduplicated keeping the
first occurrence. Running ``standardize`` on its own output changes nothing.
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Iterable, List, Optional

from recipe_import.models.recipe import CanonicalRecipe, TagModification

logger = logging.getLogger(__name__)

MAX_TAG_WORDS = 4
MIN_TAG_LENGTH = 2

# Values are never keys and never contain noise words
SYNONYMS = MappingProxyType(
    {
        # Cuisines
        "italian food": "italian",
        "italian cuisine": "italian",
        "mexican food": "mexican",
        "mexican cuisine": "mexican",
        "chinese food": "chinese",
        "chinese cuisine": "chinese",
        "japanese food": "japanese",
        "japanese cuisine": "japanese",
        "thai food": "thai",
        "thai cuisine": "thai",
        "indian food": "indian",
        "indian cuisine": "indian",
        "mediterranean food": "mediterranean",
        "mediterranean cuisine": "mediterranean",
        # Meal types
        "breakfast recipe": "breakfast",
        "breakfast meal": "breakfast",
        "lunch recipe": "lunch",
        "lunch meal": "lunch",
        "dinner recipe": "dinner",
        "dinner meal": "dinner",
        "supper": "dinner",
        "dessert recipe": "dessert",
        "desserts": "dessert",
        "snack recipe": "snack",
        "snacks": "snack",
        # Cooking methods
        "oven baked": "baked",
        "oven-baked": "baked",
        "pan fried": "fried",
        "pan-fried": "fried",
        "deep fried": "fried",
        "deep-fried": "fried",
        "slow cooker": "slow-cook",
        "crockpot": "slow-cook",
        "crock pot": "slow-cook",
        "crock-pot": "slow-cook",
        "pressure cooker": "instant pot",
        "instapot": "instant pot",
        "stovetop": "stove-top",
        "stove top": "stove-top",
        # Speed and difficulty
        "quick recipe": "quick",
        "fast recipe": "quick",
        "easy recipe": "easy",
        "simple recipe": "easy",
        "30 minute": "quick",
        "30-minute": "quick",
        "30 min": "quick",
        "30 minutes": "quick",
        "weeknight": "quick",
        # Dietary
        "vegetarian recipe": "vegetarian",
        "vegan recipe": "vegan",
        "gluten free": "gluten-free",
        "dairy free": "dairy-free",
        "low carb": "low-carb",
        "keto diet": "keto",
        "paleo diet": "paleo",
        # Proteins
        "chicken recipe": "chicken",
        "beef recipe": "beef",
        "pork recipe": "pork",
        "fish recipe": "fish",
        "seafood recipe": "seafood",
        "shrimp recipe": "shrimp",
        "salmon recipe": "salmon",
        # Common foods
        "pasta recipe": "pasta",
        "rice recipe": "rice",
        "potato recipe": "potato",
        "salad recipe": "salad",
        "soup recipe": "soup",
        "soups": "soup",
        "sandwich recipe": "sandwich",
        "pizza recipe": "pizza",
        # Occasions
        "christmas": "special occasion",
        "thanksgiving": "special occasion",
        "easter": "special occasion",
        "holiday": "special occasion",
        "holidays": "special occasion",
        "new years eve": "special occasion",
    }
)

NOISE_WORDS = frozenset(
    {
        "recipe",
        "recipes",
        "food",
        "meal",
        "dish",
        "cuisine",
        "cooking",
        "cook",
        "homemade",
        "delicious",
        "tasty",
        "yummy",
        "perfect",
        "best",
        "traditional",
        "authentic",
        "classic",
        "modern",
        "new",
    }
)

JUNK_TAGS = frozenset(
    {
        "recipe",
        "recipes",
        "food",
        "meal",
        "dish",
        "uncategorized",
        "general",
        "misc",
        "other",
        "default",
        "featured",
        "popular",
        "trending",
        "video",
        "print",
        "blog",
        "post",
    }
)

JUNK_PHRASES = (
    "how to",
    "jump to",
    "print recipe",
    "click here",
    "sponsored",
    "affiliate",
    "newsletter",
    "subscribe",
)

_INVALID_CHARS_RE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RE = re.compile(r"\s+")


def _remove_noise_words(tag: str) -> str:
    words = [word for word in tag.split(" ") if word not in NOISE_WORDS]
    return " ".join(words) if words else tag


def is_junk(tag: str) -> bool:
    if len(tag) < MIN_TAG_LENGTH or tag.isdigit() or not any(c.isalnum() for c in tag):
        return True
    if tag in JUNK_TAGS or len(tag.split(" ")) > MAX_TAG_WORDS:
        return True
    return any(phrase in tag for phrase in JUNK_PHRASES)


def standardize_tag(tag: str) -> Optional[str]:
    """Standardized form of one tag, or ``None`` when the tag is dropped."""
    value = (tag or "").strip().lower()
    value = _INVALID_CHARS_RE.sub("", value)
    value = _WHITESPACE_RE.sub(" ", value).strip()
    if not value:
        return None
    value = SYNONYMS.get(value, value)
    value = _remove_noise_words(value)
    value = SYNONYMS.get(value, value)
    if is_junk(value):
        return None
    return value


def standardize(tags: Iterable[str]) -> List[str]:
    """Standardize, drop junk, and deduplicate keeping first occurrence."""
    result: List[str] = []
    for tag in tags:
        value = standardize_tag(tag)
        if value and value not in result:
            result.append(value)
    return result


def standardize_with_tracking(tags: Iterable[str]) -> List[TagModification]:
    """
    One ``TagModification`` per input tag, for review before saving.

    Dropped tags are reported with an empty ``standardized`` value.
    """
    modifications = []
    for tag in tags:
        value = standardize_tag(tag) or ""
        original = tag or ""
        modifications.append(
            TagModification(
                original=original,
                standardized=value,
                wasModified=value != original.strip().lower(),
            )
        )
    changed = sum(1 for m in modifications if m.wasModified)
    if changed:
        logger.debug(f"Standardization changed {changed} of {len(modifications)} tags")
    return modifications


def apply_reviewed_tags(recipe: CanonicalRecipe, tags: Iterable[str]) -> CanonicalRecipe:
    """
    Substitute the user-approved tag list into ``recipe``.

    Tags are trimmed, blanks removed, and duplicates collapsed ignoring case;
    the user's wording is otherwise kept.
    """
    approved: List[str] = []
    seen = set()
    for tag in tags:
        value = (tag or "").strip()
        if value and value.lower() not in seen:
            seen.add(value.lower())
            approved.append(value)
    return recipe.model_copy(update={"tags": approved})
