"""Section-based parsing of unstructured recipe text (PDF extraction, OCR)."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Pattern, Tuple

from recipe_import.config import settings
from recipe_import.models.recipe import CanonicalRecipe, ParsedFragment, RecipeSource, Section, SectionName
from recipe_import.services.content_classifier import (
    has_strong_ingredient_marker,
    has_strong_instruction_marker,
    is_ingredient_like,
    is_instruction_like,
    is_noise,
)
from recipe_import.utils.exceptions import ExtractionFailed
from recipe_import.utils.recipe_normalization import parse_servings, parse_time_string

logger = logging.getLogger(__name__)

# Checked in order; the first unclaimed category that matches takes the line
HEADER_PATTERNS: Tuple[Tuple[SectionName, Pattern[str]], ...] = (
    (SectionName.ingredients, re.compile(r"\bingredients?\b")),
    (SectionName.instructions, re.compile(r"\b(?:instructions?|directions?|steps?|method)\b")),
    (SectionName.servings, re.compile(r"\b(?:servings?|yield|serves)\b")),
    (SectionName.prep_time, re.compile(r"\bprep\s*time\b")),
    (SectionName.cook_time, re.compile(r"\bcook\s*time\b")),
    (SectionName.total_time, re.compile(r"\btotal\s*time\b")),
    (SectionName.tags, re.compile(r"\b(?:tags?|categories|cuisine)\b")),
)

# "Save the ingredients to your list" is a call to action, not a header
_CTA_VERB_RE = re.compile(r"\b(?:save|shop|get|view|see|more|click)\b")
_INGREDIENT_WORD_RE = re.compile(r"\bingredients?\b")

_BULLET_RE = re.compile(r"^[•\-*–·]\s*")
_LIST_NUMBER_RE = re.compile(r"^\d+[.)]\s*")
_STEP_PREFIX_RE = re.compile(r"^step\s*\d+\s*[:.)-]?\s*", re.IGNORECASE)
_STEP_NUMBER_RE = re.compile(r"^\d+[.)]\s*|^\d+\s+(?=[A-Z])")
_TAGS_HEADER_RE = re.compile(r"^(?:tags?|categories|category|cuisine)\s*:?\s*", re.IGNORECASE)


# =========================================================
# Utils
# =========================================================
def split_lines(text: str) -> List[str]:
    """Trimmed, non-blank lines of ``text``."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def clean_ingredient_line(line: str) -> str:
    """Strip a leading bullet and list numbering ("1." / "2)"), keeping quantities."""
    line = _BULLET_RE.sub("", line.strip())
    line = _LIST_NUMBER_RE.sub("", line)
    return line.strip()


def clean_instruction_line(line: str) -> str:
    """Strip "Step N:" prefixes, bullets and leading step numbers."""
    line = _STEP_PREFIX_RE.sub("", line.strip())
    line = _BULLET_RE.sub("", line)
    line = _STEP_NUMBER_RE.sub("", line)
    return line.strip()


def detect_sections(lines: List[str]) -> Dict[SectionName, Section]:
    """
    Locate section headers in a single scan.

    The first header of each category wins and each line claims at most one
    category.
    """
    sections: Dict[SectionName, Section] = {}
    for index, line in enumerate(lines):
        normalized = re.sub(r"\s+", " ", line.lower()).strip()
        is_cta = bool(_CTA_VERB_RE.search(normalized) and _INGREDIENT_WORD_RE.search(normalized))
        for name, pattern in HEADER_PATTERNS:
            if name in sections:
                continue
            if name is SectionName.ingredients and is_cta:
                continue
            if pattern.search(normalized):
                sections[name] = Section(name=name, start_line=index)
                break
    return sections


def section_body(sections: Dict[SectionName, Section], name: SectionName, lines: List[str]) -> List[str]:
    """Lines strictly between a header and the next header of any category."""
    section = sections.get(name)
    if section is None:
        return []
    following = [s.start_line for s in sections.values() if s.start_line > section.start_line]
    end = min(following) if following else len(lines)
    return lines[section.start_line + 1 : end]


def header_line(sections: Dict[SectionName, Section], name: SectionName, lines: List[str]) -> Optional[str]:
    section = sections.get(name)
    return lines[section.start_line] if section is not None else None


def extract_title(sections: Dict[SectionName, Section], lines: List[str]) -> str:
    ingredients = sections.get(SectionName.ingredients)
    if ingredients is not None and ingredients.start_line > 0:
        for line in lines[: ingredients.start_line]:
            if len(line) > 3:
                return line
    return lines[0]


def extract_tags(line: Optional[str]) -> List[str]:
    if not line:
        return []
    cleaned = _TAGS_HEADER_RE.sub("", line)
    return [tag.strip() for tag in cleaned.split(",") if tag.strip()]


def recover_misplaced_ingredients(candidates: List[str]) -> Tuple[List[str], List[str]]:
    """
    Split lines found under the instructions header into ingredients and steps.

    PDF text extraction can interleave columns so that ingredient lines land
    after the instructions header. Lines with only strong step markers stay,
    lines with only strong ingredient markers move, lines with both stay, and
    the rest fall back to the base classifier with steps as the default.

    Returns:
        ``(ingredients, instructions)``, both cleaned
    """
    ingredients: List[str] = []
    instructions: List[str] = []
    for line in candidates:
        # markers anchor at the line start, so test the text without numbering
        item = clean_ingredient_line(line)
        step = clean_instruction_line(line)
        ingredient_marker = has_strong_ingredient_marker(item)
        instruction_marker = has_strong_instruction_marker(step)
        if instruction_marker:
            verdict = "instruction"
        elif ingredient_marker:
            verdict = "ingredient"
        elif is_ingredient_like(item) and not is_instruction_like(step):
            verdict = "ingredient"
        else:
            verdict = "instruction"

        if verdict == "ingredient":
            ingredients.append(item)
        else:
            instructions.append(step)
        logger.debug(
            f"Recovery classified line as {verdict}: {line[:60]}",
            extra={"ingredient_marker": ingredient_marker, "instruction_marker": instruction_marker},
        )
    return [i for i in ingredients if i], [s for s in instructions if s]


# =========================================================
# Parser
# =========================================================
class TextSectionParser:
    """Turns plain recipe text into a fragment or a canonical recipe."""

    def __init__(self, default_servings: Optional[int] = None):
        self.default_servings = default_servings or settings.default_servings

    def parse_fragment(self, text: str) -> ParsedFragment:
        """
        Parse ``text`` into a fragment without enforcing the content invariant.

        Raises:
            ExtractionFailed: If the text has no non-blank lines
        """
        lines = split_lines(text)
        if not lines:
            raise ExtractionFailed("no text found")

        sections = detect_sections(lines)
        logger.debug(
            f"Detected sections: {', '.join(s.value for s in sections)}",
            extra={"line_count": len(lines)},
        )

        ingredient_body = section_body(sections, SectionName.ingredients, lines)
        ingredients = [
            clean_ingredient_line(line)
            for line in ingredient_body
            if not is_noise(line) and is_ingredient_like(line)
        ]

        instruction_body = section_body(sections, SectionName.instructions, lines)
        candidates = [
            line
            for line in instruction_body
            if not is_noise(line) and (is_ingredient_like(line) or is_instruction_like(line))
        ]
        instructions = [clean_instruction_line(line) for line in candidates if is_instruction_like(line)]

        ingredients = [line for line in ingredients if line]
        instructions = [line for line in instructions if line]

        if not ingredients and instructions:
            ingredients, instructions = recover_misplaced_ingredients(candidates)
            if ingredients:
                logger.info(
                    f"Recovered {len(ingredients)} misplaced ingredients from instructions",
                    extra={"recovered": len(ingredients), "instructions": len(instructions)},
                )

        return ParsedFragment(
            title=extract_title(sections, lines),
            ingredients=ingredients,
            instructions=instructions,
            servings=parse_servings(header_line(sections, SectionName.servings, lines), default=self.default_servings),
            prepTimeMinutes=parse_time_string(header_line(sections, SectionName.prep_time, lines)),
            cookTimeMinutes=parse_time_string(header_line(sections, SectionName.cook_time, lines)),
            totalTimeMinutes=parse_time_string(header_line(sections, SectionName.total_time, lines)),
            tags=extract_tags(header_line(sections, SectionName.tags, lines)),
        )

    def parse_text(
        self,
        text: str,
        source: RecipeSource = RecipeSource.text,
        source_id: Optional[str] = None,
    ) -> CanonicalRecipe:
        """
        Parse PDF or OCR text into a canonical recipe.

        Tags are returned as found; the importer standardizes them.

        Raises:
            ExtractionFailed: If there is no text, or neither ingredients nor
                instructions could be found
        """
        fragment = self.parse_fragment(text)
        logger.info(
            f"Parsed text recipe '{fragment.title}'",
            extra={
                "source": source.value,
                "ingredients": len(fragment.ingredients),
                "instructions": len(fragment.instructions),
            },
        )
        if not fragment.has_content():
            raise ExtractionFailed("could not extract a recipe from this source")

        return CanonicalRecipe(
            title=fragment.title,
            ingredients=fragment.ingredients,
            instructions=fragment.instructions,
            servings=fragment.servings or self.default_servings,
            prepTimeMinutes=fragment.prepTimeMinutes,
            cookTimeMinutes=fragment.cookTimeMinutes,
            totalTimeMinutes=fragment.totalTimeMinutes,
            tags=fragment.tags,
            sourceUrl=source_id,
            source=source,
        )
