"""Cascading HTML extraction: structured data, then selector scraping, then Open Graph."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Sequence

from recipe_import.config import settings
from recipe_import.models.recipe import CanonicalRecipe, ParsedFragment, RawDocument, RecipeSource
from recipe_import.services.html_scraper import HtmlFallbackScraper
from recipe_import.services.metadata import MetadataSupplementer
from recipe_import.services.structured_data import StructuredDataExtractor
from recipe_import.utils.exceptions import ExtractionFailed

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Imported Recipe"


class Extractor(Protocol):
    """One stage of the cascade."""

    name: str

    def should_run(self, accumulator: ParsedFragment) -> bool:
        ...

    def attempt(self, document: RawDocument) -> Optional[ParsedFragment]:
        ...


def is_empty(value: Any) -> bool:
    """None, a blank string and an empty list all count as missing."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def merge_fragments(accumulator: ParsedFragment, fragment: ParsedFragment) -> ParsedFragment:
    """
    First-writer-wins merge.

    ``fragment`` only supplies fields that are still empty in ``accumulator``;
    populated fields are never overwritten.
    """
    updates = {}
    for field in ParsedFragment.model_fields:
        current = getattr(accumulator, field)
        incoming = getattr(fragment, field)
        if is_empty(current) and not is_empty(incoming):
            updates[field] = incoming
    return accumulator.model_copy(update=updates)


def default_extractors() -> Sequence[Extractor]:
    return (StructuredDataExtractor(), HtmlFallbackScraper(), MetadataSupplementer())


class SourceOrchestrator:
    """Runs extractors in priority order and merges what they find."""

    def __init__(
        self,
        extractors: Optional[Sequence[Extractor]] = None,
        max_document_chars: Optional[int] = None,
        default_servings: Optional[int] = None,
    ):
        self.extractors = tuple(extractors) if extractors is not None else tuple(default_extractors())
        self.max_document_chars = max_document_chars or settings.max_document_chars
        self.default_servings = default_servings or settings.default_servings

    def run(self, document: RawDocument) -> ParsedFragment:
        """Merged fragment from every stage that ran; no content check."""
        document = self._truncate(document)
        accumulator = ParsedFragment()
        for extractor in self.extractors:
            if not extractor.should_run(accumulator):
                logger.debug(f"Skipping stage {extractor.name}", extra={"stage": extractor.name})
                continue
            fragment = extractor.attempt(document)
            if fragment is None:
                continue
            accumulator = merge_fragments(accumulator, fragment)
            logger.debug(
                f"Merged stage {extractor.name}",
                extra={
                    "stage": extractor.name,
                    "ingredients": len(accumulator.ingredients),
                    "instructions": len(accumulator.instructions),
                },
            )
        return accumulator

    def extract(self, document: RawDocument, source_url: Optional[str] = None) -> CanonicalRecipe:
        """
        Extract a canonical recipe from a fetched page.

        Args:
            document: Raw page
            source_url: Page URL; defaults to the document's source id

        Returns:
            Canonical recipe with default title and servings applied

        Raises:
            ExtractionFailed: If no stage found ingredients or instructions
        """
        source_url = source_url or document.source_id
        merged = self.run(document)
        if not merged.has_content():
            logger.warning("No stage produced ingredients or instructions", extra={"source_id": source_url})
            raise ExtractionFailed("could not extract a recipe from this source")

        return CanonicalRecipe(
            title=merged.title or DEFAULT_TITLE,
            description=merged.description,
            ingredients=merged.ingredients,
            instructions=merged.instructions,
            servings=merged.servings or self.default_servings,
            prepTimeMinutes=merged.prepTimeMinutes,
            cookTimeMinutes=merged.cookTimeMinutes,
            totalTimeMinutes=merged.totalTimeMinutes,
            tags=merged.tags,
            imageUrls=merged.imageUrls,
            sourceUrl=source_url,
            source=RecipeSource.url if source_url else RecipeSource.html,
        )

    def _truncate(self, document: RawDocument) -> RawDocument:
        if len(document.body) <= self.max_document_chars:
            return document
        logger.warning(
            f"Truncating document from {len(document.body)} to {self.max_document_chars} characters",
            extra={"source_id": document.source_id},
        )
        return document.model_copy(update={"body": document.body[: self.max_document_chars]})
