"""Import facade used by the API routes."""

from __future__ import annotations

import logging
from typing import List, Optional

from starlette.concurrency import run_in_threadpool

from recipe_import.models.recipe import (
    CanonicalRecipe,
    DocumentKind,
    ImportResult,
    RawDocument,
    RecipeSource,
    TagModification,
)
from recipe_import.services import tag_normalizer
from recipe_import.services.fetcher_service import HtmlFetcher
from recipe_import.services.orchestrator import SourceOrchestrator
from recipe_import.services.text_parser import TextSectionParser
from recipe_import.utils.validators import normalize_url, validate_tags_list, validate_text_input, validate_url

logger = logging.getLogger(__name__)


class RecipeImporter:
    """Runs the right pipeline for a source and prepares tag changes for review."""

    def __init__(
        self,
        orchestrator: Optional[SourceOrchestrator] = None,
        text_parser: Optional[TextSectionParser] = None,
        fetcher: Optional[HtmlFetcher] = None,
    ):
        self.orchestrator = orchestrator or SourceOrchestrator()
        self.text_parser = text_parser or TextSectionParser()
        self.fetcher = fetcher or HtmlFetcher()

    def import_document(
        self,
        document: RawDocument,
        source_url: Optional[str] = None,
        source: RecipeSource = RecipeSource.text,
    ) -> ImportResult:
        """
        Import an already fetched document.

        ``source`` labels plain-text documents (pdf, photo or text); HTML
        documents are always labelled ``url``.

        Raises:
            ExtractionFailed: If no recipe content could be found
        """
        if document.kind is DocumentKind.plain_text:
            recipe = self.text_parser.parse_text(document.body, source, document.source_id)
        else:
            recipe = self.orchestrator.extract(document, source_url)
        return self._with_standardized_tags(recipe)

    def import_html(self, html: str, url: Optional[str] = None) -> ImportResult:
        """Import page markup the client already downloaded."""
        source_url = validate_url(normalize_url(url)) if url else None
        document = RawDocument(kind=DocumentKind.html, body=html, source_id=source_url)
        return self.import_document(document, source_url)

    async def import_url(self, url: str) -> ImportResult:
        """
        Fetch and import a recipe page.

        Raises:
            ValidationError: If the URL is malformed or points at a private host
            FetchError: If the page cannot be downloaded
            ExtractionFailed: If no recipe content could be found
        """
        normalized = validate_url(normalize_url(url))
        if normalized != url.strip():
            logger.info(f"Normalized URL {url!r} to {normalized!r}")
        document = await self.fetcher.fetch(normalized)
        return await run_in_threadpool(self.import_document, document, document.source_id or normalized)

    def import_text(
        self,
        text: str,
        source: RecipeSource = RecipeSource.text,
        source_id: Optional[str] = None,
    ) -> ImportResult:
        """Import text produced by PDF extraction or OCR."""
        document = RawDocument(kind=DocumentKind.plain_text, body=validate_text_input(text), source_id=source_id)
        return self.import_document(document, source=source)

    def import_pages(
        self,
        pages: List[str],
        source: RecipeSource = RecipeSource.photo,
        source_id: Optional[str] = None,
    ) -> ImportResult:
        """Import one recipe from the OCR text of several photos, in order."""
        text = "\n\n".join(page.strip() for page in pages if page and page.strip())
        logger.info(f"Joined {len(pages)} pages into {len(text)} characters")
        return self.import_text(text, source, source_id)

    def review_tags(self, tags: List[str]) -> List[TagModification]:
        return tag_normalizer.standardize_with_tracking(validate_tags_list(tags))

    def apply_tags(self, recipe: CanonicalRecipe, tags: List[str]) -> CanonicalRecipe:
        return tag_normalizer.apply_reviewed_tags(recipe, validate_tags_list(tags))

    def _with_standardized_tags(self, recipe: CanonicalRecipe) -> ImportResult:
        modifications = tag_normalizer.standardize_with_tracking(recipe.tags) if recipe.tags else []
        standardized = recipe.model_copy(update={"tags": tag_normalizer.standardize(recipe.tags)})
        logger.info(
            f"Imported recipe '{standardized.title}'",
            extra={
                "source": standardized.source.value,
                "ingredients": len(standardized.ingredients),
                "instructions": len(standardized.instructions),
                "tags": len(standardized.tags),
            },
        )
        return ImportResult(recipe=standardized, tagModifications=modifications)
