"""Recipe import endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from recipe_import.api.dependencies import get_recipe_importer
from recipe_import.middleware.rate_limit import rate_limit_dependency
from recipe_import.models.recipe import CanonicalRecipe, ImportResult, RecipeSource
from recipe_import.services.recipe_importer import RecipeImporter
from recipe_import.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recipes", tags=["recipes"])

TEXT_SOURCES = (RecipeSource.pdf, RecipeSource.photo, RecipeSource.text)


class HtmlImportRequest(BaseModel):
    """Page markup the client already downloaded."""

    html: str
    url: Optional[str] = None


class URLRequest(BaseModel):
    """Request model for URL import."""

    url: str


class TextImportRequest(BaseModel):
    """Text produced by PDF extraction or OCR; ``texts`` holds one entry per photo."""

    text: str = ""
    texts: List[str] = Field(default_factory=list)
    source: RecipeSource = RecipeSource.text
    sourceId: Optional[str] = None


class ApplyTagsRequest(BaseModel):
    """Recipe plus the tag list the user approved."""

    recipe: CanonicalRecipe
    tags: List[str] = Field(default_factory=list)


@router.post("/from-html", response_model=ImportResult)
def import_from_html(
    body: HtmlImportRequest,
    _: None = Depends(rate_limit_dependency),
    importer: RecipeImporter = Depends(get_recipe_importer),
) -> ImportResult:
    """
    Import a recipe from page markup.

    - **html**: Full page HTML
    - **url**: Page URL, used to resolve relative image links
    """
    logger.info(
        "Route /recipes/from-html called",
        extra={
            "route": "/recipes/from-html",
            "params": {"url": (body.url or "")[:200], "html_chars": len(body.html)},
        },
    )
    return importer.import_html(body.html, body.url)


@router.post("/from-url", response_model=ImportResult)
async def import_from_url(
    body: URLRequest,
    _: None = Depends(rate_limit_dependency),
    importer: RecipeImporter = Depends(get_recipe_importer),
) -> ImportResult:
    """
    Fetch a public recipe page and import it.

    Plain ``http://`` URLs and URLs without a scheme are upgraded to https.
    """
    logger.info(
        "Route /recipes/from-url called",
        extra={"route": "/recipes/from-url", "params": {"url": body.url[:200]}},
    )
    return await importer.import_url(body.url)


@router.post("/from-text", response_model=ImportResult)
def import_from_text(
    body: TextImportRequest,
    _: None = Depends(rate_limit_dependency),
    importer: RecipeImporter = Depends(get_recipe_importer),
) -> ImportResult:
    """
    Import a recipe from extracted PDF or OCR text.

    - **text**: Extracted text of a single document
    - **texts**: OCR text of several photos of one recipe, in page order
    - **source**: ``pdf``, ``photo`` or ``text``
    - **sourceId**: File name or other identifier of the original document
    """
    if body.source not in TEXT_SOURCES:
        raise ValidationError(f"Text imports must use one of: {', '.join(s.value for s in TEXT_SOURCES)}")

    logger.info(
        "Route /recipes/from-text called",
        extra={
            "route": "/recipes/from-text",
            "params": {"source": body.source.value, "text_chars": len(body.text), "pages": len(body.texts)},
        },
    )
    if body.texts:
        return importer.import_pages(body.texts, body.source, body.sourceId)
    return importer.import_text(body.text, body.source, body.sourceId)


@router.post("/apply-tags", response_model=CanonicalRecipe)
def apply_tags(
    body: ApplyTagsRequest,
    _: None = Depends(rate_limit_dependency),
    importer: RecipeImporter = Depends(get_recipe_importer),
) -> CanonicalRecipe:
    """Replace the recipe's tags with the reviewed list before it is saved."""
    return importer.apply_tags(body.recipe, body.tags)
