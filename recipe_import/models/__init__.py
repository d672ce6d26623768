"""Pydantic models."""

from recipe_import.models.recipe import (
    CanonicalRecipe,
    DocumentKind,
    ImportResult,
    ParsedFragment,
    RawDocument,
    RecipeSource,
    Section,
    SectionName,
    TagModification,
)

__all__ = [
    "CanonicalRecipe",
    "DocumentKind",
    "ImportResult",
    "ParsedFragment",
    "RawDocument",
    "RecipeSource",
    "Section",
    "SectionName",
    "TagModification",
]
