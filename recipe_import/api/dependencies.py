"""Shared API dependencies."""

from recipe_import.services.recipe_importer import RecipeImporter


def get_recipe_importer() -> RecipeImporter:
    """Get recipe importer service instance."""
    return RecipeImporter()
