"""Tag review endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from recipe_import.api.dependencies import get_recipe_importer
from recipe_import.middleware.rate_limit import rate_limit_dependency
from recipe_import.models.recipe import TagModification
from recipe_import.services.recipe_importer import RecipeImporter

router = APIRouter(prefix="/tags", tags=["tags"])


class TagsRequest(BaseModel):
    tags: List[str] = Field(default_factory=list)


@router.post("/standardize", response_model=List[TagModification])
def standardize_tags(
    body: TagsRequest,
    _: None = Depends(rate_limit_dependency),
    importer: RecipeImporter = Depends(get_recipe_importer),
) -> List[TagModification]:
    """
    Show how each tag would be standardized.

    Dropped tags come back with an empty ``standardized`` value.
    """
    return importer.review_tags(body.tags)
