"""Recipe Pydantic models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DocumentKind(str, Enum):
    """Shape of a raw source document."""

    html = "html"
    plain_text = "plain_text"


class RecipeSource(str, Enum):
    """Where an imported recipe came from."""

    url = "url"
    html = "html"
    pdf = "pdf"
    photo = "photo"
    text = "text"


class RawDocument(BaseModel):
    """Immutable input handed to the pipeline by a fetch or extraction service."""

    model_config = ConfigDict(frozen=True)

    kind: DocumentKind
    body: str
    source_id: Optional[str] = Field(None, description="Source URL, file path or other identifier")


class ParsedFragment(BaseModel):
    """Partial recipe data produced by one extractor stage."""

    title: Optional[str] = None
    description: Optional[str] = None
    ingredients: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    imageUrls: List[str] = Field(default_factory=list)
    servings: Optional[int] = None
    prepTimeMinutes: Optional[int] = None
    cookTimeMinutes: Optional[int] = None
    totalTimeMinutes: Optional[int] = None
    cuisine: Optional[str] = None

    def has_content(self) -> bool:
        """True when the fragment carries ingredients or instructions."""
        return bool(self.ingredients or self.instructions)


class CanonicalRecipe(BaseModel):
    """Final merged recipe handed to persistence."""

    title: str = Field(..., description="Recipe title")
    description: Optional[str] = Field(None, description="Short description from the source")
    ingredients: List[str] = Field(default_factory=list, description="Ingredient lines (raw text)")
    instructions: List[str] = Field(default_factory=list, description="Instruction steps")
    servings: int = Field(4, description="Number of servings")
    prepTimeMinutes: Optional[int] = Field(None, description="Preparation time in minutes")
    cookTimeMinutes: Optional[int] = Field(None, description="Cooking time in minutes")
    totalTimeMinutes: Optional[int] = Field(None, description="Total time in minutes")
    tags: List[str] = Field(default_factory=list, description="Standardized tags")
    imageUrls: List[str] = Field(default_factory=list, description="Candidate image URLs")
    sourceUrl: Optional[str] = Field(None, description="Source URL or identifier")
    source: RecipeSource = Field(RecipeSource.url, description="Kind of source the recipe was imported from")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Weeknight Chicken Tikka Masala",
                "description": "A quick take on the takeout classic.",
                "ingredients": ["1 ½ lbs boneless chicken thighs", "1 cup plain yogurt"],
                "instructions": ["Marinate the chicken in yogurt for 30 minutes.", "Simmer in the sauce until cooked through."],
                "servings": 4,
                "prepTimeMinutes": 15,
                "cookTimeMinutes": 30,
                "totalTimeMinutes": 45,
                "tags": ["indian", "chicken", "dinner"],
                "imageUrls": ["https://example.com/tikka.jpg"],
                "sourceUrl": "https://example.com/chicken-tikka-masala",
                "source": "url",
            }
        }
    )


class SectionName(str, Enum):
    """Section headers recognised in unstructured recipe text."""

    ingredients = "ingredients"
    instructions = "instructions"
    servings = "servings"
    prep_time = "prep_time"
    cook_time = "cook_time"
    total_time = "total_time"
    tags = "tags"


class Section(BaseModel):
    """A detected section header and the line it starts on."""

    name: SectionName
    start_line: int


class TagModification(BaseModel):
    """How one input tag changed during standardization."""

    original: str
    standardized: str = Field(..., description="Standardized tag, empty when the tag was dropped")
    wasModified: bool


class ImportResult(BaseModel):
    """A canonical recipe plus the tag changes to show the user before commit."""

    recipe: CanonicalRecipe
    tagModifications: List[TagModification] = Field(default_factory=list)
