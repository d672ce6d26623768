"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from recipe_import.main import app
from recipe_import.middleware.rate_limit import limiter


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Every test starts with an empty rate limit window."""
    limiter.reset()
    yield


@pytest.fixture
def json_ld_html():
    """Page whose recipe is fully described by JSON-LD."""
    return """
    <html>
      <head>
        <title>Pancakes</title>
        <meta property="og:title" content="OG Pancakes">
        <meta property="og:description" content="Fluffy weekend pancakes.">
        <meta property="og:image" content="/img/og-pancakes.jpg">
        <script type="application/ld+json">
        {
          "@context": "https://schema.org",
          "@type": "Recipe",
          "name": "Pancakes",
          "recipeIngredient": ["2 cups flour", "1 egg"],
          "recipeInstructions": [{"@type": "HowToStep", "text": "Mix"}, {"@type": "HowToStep", "text": "Bake"}],
          "recipeYield": "6 servings",
          "prepTime": "PT10M",
          "cookTime": "PT20M",
          "totalTime": "PT30M",
          "recipeCategory": "Breakfast",
          "keywords": "Quick Recipe, pancakes",
          "image": ["/img/pancakes.jpg"]
        }
        </script>
      </head>
      <body><h1>Ignored Heading</h1></body>
    </html>
    """


@pytest.fixture
def partial_html():
    """Page with an ingredient list and nothing else."""
    return """
    <html>
      <body>
        <h1>Simple Syrup</h1>
        <ul class="ingredients"><li>1 cup sugar</li></ul>
      </body>
    </html>
    """


@pytest.fixture
def recipe_text():
    """OCR-style recipe text with every section."""
    return "\n".join(
        [
            "Grandma's Tomato Soup",
            "Serves 6",
            "Prep Time: 15 minutes",
            "Cook Time: 1 hour 10 min",
            "Ingredients",
            "• 2 tbsp olive oil",
            "1. 1 large onion, diced",
            "3 cloves garlic",
            "Instructions",
            "Step 1: Heat the oil in a large pot over medium heat.",
            "2. Add the onion and cook until soft, about 8 minutes.",
            "Please leave a rating and review below!",
            "Tags: Soup, Italian Food, Weeknight",
        ]
    )


@pytest.fixture
def misplaced_text():
    """PDF text where an ingredient landed after the instructions header."""
    return "\n".join(
        [
            "Onion Soup",
            "Instructions:",
            "2 cups diced onion",
            "Heat the oil in a large pot over medium heat.",
            "Cook the onion until soft, about 10 minutes.",
        ]
    )
