"""Tests for tag standardization and review."""

import pytest

from recipe_import.models.recipe import CanonicalRecipe
from recipe_import.services.tag_normalizer import (
    SYNONYMS,
    apply_reviewed_tags,
    standardize,
    standardize_tag,
    standardize_with_tracking,
)


def test_standardize_collapses_synonyms_junk_and_duplicates():
    tags = ["Italian Food", "Quick Recipe", "how to make pasta", "italian food"]
    assert standardize(tags) == ["italian", "quick"]


@pytest.mark.parametrize(
    "tag,expected",
    [
        ("Homemade Pizza!", "pizza"),
        ("Gluten Free", "gluten-free"),
        ("gluten-free", "gluten-free"),
        ("Best Chicken Recipes", "chicken"),
        ("Crock-Pot", "slow-cook"),
        ("Christmas", "special occasion"),
        ("  Date   Night ", "date night"),
        ("Recipe", None),
        ("123", None),
        ("a", None),
        ("!!!", None),
        ("Uncategorized", None),
        ("one two three four five", None),
        ("Sponsored Post", None),
        ("Homemade Cooking", "homemade cooking"),
        ("Classic Traditional", "classic traditional"),
    ],
)
def test_standardize_tag(tag, expected):
    assert standardize_tag(tag) == expected


@pytest.mark.parametrize(
    "tags",
    [
        ["Italian Food", "Quick Recipe", "how to make pasta", "italian food"],
        ["Best Chicken Recipes", "Pan-Fried", "Crock Pot", "Holidays"],
        ["Gluten Free", "Dairy-Free", "Low Carb", "Keto Diet", "30 Minute"],
        ["Traditional Mexican Cuisine", "Desserts", "Snacks", "Soups"],
    ],
)
def test_standardize_is_idempotent(tags):
    once = standardize(tags)
    assert standardize(once) == once


def test_synonym_targets_are_stable():
    for target in set(SYNONYMS.values()):
        assert standardize_tag(target) == target


def test_tracking_reports_every_input():
    modifications = standardize_with_tracking(["Italian Food", "vegan", "Sponsored"])

    assert [(m.original, m.standardized, m.wasModified) for m in modifications] == [
        ("Italian Food", "italian", True),
        ("vegan", "vegan", False),
        ("Sponsored", "", True),
    ]


def test_case_only_change_is_not_a_modification():
    [modification] = standardize_with_tracking(["Vegan"])
    assert modification.standardized == "vegan"
    assert not modification.wasModified


def test_apply_reviewed_tags_keeps_user_wording():
    recipe = CanonicalRecipe(title="Salad", tags=["old"])
    updated = apply_reviewed_tags(recipe, [" Vegan ", "", "vegan", "Date Night"])

    assert updated.tags == ["Vegan", "Date Night"]
    assert recipe.tags == ["old"]
