"""Tests for the line classifier rules."""

import pytest

from recipe_import.services.content_classifier import (
    INGREDIENT_RULES,
    INSTRUCTION_RULES,
    NOISE_RULES,
    STRONG_INGREDIENT_RULES,
    has_strong_ingredient_marker,
    has_strong_instruction_marker,
    is_ingredient_like,
    is_instruction_like,
    is_noise,
    matching_rules,
)


@pytest.mark.parametrize(
    "line",
    [
        "2 cups flour",
        "½ tsp salt",
        "1 large onion, diced",
        "3 cloves garlic",
        "cups chopped parsley",
    ],
)
def test_ingredient_lines(line):
    assert is_ingredient_like(line)


@pytest.mark.parametrize(
    "line",
    [
        "Preheat the oven to 350°F.",
        "Simmer for 20 minutes, stirring occasionally.",
        "Transfer to a baking dish and serve warm.",
    ],
)
def test_instruction_lines(line):
    assert is_instruction_like(line)


def test_short_lines_are_not_classified():
    """Too short to be a step, or to be anything at all."""
    assert not is_ingredient_like("ab")
    assert not is_instruction_like("Stir well")


def test_footer_vocabulary_blocks_instructions():
    assert not is_instruction_like("Add a comment and rate this recipe")


@pytest.mark.parametrize(
    "line",
    [
        "Save the ingredients to your shopping list",
        "Please leave a rating and review below!",
        "Your reviews help my small business thrive",
        "Follow us on Instagram",
        "Privacy Policy",
        "Home",
        "Get a free trial of our meal plans",
    ],
)
def test_noise_lines(line):
    assert is_noise(line)


@pytest.mark.parametrize("line", ["2 cups gluten-free flour", "Bake until golden, about 25 minutes."])
def test_recipe_lines_are_not_noise(line):
    assert not is_noise(line)


def test_matching_rules_names_the_signals():
    assert matching_rules("2 cups flour", INGREDIENT_RULES) == ["quantity_unit", "unit_or_prep_word", "food_noun"]
    assert "cooking_verb" in matching_rules("Whisk the eggs in a bowl", INSTRUCTION_RULES)
    assert "equipment" in matching_rules("Whisk the eggs in a bowl", INSTRUCTION_RULES)
    assert matching_rules("Privacy Policy", NOISE_RULES) == ["legal_footer"]


def test_quantity_unit_does_not_read_cups_as_celsius():
    assert not is_instruction_like("2 cups diced onion")


def test_strong_markers():
    assert has_strong_ingredient_marker("2 cups diced onion")
    assert has_strong_ingredient_marker("1 red pepper, sliced")
    assert has_strong_ingredient_marker("1 cup chickpeas (from 1 can)")
    assert matching_rules("tbsp soy sauce", STRONG_INGREDIENT_RULES) == ["leading_bare_unit"]

    assert has_strong_instruction_marker("Cover and let rest")
    assert has_strong_instruction_marker("the sauce thickens until glossy")
    assert has_strong_instruction_marker("for 10 minutes")
    assert not has_strong_instruction_marker("2 cups diced onion")
