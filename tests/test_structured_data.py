"""Tests for JSON-LD recipe extraction."""

import json

import pytest

from recipe_import.models.recipe import DocumentKind, RawDocument
from recipe_import.services.structured_data import (
    StructuredDataExtractor,
    decode_json_ld,
    flatten_instructions,
    infer_cuisine,
    iter_nodes,
)
from recipe_import.utils.exceptions import NoStructuredData


def _page(payload, extra_body=""):
    body = payload if isinstance(payload, str) else json.dumps(payload)
    return (
        "<html><head>"
        f'<script type="application/ld+json">{body}</script>'
        f"</head><body>{extra_body}</body></html>"
    )


def test_recipe_node_fields(json_ld_html):
    fragment = StructuredDataExtractor().extract(json_ld_html, "https://example.com/pancakes")

    assert fragment.title == "Pancakes"
    assert fragment.ingredients == ["2 cups flour", "1 egg"]
    assert fragment.instructions == ["Mix", "Bake"]
    assert fragment.servings == 6
    assert fragment.prepTimeMinutes == 10
    assert fragment.cookTimeMinutes == 20
    assert fragment.totalTimeMinutes == 30
    assert fragment.tags == ["Breakfast", "Quick Recipe", "pancakes"]
    assert fragment.imageUrls == ["https://example.com/img/pancakes.jpg"]


def test_recipe_inside_graph():
    html = _page(
        {
            "@context": "https://schema.org",
            "@graph": [
                {"@type": "WebSite", "name": "Example"},
                {"@type": ["Recipe", "NewsArticle"], "name": "Chili", "recipeIngredient": ["1 lb beef"]},
            ],
        }
    )
    fragment = StructuredDataExtractor().extract(html)

    assert fragment.title == "Chili"
    assert fragment.ingredients == ["1 lb beef"]


def test_schema_url_types_are_recognised():
    html = _page({"@type": "http://schema.org/Recipe", "name": "Stew", "recipeIngredient": "2 carrots"})
    assert StructuredDataExtractor().extract(html).ingredients == ["2 carrots"]


def test_how_to_sections_are_flattened():
    instructions = [
        {
            "@type": "HowToSection",
            "name": "Dough",
            "itemListElement": [{"@type": "HowToStep", "text": "Mix flour and water."}],
        },
        {
            "@type": "HowToSection",
            "name": "Filling",
            "itemListElement": [{"@type": "HowToStep", "text": "Cook the <b>spinach</b>."}],
        },
    ]
    assert flatten_instructions(instructions) == [
        "Dough:",
        "Mix flour and water.",
        "Filling:",
        "Cook the spinach.",
    ]


def test_instruction_string_with_markup_is_split():
    assert flatten_instructions("<p>Mix.</p><p>Bake &amp; cool.</p>") == ["Mix.", "Bake & cool."]


def test_tolerant_decoding():
    raw = "\ufeff" + '<!-- {"@type": "Recipe", "name": "Soup\nof the day", "recipeIngredient": ["1 leek",],} -->'
    values = decode_json_ld(raw)

    assert len(values) == 1
    assert values[0]["name"] == "Soup\nof the day"
    assert values[0]["recipeIngredient"] == ["1 leek"]


def test_concatenated_values_are_all_decoded():
    values = decode_json_ld('{"@type": "WebPage"}\n{"@type": "Recipe"}')
    assert [v["@type"] for v in values] == ["WebPage", "Recipe"]


def test_undecodable_block_yields_nothing():
    assert decode_json_ld("not json at all") == []
    assert decode_json_ld(None) == []


def test_broken_block_does_not_hide_a_good_one():
    html = (
        '<script type="application/ld+json">{broken</script>'
        '<script type="application/ld+json">{"@type": "Recipe", "recipeIngredient": ["1 egg"]}</script>'
    )
    assert StructuredDataExtractor().extract(html).ingredients == ["1 egg"]


def test_article_with_recipe_fields_is_used():
    html = _page({"@type": "BlogPosting", "headline": "Best Brownies", "recipeIngredient": ["1 cup cocoa"]})
    fragment = StructuredDataExtractor().extract(html)

    assert fragment.title == "Best Brownies"
    assert fragment.ingredients == ["1 cup cocoa"]


def test_plain_article_is_not_a_recipe():
    html = _page({"@type": "Article", "headline": "Our Kitchen Tour"})
    with pytest.raises(NoStructuredData):
        StructuredDataExtractor().extract(html)


def test_missing_json_ld_raises_and_attempt_returns_none():
    extractor = StructuredDataExtractor()
    with pytest.raises(NoStructuredData):
        extractor.extract("<html><body><p>Hello</p></body></html>")

    document = RawDocument(kind=DocumentKind.html, body="<html></html>")
    assert extractor.attempt(document) is None


def test_attempt_ignores_plain_text_documents():
    document = RawDocument(kind=DocumentKind.plain_text, body="Ingredients\n1 egg")
    assert StructuredDataExtractor().attempt(document) is None


@pytest.mark.parametrize(
    "title,expected",
    [
        ("Easy Thai Green Curry", "thai"),
        ("South Indian Lemon Rice", "south indian"),
        ("Tex-Mex Nachos", "tex-mex"),
        ("Chocolate Chip Cookies", None),
        ("Thaimed Cutlets", None),
        (None, None),
    ],
)
def test_infer_cuisine(title, expected):
    assert infer_cuisine(title) == expected


def test_cuisine_inferred_from_title_when_declared_value_is_unknown():
    html = _page(
        {
            "@type": "Recipe",
            "name": "Korean Beef Bowls",
            "recipeCuisine": "Weeknight Favourites",
            "recipeIngredient": ["1 lb ground beef"],
        }
    )
    fragment = StructuredDataExtractor().extract(html)

    assert fragment.cuisine == "korean"
    assert fragment.tags == ["Weeknight Favourites", "korean"]


def test_declared_cuisine_is_kept():
    html = _page(
        {
            "@type": "Recipe",
            "name": "Korean Beef Bowls",
            "recipeCuisine": ["Korean"],
            "recipeIngredient": ["1 lb ground beef"],
        }
    )
    fragment = StructuredDataExtractor().extract(html)

    assert fragment.cuisine == "Korean"
    assert fragment.tags == ["Korean"]


def test_category_links_are_added_to_tags():
    html = _page(
        {"@type": "Recipe", "name": "Scones", "recipeIngredient": ["2 cups flour"]},
        extra_body='<a rel="category tag" href="/c/baking">Baking</a>',
    )
    assert StructuredDataExtractor().extract(html).tags == ["Baking"]


def test_image_objects_and_blacklist():
    html = _page(
        {
            "@type": "Recipe",
            "recipeIngredient": ["1 egg"],
            "image": [
                {"@type": "ImageObject", "url": "https://cdn.example.com/egg.jpg"},
                "https://cdn.example.com/logo.png",
                "https://cdn.example.com/egg.jpg",
            ],
        }
    )
    assert StructuredDataExtractor().extract(html).imageUrls == ["https://cdn.example.com/egg.jpg"]


def test_iter_nodes_walks_nested_objects():
    payload = {"@graph": [{"@type": "A", "child": {"@type": "B"}}]}
    assert [n.get("@type") for n in iter_nodes(payload)] == [None, "A", "B"]
