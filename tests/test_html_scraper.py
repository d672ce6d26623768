"""Tests for selector-based scraping and Open Graph supplements."""

import pytest
from bs4 import BeautifulSoup

from recipe_import.models.recipe import DocumentKind, ParsedFragment, RawDocument
from recipe_import.services.html_scraper import HtmlFallbackScraper, select_first_match, INSTRUCTION_SELECTORS
from recipe_import.services.metadata import MetadataSupplementer, og_values
from recipe_import.utils.exceptions import NoScrapedContent


def test_partial_page_keeps_ingredients_only(partial_html):
    fragment = HtmlFallbackScraper().extract(partial_html)

    assert fragment.title == "Simple Syrup"
    assert fragment.ingredients == ["1 cup sugar"]
    assert fragment.instructions == []


def test_short_ordered_list_is_not_trusted():
    html = """
    <ol><li>Preheat the oven to 350F.</li><li>Bake the cake for 30 minutes.</li></ol>
    <div class="method"><p>Whisk everything together in a bowl.</p></div>
    """
    fragment = HtmlFallbackScraper().extract(html)

    assert fragment.instructions == ["Whisk everything together in a bowl."]


def test_ordered_list_with_enough_items_is_used():
    html = """
    <ol>
      <li>Preheat the oven to 350F.</li>
      <li>Cream the butter and sugar.</li>
      <li>Bake the cake for 30 minutes.</li>
    </ol>
    """
    soup = BeautifulSoup(html, "html.parser")
    texts, selector = select_first_match(soup, INSTRUCTION_SELECTORS, lambda text: len(text) > 10)

    assert selector == "ol li"
    assert len(texts) == 3


def test_most_specific_selector_wins():
    html = """
    <ul class="ingredient-list"><li>2 cups flour</li></ul>
    <ul><li itemprop="recipeIngredient">1 cup milk</li></ul>
    """
    assert HtmlFallbackScraper().extract(html).ingredients == ["1 cup milk"]


def test_short_matches_are_filtered():
    html = '<ul class="ingredients"><li>Salt</li><li>-</li><li>1 tsp pepper</li></ul>'
    assert HtmlFallbackScraper().extract(html).ingredients == ["Salt", "1 tsp pepper"]


def test_nothing_found_raises_and_attempt_returns_none():
    scraper = HtmlFallbackScraper()
    html = "<html><body><p>Welcome to my blog</p></body></html>"
    with pytest.raises(NoScrapedContent):
        scraper.extract(html)
    assert scraper.attempt(RawDocument(kind=DocumentKind.html, body=html)) is None


def test_should_run_only_when_something_is_missing():
    scraper = HtmlFallbackScraper()
    assert scraper.should_run(ParsedFragment(ingredients=["1 egg"]))
    assert not scraper.should_run(ParsedFragment(ingredients=["1 egg"], instructions=["Fry the egg."]))


def test_scoped_images_prefer_lazy_sources():
    html = """
    <div class="recipe-card">
      <img src="/assets/logo.png">
      <img data-src="/img/cake.jpg" src="data:image/gif;base64,R0lGOD">
    </div>
    <img src="/img/banner.jpg" width="1200" height="400">
    """
    soup = BeautifulSoup(html, "html.parser")
    images = HtmlFallbackScraper().find_images(soup, "https://example.com/cake")

    assert images == ["https://example.com/img/cake.jpg"]


def test_srcset_is_used_when_no_src():
    html = '<figure><img srcset="/small.jpg 480w, /large.jpg 800w"></figure>'
    soup = BeautifulSoup(html, "html.parser")
    assert HtmlFallbackScraper().find_images(soup) == ["/small.jpg"]


def test_unscoped_images_need_a_large_declared_size():
    html = """
    <img src="https://cdn.example.com/a.jpg" width="800" height="600">
    <img src="https://cdn.example.com/b.jpg" width="50" height="50">
    <img src="https://cdn.example.com/c.jpg">
    """
    soup = BeautifulSoup(html, "html.parser")
    assert HtmlFallbackScraper(min_image_dimension=200).find_images(soup) == ["https://cdn.example.com/a.jpg"]


def test_category_links_become_tags():
    html = """
    <h1>Banana Bread</h1>
    <ul class="ingredients"><li>3 ripe bananas</li></ul>
    <a rel="category" href="/c/breads">Breads</a>
    <a rel="tag" href="/t/baking">Baking</a>
    """
    assert HtmlFallbackScraper().extract(html).tags == ["Breads", "Baking"]


def test_og_values_reads_property_and_name():
    soup = BeautifulSoup(
        '<meta property="og:title" content="A"><meta name="og:title" content="B"><meta property="og:title">',
        "html.parser",
    )
    assert og_values(soup, "og:title") == ["A", "B"]


def test_metadata_supplement():
    html = """
    <meta property="og:title" content="Lemon Tart">
    <meta property="og:description" content="Sharp &amp; sweet.">
    <meta property="og:image" content="/img/tart.jpg">
    """
    document = RawDocument(kind=DocumentKind.html, body=html, source_id="https://example.com/tart")
    fragment = MetadataSupplementer().attempt(document)

    assert fragment.title == "Lemon Tart"
    assert fragment.description == "Sharp & sweet."
    assert fragment.imageUrls == ["https://example.com/img/tart.jpg"]
    assert fragment.ingredients == []


def test_metadata_without_open_graph_is_none():
    document = RawDocument(kind=DocumentKind.html, body="<html><head><title>x</title></head></html>")
    assert MetadataSupplementer().attempt(document) is None


def test_metadata_should_run():
    supplementer = MetadataSupplementer()
    complete = ParsedFragment(title="T", description="D", imageUrls=["https://example.com/a.jpg"])
    assert not supplementer.should_run(complete)
    assert supplementer.should_run(complete.model_copy(update={"description": None}))
