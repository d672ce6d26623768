"""Tests for the extraction cascade and fragment merging."""

import itertools

import pytest

from recipe_import.models.recipe import DocumentKind, ParsedFragment, RawDocument, RecipeSource
from recipe_import.services.orchestrator import DEFAULT_TITLE, SourceOrchestrator, is_empty, merge_fragments
from recipe_import.utils.exceptions import ExtractionFailed

FIELD_VALUES = {
    "title": ("First", "Second"),
    "description": ("first description", "second description"),
    "ingredients": (["1 egg"], ["2 eggs"]),
    "instructions": (["Fry the egg."], ["Boil the egg."]),
    "tags": (["breakfast"], ["brunch"]),
    "servings": (2, 4),
    "cookTimeMinutes": (5, 10),
}


class StubExtractor:
    """Returns a fixed fragment and records whether it ran."""

    def __init__(self, name, fragment=None, run_when=None):
        self.name = name
        self.fragment = fragment
        self.run_when = run_when
        self.calls = 0

    def should_run(self, accumulator):
        return self.run_when(accumulator) if self.run_when else True

    def attempt(self, document):
        self.calls += 1
        return self.fragment


def _document(body="<html></html>", source_id=None):
    return RawDocument(kind=DocumentKind.html, body=body, source_id=source_id)


@pytest.mark.parametrize(
    "field,present",
    [
        (field, present)
        for field in FIELD_VALUES
        for present in itertools.product([False, True], repeat=2)
    ],
)
def test_merge_never_overwrites_populated_fields(field, present):
    """Over every presence combination, the earlier value survives and gaps get filled."""
    first_value, second_value = FIELD_VALUES[field]
    in_accumulator, in_fragment = present
    accumulator = ParsedFragment(**({field: first_value} if in_accumulator else {}))
    fragment = ParsedFragment(**({field: second_value} if in_fragment else {}))

    merged = merge_fragments(accumulator, fragment)

    if in_accumulator:
        assert getattr(merged, field) == first_value
    elif in_fragment:
        assert getattr(merged, field) == second_value
    else:
        assert is_empty(getattr(merged, field))


def test_blank_title_counts_as_missing():
    merged = merge_fragments(ParsedFragment(title="  "), ParsedFragment(title="Real Title"))
    assert merged.title == "Real Title"


def test_merge_does_not_mutate_inputs():
    accumulator = ParsedFragment()
    merge_fragments(accumulator, ParsedFragment(ingredients=["1 egg"]))
    assert accumulator.ingredients == []


def test_json_ld_page_end_to_end(json_ld_html):
    recipe = SourceOrchestrator().extract(_document(json_ld_html, "https://example.com/pancakes"))

    assert recipe.title == "Pancakes"
    assert recipe.ingredients == ["2 cups flour", "1 egg"]
    assert recipe.instructions == ["Mix", "Bake"]
    assert recipe.description == "Fluffy weekend pancakes."
    assert recipe.imageUrls == ["https://example.com/img/pancakes.jpg"]
    assert recipe.servings == 6
    assert recipe.source is RecipeSource.url
    assert recipe.sourceUrl == "https://example.com/pancakes"


def test_partial_page_is_accepted(partial_html):
    recipe = SourceOrchestrator(default_servings=4).extract(_document(partial_html))

    assert recipe.ingredients == ["1 cup sugar"]
    assert recipe.instructions == []
    assert recipe.title == "Simple Syrup"
    assert recipe.servings == 4
    assert recipe.source is RecipeSource.html


def test_default_title_when_no_stage_finds_one():
    html = '<ul class="ingredients"><li>1 cup sugar</li></ul>'
    assert SourceOrchestrator().extract(_document(html)).title == DEFAULT_TITLE


def test_all_empty_stages_fail():
    orchestrator = SourceOrchestrator(
        extractors=[StubExtractor("a"), StubExtractor("b", ParsedFragment(title="Only a title"))]
    )
    with pytest.raises(ExtractionFailed, match="could not extract a recipe from this source"):
        orchestrator.extract(_document())


def test_stages_run_in_order_and_earlier_wins():
    first = StubExtractor("first", ParsedFragment(title="From first", ingredients=["1 egg"]))
    second = StubExtractor("second", ParsedFragment(title="From second", instructions=["Fry the egg."]))

    merged = SourceOrchestrator(extractors=[first, second]).run(_document())

    assert merged.title == "From first"
    assert merged.ingredients == ["1 egg"]
    assert merged.instructions == ["Fry the egg."]


def test_skipped_stage_is_not_attempted():
    first = StubExtractor("first", ParsedFragment(ingredients=["1 egg"], instructions=["Fry the egg."]))
    fallback = StubExtractor(
        "fallback",
        ParsedFragment(ingredients=["ignored"]),
        run_when=lambda acc: not acc.ingredients or not acc.instructions,
    )

    SourceOrchestrator(extractors=[first, fallback]).run(_document())

    assert fallback.calls == 0


def test_oversized_documents_are_truncated():
    seen = []

    class Recorder(StubExtractor):
        def attempt(self, document):
            seen.append(len(document.body))
            return ParsedFragment(ingredients=["1 egg"])

    SourceOrchestrator(extractors=[Recorder("recorder")], max_document_chars=100).extract(_document("x" * 500))

    assert seen == [100]
