"""Tests for portfolio relevance selection."""

import pytest

from proposal_generator.cancellation import CancellationToken
from proposal_generator.errors import ModelServiceError, QuotaExceeded, RunCancelled
from proposal_generator.records import PortfolioItem
from proposal_generator.selector import RelevanceSelector, build_selection_prompt, parse_selection

from conftest import FakeModelService


@pytest.fixture
def catalog(store):
    return store.list_portfolio_items()


class TestParseSelection:
    """Tests for parse_selection."""

    def test_out_of_range_indices_are_dropped(self):
        assert parse_selection("2, 4, 9", 5) == [1, 3]

    def test_duplicates_are_dropped(self):
        assert parse_selection("3, 3, 1", 5) == [2, 0]

    def test_truncates_to_three(self):
        assert parse_selection("5 4 3 2 1", 5) == [4, 3, 2]

    def test_zero_is_out_of_range(self):
        assert parse_selection("0, 2", 5) == [1]

    def test_digits_inside_text(self):
        assert parse_selection("The best matches are #3 and #1.", 5) == [2, 0]

    def test_no_digits(self):
        assert parse_selection("none of them", 5) == []
        assert parse_selection("", 5) == []


class TestRelevanceSelector:
    """Tests for RelevanceSelector.select."""

    def test_empty_catalog_skips_model(self, executor, fake_model):
        selector = RelevanceSelector(executor, fake_model)

        assert selector.select("Need a logo", []) == []
        assert fake_model.calls == []

    def test_returns_items_in_model_order(self, executor, catalog):
        model = FakeModelService(responses=["2, 4, 9"])
        selector = RelevanceSelector(executor, model)

        selected = selector.select("Need a motion graphics video", catalog)

        assert selected == [catalog[1], catalog[3]]

    def test_prompt_lists_every_item(self, executor, catalog):
        model = FakeModelService(responses=["1"])
        RelevanceSelector(executor, model).select("Build a Shopify store", catalog)

        prompt = model.prompts[0]
        assert "Build a Shopify store" in prompt
        for i, item in enumerate(catalog, 1):
            assert f"{i}. Title: {item.title}" in prompt
            assert item.link in prompt
            assert item.description in prompt

    def test_model_failure_falls_back_to_first_two(self, executor, catalog):
        model = FakeModelService(responses=[ModelServiceError("invalid argument")])

        selected = RelevanceSelector(executor, model).select("brief", catalog)

        assert selected == catalog[:2]

    def test_exhausted_retries_fall_back(self, executor, catalog):
        model = FakeModelService(responses=[QuotaExceeded("quota")] * 3)

        selected = RelevanceSelector(executor, model).select("brief", catalog)

        assert selected == catalog[:2]
        assert len(model.calls) == 3

    def test_unparseable_response_falls_back(self, executor, catalog):
        model = FakeModelService(responses=["I could not decide"])

        assert RelevanceSelector(executor, model).select("brief", catalog) == catalog[:2]

    def test_fallback_with_single_item_catalog(self, executor):
        only = [PortfolioItem(id="1", title="Only")]
        model = FakeModelService(responses=["7"])

        assert RelevanceSelector(executor, model).select("brief", only) == only

    def test_cancellation_is_not_swallowed(self, executor, catalog, fake_model):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(RunCancelled):
            RelevanceSelector(executor, fake_model).select("brief", catalog, cancel_token=token)


def test_build_selection_prompt_marks_missing_fields():
    prompt = build_selection_prompt("brief", [PortfolioItem(id="1", title="Untitled work")])

    assert "1. Title: Untitled work" in prompt
    assert "Description: N/A" in prompt
    assert "Link: N/A" in prompt
