"""
Unit tests for allowlist filtering, de-duplication and pagination.
"""

from dataclasses import dataclass

import pytest

from fundraiser_toolkit.campaigns.projection import (
    ProjectionPage,
    filter_and_dedupe,
    normalize_allowlist,
    project,
)


@dataclass
class Row:
    contract_address: str
    campaign_id: int
    label: str = ""


ALLOWED = "0xAAA0000000000000000000000000000000000001"
OTHER = "0xBBB0000000000000000000000000000000000002"


class TestFilter:
    def test_allowlist_match_is_case_insensitive(self):
        rows = [Row(ALLOWED.lower(), 1, "lower"), Row(OTHER, 2, "other")]
        page = project(rows, [ALLOWED], 0, 10)
        assert [r.label for r in page.items] == ["lower"]
        assert page.total == 1

    def test_empty_address_dropped(self):
        rows = [Row("", 1), Row(ALLOWED, 2)]
        assert [r.campaign_id for r in filter_and_dedupe(rows, [ALLOWED])] == [2]

    def test_empty_allowlist_drops_everything(self):
        assert filter_and_dedupe([Row(ALLOWED, 1)], []) == []

    def test_normalize_allowlist(self):
        assert normalize_allowlist([" 0xAbC ", "", None]) == {"0xabc"}


class TestDedupe:
    def test_first_occurrence_wins(self):
        rows = [
            Row(ALLOWED, 1, "newest"),
            Row(ALLOWED.lower(), 1, "older"),
            Row(ALLOWED, 2, "other-campaign"),
        ]
        kept = filter_and_dedupe(rows, [ALLOWED])
        assert [r.label for r in kept] == ["newest", "other-campaign"]

    def test_same_id_on_different_contracts_kept(self):
        rows = [Row(ALLOWED, 1), Row(OTHER, 1)]
        assert len(filter_and_dedupe(rows, [ALLOWED, OTHER])) == 2

    def test_no_duplicate_keys_in_output(self):
        rows = [Row(ALLOWED if i % 2 else ALLOWED.lower(), i % 5) for i in range(40)]
        kept = filter_and_dedupe(rows, [ALLOWED])
        keys = [(r.contract_address.lower(), r.campaign_id) for r in kept]
        assert len(keys) == len(set(keys))


class TestPagination:
    @pytest.fixture
    def rows(self):
        return [Row(ALLOWED, i) for i in range(23)]

    def test_first_page(self, rows):
        page = project(rows, [ALLOWED], 0, 10)
        assert [r.campaign_id for r in page.items] == list(range(10))
        assert page.total == 23
        assert page.next_cursor == 10

    def test_last_page_has_no_cursor(self, rows):
        page = project(rows, [ALLOWED], 20, 10)
        assert [r.campaign_id for r in page.items] == [20, 21, 22]
        assert page.next_cursor is None

    def test_exact_fit_has_no_cursor(self, rows):
        page = project(rows, [ALLOWED], 13, 10)
        assert len(page.items) == 10
        assert page.next_cursor is None

    def test_offset_past_end(self, rows):
        page = project(rows, [ALLOWED], 100, 10)
        assert page.items == []
        assert page.total == 23
        assert page.next_cursor is None

    @pytest.mark.parametrize("limit", [1, 3, 7, 10, 50])
    def test_pages_concatenate_to_full_listing(self, rows, limit):
        full = project(rows, [ALLOWED], 0, len(rows)).items
        collected = []
        cursor = 0
        while cursor is not None:
            page = project(rows, [ALLOWED], cursor, limit)
            collected.extend(page.items)
            cursor = page.next_cursor
        assert collected == full

    def test_to_dict(self):
        page = ProjectionPage(items=[{"a": 1}], total=5, next_cursor=1)
        assert page.to_dict() == {"items": [{"a": 1}], "total": 5, "nextCursor": 1}
