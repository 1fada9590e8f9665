"""Tests for query composition: defaults, ordering and the non-positive policy."""

from __future__ import annotations

import pytest

from core import query
from core.query import QueryOption, compose


def test_no_options_returns_defaults() -> None:
    assert compose(query.SEARCH_DEFAULTS, []) == query.SEARCH_DEFAULTS


def test_compose_does_not_mutate_defaults() -> None:
    defaults = {"limit": "20"}
    params = compose(defaults, [query.limit(50)])
    assert params == {"limit": "50"}
    assert defaults == {"limit": "20"}


def test_non_positive_limit_keeps_default() -> None:
    assert compose(query.SEARCH_DEFAULTS, [query.limit(0)])["limit"] == "30"
    assert compose(query.SEARCH_DEFAULTS, [query.limit(-5)])["limit"] == "30"
    assert compose(query.SHARE_SNAP_DEFAULTS, [query.limit(0)])["limit"] == "20"
    assert compose(query.LIST_DEFAULTS, [query.limit(None)])["limit"] == query.LIST_DEFAULTS["limit"]


def test_last_write_wins() -> None:
    params = compose(query.SEARCH_DEFAULTS, [query.offset(5), query.offset(9)])
    assert params["offset"] == "9"


def test_ignored_option_does_not_undo_earlier_write() -> None:
    params = compose(query.SEARCH_DEFAULTS, [query.limit(50), query.limit(0)])
    assert params["limit"] == "50"


def test_disjoint_options_commute() -> None:
    a = compose(query.SEARCH_DEFAULTS, [query.offset(10), query.limit(5)])
    b = compose(query.SEARCH_DEFAULTS, [query.limit(5), query.offset(10)])
    assert a == b


def test_empty_text_keeps_default() -> None:
    params = compose(query.SEARCH_DEFAULTS, [query.order(""), query.order("   ")])
    assert params["o"] == "file_name"


def test_search_value_only() -> None:
    params = compose(query.SEARCH_DEFAULTS, [query.search_value("foo")])
    assert params == {
        "aid": "7",
        "cid": "0",
        "offset": "0",
        "limit": "30",
        "type": "0",
        "count_folders": "1",
        "o": "file_name",
        "asc": "1",
        "search_value": "foo",
    }


def test_asc_flag() -> None:
    assert compose(query.SEARCH_DEFAULTS, [query.asc(None)])["asc"] == "1"
    assert compose(query.SEARCH_DEFAULTS, [query.asc(-1)])["asc"] == "1"
    assert compose(query.SEARCH_DEFAULTS, [query.asc(0)])["asc"] == "0"
    assert compose(query.SHARE_SNAP_DEFAULTS, [query.asc(True)])["asc"] == "1"


def test_option_keys() -> None:
    assert query.order("user_ptime").key == "o"
    assert query.file_type(4).key == "type"
    assert query.dir_id("123").key == "cid"


def test_custom_option_applies() -> None:
    option = QueryOption("custom", "star", "1")
    assert compose({}, [option]) == {"star": "1"}


@pytest.mark.parametrize(
    ("build", "value", "key", "written"),
    [
        (query.count_folders, 0, "count_folders", None),
        (query.count_folders, 2, "count_folders", "2"),
        (query.area_id, "", "aid", None),
        (query.area_id, " 1 ", "aid", "1"),
        (query.pick_code, "   ", "pick_code", None),
        (query.pick_code, "abc123", "pick_code", "abc123"),
        (query.date, None, "date", None),
        (query.date, "2024-01-31", "date", "2024-01-31"),
        (query.source, "", "source", None),
        (query.source, "web", "source", "web"),
        (query.star, "", "star", None),
        (query.star, "1", "star", "1"),
        (query.suffix, "", "suffix", None),
        (query.suffix, "mkv", "suffix", "mkv"),
    ],
)
def test_filter_options(build, value, key: str, written) -> None:
    option = build(value)
    assert option.key == key
    assert option.value == written

    params = compose(query.SEARCH_DEFAULTS, [option])
    if written is None:
        assert params == query.SEARCH_DEFAULTS
    else:
        assert params[key] == written


def test_search_filters_compose() -> None:
    params = compose(
        query.SEARCH_DEFAULTS,
        [query.area_id("1"), query.count_folders(-1), query.suffix("pdf"), query.star("1")],
    )
    assert params["aid"] == "1"
    assert params["count_folders"] == "1"
    assert (params["suffix"], params["star"]) == ("pdf", "1")
