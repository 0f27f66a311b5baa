import locale

import pytest

from core.models import CacheRecord, SortKey, SortState
from core.services.sort_service import SortService, parse_sort_keys, use_system_collation


def _ids(records):
    return [r.id for r in records]


def test_sort_by_age_ascending_and_descending(sample_records):
    sorter = SortService()
    assert _ids(sorter.sort(sample_records, SortKey.AGE, True)) == ["b", "c", "a"]
    assert _ids(sorter.sort(sample_records, SortKey.AGE, False)) == ["a", "c", "b"]


def test_sort_by_group_and_size(sample_records):
    sorter = SortService()
    assert _ids(sorter.sort(sample_records, SortKey.GROUP_KEY, True)) == ["a", "c", "b"]
    assert _ids(sorter.sort(sample_records, SortKey.SIZE, False)) == ["b", "a", "c"]


def _named(names):
    return [CacheRecord(id=n, name=n, group_key=2020, age_days=0, size_bytes=0) for n in names]


@pytest.fixture(params=["C", "system"])
def collation(request):
    saved = locale.setlocale(locale.LC_COLLATE)
    if request.param == "C":
        locale.setlocale(locale.LC_COLLATE, "C")
    elif not use_system_collation():
        pytest.skip("system collation locale unavailable")
    yield request.param
    locale.setlocale(locale.LC_COLLATE, saved)


def test_sort_by_name_ignores_case(collation):
    names = ["delta", "Bravo", "alpha", "Charlie"]
    sorter = SortService()

    ascending = sorter.sort(_named(names), SortKey.NAME, True)
    descending = sorter.sort(_named(names), SortKey.NAME, False)

    assert [r.name for r in ascending] == ["alpha", "Bravo", "Charlie", "delta"]
    assert [r.name for r in descending] == ["delta", "Charlie", "Bravo", "alpha"]


def test_sort_by_name_interleaves_upper_and_lower_case(collation):
    names = ["beta", "Alpha", "alpha", "Beta", "zeta", "Zeta"]
    result = SortService().sort(_named(names), SortKey.NAME, True)

    folded = [r.name.casefold() for r in result]
    assert folded == ["alpha", "alpha", "beta", "beta", "zeta", "zeta"]
    assert folded.index("zeta") > folded.index("alpha")


def test_sort_is_stable_for_equal_keys_in_both_directions():
    records = [
        CacheRecord(id=str(i), name=f"p{i}", group_key=2024, age_days=5, size_bytes=1)
        for i in range(5)
    ]
    sorter = SortService()
    assert _ids(sorter.sort(records, SortKey.AGE, True)) == ["0", "1", "2", "3", "4"]
    assert _ids(sorter.sort(records, SortKey.AGE, False)) == ["0", "1", "2", "3", "4"]


def test_sort_does_not_mutate_input(sample_records):
    before = list(sample_records)
    SortService().sort(sample_records, SortKey.SIZE, True)
    assert sample_records == before


def test_sort_multi_primary_key_first():
    records = [
        CacheRecord(id="x", name="B", group_key=2022, age_days=1, size_bytes=1),
        CacheRecord(id="y", name="A", group_key=2023, age_days=1, size_bytes=1),
        CacheRecord(id="z", name="A", group_key=2022, age_days=1, size_bytes=1),
    ]
    result = SortService().sort_multi(
        records, [(SortKey.GROUP_KEY, True), (SortKey.NAME, True)]
    )
    assert _ids(result) == ["z", "x", "y"]


def test_toggle_policy():
    state = SortState(SortKey.AGE, True)
    flipped = state.toggled(SortKey.AGE)
    assert flipped == SortState(SortKey.AGE, False)
    assert flipped.toggled(SortKey.AGE) == SortState(SortKey.AGE, True)
    # A different key always starts ascending
    assert flipped.toggled(SortKey.SIZE) == SortState(SortKey.SIZE, True)


def test_parse_sort_keys_skips_unknown_fields():
    raw = [
        {"field": "age_days", "asc": False},
        {"field": "colour"},
        "garbage",
        {"field": "name"},
    ]
    assert parse_sort_keys(raw) == [(SortKey.AGE, False), (SortKey.NAME, True)]
    assert parse_sort_keys(None) == []
