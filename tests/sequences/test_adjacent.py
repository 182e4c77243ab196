from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from report_cli.sequences import group_adjacent, group_ranked, rank_adjacent
from report_cli.shared.exceptions import GroupReplayError


def test_rank_adjacent_by_key() -> None:
    ranked = list(rank_adjacent([1, 1, 2, 2, 2, 1], key=lambda item: item))

    assert ranked == [(1, 1), (1, 1), (2, 2), (2, 2), (2, 2), (3, 1)]


def test_rank_adjacent_starts_at() -> None:
    lines = ["1 page", "a", "b", "1 page", "c"]

    ranks = [rank for rank, _ in rank_adjacent(lines, starts_at=lambda line: line.startswith("1"))]

    assert ranks == [1, 1, 1, 2, 2]


def test_rank_adjacent_ends_at_applies_to_previous_item() -> None:
    ranks = [rank for rank, _ in rank_adjacent([1, 0, 2, 0, 3], ends_at=lambda item: item == 0)]

    assert ranks == [1, 1, 2, 2, 3]


def test_rank_adjacent_equals() -> None:
    ranks = [
        rank for rank, _ in rank_adjacent([1, 2, 3, 7, 8], equals=lambda previous, item: item == previous + 1)
    ]

    assert ranks == [1, 1, 1, 2, 2]


def test_rank_adjacent_without_predicates_is_one_run() -> None:
    assert [rank for rank, _ in rank_adjacent("abc")] == [1, 1, 1]


def test_group_adjacent_groups_runs() -> None:
    groups = [list(group) for group in group_adjacent("aabccc", key=lambda char: char)]

    assert groups == [["a", "a"], ["b"], ["c", "c", "c"]]


def test_group_adjacent_empty_source() -> None:
    assert list(group_adjacent([], key=lambda item: item)) == []


def test_single_pass_source_is_read_once(tracking) -> None:
    source = tracking([1, 1, 2, 3, 3])

    groups = [list(group) for group in group_adjacent(iter(source), key=lambda item: item)]

    assert groups == [[1, 1], [2], [3, 3]]
    assert source.opened == 1
    assert source.pulled == 5


def test_group_head_is_cached() -> None:
    heads = []
    contents = []
    for group in group_adjacent(iter([5, 5, 6, 6, 6]), key=lambda item: item):
        heads.append((group.first(), group.first()))
        contents.append(list(group))

    assert heads == [(5, 5), (6, 6)]
    assert contents == [[5, 5], [6, 6, 6]]


def test_unread_groups_are_skipped() -> None:
    heads = [group.first() for group in group_adjacent(iter("aaabbc"), key=lambda char: char)]

    assert heads == ["a", "b", "c"]


def test_partially_read_group_is_skipped() -> None:
    result = []
    for group in group_adjacent(iter([1, 1, 1, 2, 2, 3]), key=lambda item: item):
        result.append(next(iter(group)))

    assert result == [1, 2, 3]


def test_group_element_at() -> None:
    groups = iter(group_adjacent(iter([4, 4, 4, 9]), key=lambda item: item))
    group = next(groups)

    assert group.element_at(2) == 4
    assert next(groups).first() == 9


def test_outer_sequence_is_re_iterable_over_list_source() -> None:
    groups = group_adjacent([1, 1, 2], key=lambda item: item)

    first_pass = [list(group) for group in groups]
    second_pass = [list(group) for group in groups]

    assert first_pass == second_pass == [[1, 1], [2]]


def test_revisited_group_replays_replayable_source(tracking) -> None:
    source = tracking([1, 1, 2, 2, 3])
    groups = list(group_adjacent(source, key=lambda item: item))

    assert [list(group) for group in groups] == [[1, 1], [2, 2], [3]]
    assert source.opened > 1


def test_revisited_group_of_single_pass_source_raises() -> None:
    groups = list(group_adjacent(iter([1, 1, 2]), key=lambda item: item))

    assert groups[0].first() == 1
    with pytest.raises(GroupReplayError):
        list(groups[0])


def test_group_ranked_exposes_rank() -> None:
    ranked = rank_adjacent(["x", "x", "y"], key=lambda item: item)

    assert [group.rank for group in group_ranked(ranked)] == [1, 2]


@given(st.lists(st.integers(min_value=0, max_value=3)))
def test_group_adjacent_partitions_source(items: list[int]) -> None:
    groups = [list(group) for group in group_adjacent(items, key=lambda item: item)]

    assert [item for group in groups for item in group] == items
    assert all(len(set(group)) == 1 for group in groups)
    assert all(left[0] != right[0] for left, right in zip(groups, groups[1:]))
    changes = sum(1 for index, item in enumerate(items) if index == 0 or items[index - 1] != item)
    assert len(groups) == changes


@given(st.lists(st.booleans()))
def test_starts_at_opens_a_group_per_marker(flags: list[bool]) -> None:
    groups = [list(group) for group in group_adjacent(iter(flags), starts_at=lambda flag: flag)]

    assert [flag for group in groups for flag in group] == flags
    expected = sum(flags[1:]) + 1 if flags else 0
    assert len(groups) == expected
    assert all(not flag for group in groups for flag in group[1:])
