from __future__ import annotations

import pytest

from report_cli.sequences import Lookahead, lookahead
from report_cli.shared.exceptions import NonIdempotentSequenceError


def test_lookahead_yields_source_items_in_order(tracking) -> None:
    source = tracking(range(5))

    assert list(Lookahead(source)) == [0, 1, 2, 3, 4]
    assert source.opened == 1


def test_first_is_served_from_buffer(tracking) -> None:
    source = tracking("abc")
    view = Lookahead(source, depth=1)

    assert view.first() == "a"
    assert view.first() == "a"
    assert view.buffered == ("a",)
    assert source.opened == 1
    assert source.pulled == 1


def test_element_at_within_depth_does_not_reopen_source(tracking) -> None:
    source = tracking(range(10))
    view = Lookahead(source, depth=3)

    assert view.element_at(2) == 2
    assert view.element_at(0) == 0
    assert view.element_at(1) == 1
    assert source.opened == 1
    assert view.buffered == (0, 1, 2)


def test_second_pass_replays_buffer_then_source(tracking) -> None:
    source = tracking(range(4))
    view = Lookahead(source, depth=2)

    assert list(view) == [0, 1, 2, 3]
    assert list(view) == [0, 1, 2, 3]
    assert source.opened == 2


def test_empty_source_is_not_reopened(tracking) -> None:
    source = tracking([])
    view = Lookahead(source)

    assert list(view) == []
    assert list(view) == []
    assert view.first(None) is None
    assert source.opened == 1


def test_source_shorter_than_depth(tracking) -> None:
    source = tracking([1, 2])
    view = Lookahead(source, depth=5)

    assert list(view) == [1, 2]
    assert list(view) == [1, 2]
    assert source.opened == 1


def test_partial_pass_leaves_cursor_in_pool(tracking) -> None:
    source = tracking(range(6))
    view = Lookahead(source, depth=1)

    first_pass = iter(view)
    assert [next(first_pass) for _ in range(3)] == [0, 1, 2]
    first_pass.close()

    assert view.open_cursors == 1
    assert list(view) == [0, 1, 2, 3, 4, 5]
    assert source.opened == 2


def test_least_recently_advanced_cursor_is_evicted(tracking) -> None:
    source = tracking(range(10))
    view = Lookahead(source, depth=1, enumerators=1)

    ahead = iter(view)
    assert [next(ahead) for _ in range(4)] == [0, 1, 2, 3]

    behind = iter(view)
    assert next(behind) == 0  # buffered
    assert next(behind) == 1  # the cursor at 4 cannot serve 1 and is evicted

    assert source.opened == 2
    assert source.closed == 1
    assert view.open_cursors == 1
    # the surviving cursor is reused going forward
    assert next(ahead) == 4
    assert source.opened == 2


def test_pool_keeps_up_to_enumerators_cursors(tracking) -> None:
    source = tracking(range(10))
    view = Lookahead(source, depth=1, enumerators=2)

    ahead = iter(view)
    for _ in range(4):
        next(ahead)
    behind = iter(view)
    next(behind)
    next(behind)

    assert view.open_cursors == 2
    assert source.closed == 0


def test_non_idempotent_source_raises(tracking) -> None:
    source = tracking(range(5), shrink=5)
    view = Lookahead(source, depth=1, enumerators=1)

    ahead = iter(view)
    for _ in range(3):
        next(ahead)

    behind = iter(view)
    assert next(behind) == 0
    with pytest.raises(NonIdempotentSequenceError):
        next(behind)


def test_close_disposes_open_cursors(tracking) -> None:
    source = tracking(range(5))
    view = Lookahead(source, depth=1)

    partial = iter(view)
    next(partial)
    next(partial)
    partial.close()
    assert view.open_cursors == 1

    view.close()

    assert view.open_cursors == 0
    assert source.closed == 1


def test_context_manager_closes_cursors(tracking) -> None:
    source = tracking(range(5))

    with lookahead(source, depth=1) as view:
        assert view.element_at(3) == 3

    assert view.open_cursors == 0
    assert source.closed == source.opened


def test_negative_depth_is_rejected() -> None:
    with pytest.raises(ValueError):
        Lookahead([1, 2], depth=-1)


def test_replayable_reflects_source() -> None:
    assert Lookahead([1, 2]).replayable is True
    assert Lookahead(iter([1, 2])).replayable is False
