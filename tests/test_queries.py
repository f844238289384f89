from datetime import datetime, timedelta, timezone

import pytest

from hifz import srs
from hifz.srs.queries import due_today, due_within, next_due

from conftest import DAY0, make_item


def test_due_today_includes_overdue_and_today_sorted_by_id():
    items = [
        make_item(9, next_due_at=DAY0 - timedelta(days=3)),
        make_item(2, next_due_at=DAY0.replace(hour=18)),  # later today
        make_item(5, next_due_at=DAY0 + timedelta(days=1)),
        make_item(4, next_due_at=DAY0.replace(hour=0)),
    ]

    due = due_today(items, DAY0)

    assert [d.item_id for d in due] == [2, 4, 9]
    assert [d.overdue for d in due] == [False, False, True]


def test_due_today_skips_unmemorized_items():
    items = [
        srs.RevisionItem(item_id=1),
        make_item(2, next_due_at=DAY0 - timedelta(days=1)),
    ]

    assert [d.item_id for d in due_today(items, DAY0)] == [2]


def test_due_today_uses_as_of_timezone():
    # 23:00 UTC on the 10th is already the 11th in UTC+3
    plus3 = timezone(timedelta(hours=3))
    items = [make_item(1, next_due_at=datetime(2026, 3, 10, 23, 0, tzinfo=timezone.utc))]

    assert due_today(items, datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc))
    assert due_today(items, datetime(2026, 3, 10, 12, 0, tzinfo=plus3)) == []


def test_due_today_does_not_mutate_items():
    items = [make_item(1, next_due_at=DAY0)]
    snapshot = [srs.RevisionItem(**vars(i)) for i in items]

    due_today(items, DAY0)

    assert items == snapshot


def test_due_within_window_bounds_and_order():
    items = [
        make_item(1, next_due_at=DAY0),                              # not after as_of
        make_item(2, next_due_at=DAY0 + timedelta(days=7)),          # on the edge
        make_item(3, next_due_at=DAY0 + timedelta(days=7, seconds=1)),
        make_item(4, next_due_at=DAY0 + timedelta(hours=5)),
        make_item(5, next_due_at=DAY0 + timedelta(days=2)),
        make_item(6, next_due_at=DAY0 + timedelta(days=2)),
    ]

    upcoming = due_within(items, 7, DAY0)

    assert [d.item_id for d in upcoming] == [4, 5, 6, 2]


def test_due_within_rejects_negative_days():
    with pytest.raises(ValueError):
        due_within([], -1, DAY0)


def test_next_due_picks_earliest():
    items = [
        make_item(1, next_due_at=DAY0 + timedelta(days=3)),
        make_item(2, next_due_at=DAY0 + timedelta(days=1)),
        srs.RevisionItem(item_id=3),
    ]

    assert next_due(items).item_id == 2
    assert next_due([srs.RevisionItem(item_id=3)]) is None


def test_due_today_marks_items_reviewed_today():
    items = [
        make_item(1, next_due_at=DAY0.replace(hour=20), last_reviewed_at=DAY0.replace(hour=7)),
        make_item(2, next_due_at=DAY0, last_reviewed_at=DAY0 - timedelta(days=1)),
        make_item(3, next_due_at=DAY0),
    ]

    due = due_today(items, DAY0)

    assert [(d.item_id, d.completed) for d in due] == [(1, True), (2, False), (3, False)]
