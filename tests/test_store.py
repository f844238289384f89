from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from hifz import srs
from hifz.errors import NotFound, PersistenceFailure
from hifz.schemas import Goals
from hifz.service import RevisionScheduler
from hifz.srs import ReviewOutcome, database
from hifz.srs.scheduler import process_review

from conftest import DAY0, make_item


def test_get_unknown_item_raises_not_found(store):
    with pytest.raises(NotFound):
        store.get(7)


def test_upsert_then_get_round_trips_all_fields(store):
    item = make_item(
        3,
        last_reviewed_at=DAY0 - timedelta(days=2),
        interval_days=11,
        ease_factor=2.65,
        learning_step=4,
        consecutive_correct=5,
        lapse_count=1,
    )

    store.upsert(item)

    assert store.get(3) == item


def test_upsert_is_a_full_replace(store):
    store.upsert(make_item(1, learning_step=3, interval_days=3))
    store.upsert(make_item(1, learning_step=1, interval_days=1))
    store.upsert(make_item(1, learning_step=1, interval_days=1))

    assert len(store.get_all()) == 1
    assert store.get(1).learning_step == 1


def test_returned_items_are_copies(store):
    store.upsert(make_item(1))
    item = store.get(1)
    item.learning_step = 99

    assert store.get(1).learning_step == 1


def test_save_review_writes_item_and_event(store):
    store.upsert(make_item(5))
    updated, event = process_review(store.get(5), ReviewOutcome.EASY, DAY0)

    stored = store.save_review(updated, event)

    assert stored.event_id is not None
    assert stored.outcome == ReviewOutcome.EASY
    assert store.get(5).learning_step == 2
    assert [e.item_id for e in store.iter_events(5)] == [5]


def test_events_come_back_newest_first(store):
    store.upsert(make_item(1))
    store.upsert(make_item(2))
    for offset, item_id in [(0, 1), (2, 2), (1, 1)]:
        at = DAY0 + timedelta(days=offset)
        updated, event = process_review(store.get(item_id), ReviewOutcome.MEDIUM, at)
        store.save_review(updated, event)

    all_events = list(store.iter_events())
    assert [e.occurred_at for e in all_events] == [
        DAY0 + timedelta(days=2), DAY0 + timedelta(days=1), DAY0
    ]
    assert [e.occurred_at for e in store.iter_events(1)] == [DAY0 + timedelta(days=1), DAY0]


def test_timestamps_keep_their_instant_across_timezones(store):
    plus3 = timezone(timedelta(hours=3))
    due = datetime(2026, 3, 11, 1, 0, tzinfo=plus3)
    store.upsert(make_item(1, next_due_at=due))

    loaded = store.get(1).next_due_at

    assert loaded == due
    assert loaded.tzinfo is not None


def test_goals_default_and_update(store):
    assert store.get_goals() == Goals()

    store.save_goals(Goals(daily_revisions=5, weekly_revisions=30, memorize_per_month=1))

    assert store.get_goals().daily_revisions == 5
    assert store.get_goals().weekly_revisions == 30


# ---- SQL-specific ----

def test_failed_review_write_leaves_state_untouched(sql_store, monkeypatch):
    sql_store.upsert(make_item(4))
    updated, event = process_review(sql_store.get(4), ReviewOutcome.EASY, DAY0)

    def boom(self, *args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    with monkeypatch.context() as m:
        m.setattr(Session, "flush", boom)
        with pytest.raises(PersistenceFailure):
            sql_store.save_review(updated, event)

    assert sql_store.get(4).learning_step == 1
    assert list(sql_store.iter_events(4)) == []


def test_history_iterator_is_lazy(sql_store):
    sql_store.upsert(make_item(1))
    item = sql_store.get(1)
    for day in range(5):
        item, event = process_review(item, ReviewOutcome.MEDIUM, DAY0 + timedelta(days=day))
        sql_store.save_review(item, event)

    events = sql_store.iter_events(1)

    assert not isinstance(events, list)
    first = next(events)
    assert first.occurred_at == DAY0 + timedelta(days=4)
    events.close()


def test_init_db_is_idempotent(sql_engine):
    srs.init_db(sql_engine)
    srs.init_db(sql_engine)


def test_reset_db_clears_everything(sql_engine, sql_store):
    sql_store.upsert(make_item(1))

    srs.reset_db(sql_engine)

    assert sql_store.get_all() == []


def test_history_pages_keep_order_across_equal_timestamps(sql_store, monkeypatch):
    monkeypatch.setattr(database, "HISTORY_BATCH_SIZE", 2)
    sql_store.upsert(make_item(1))
    item = sql_store.get(1)
    for day in [0, 1, 1, 1, 2]:
        item, event = process_review(item, ReviewOutcome.MEDIUM, DAY0 + timedelta(days=day))
        sql_store.save_review(item, event)

    events = list(sql_store.iter_events(1))

    assert [e.occurred_at for e in events] == [
        DAY0 + timedelta(days=d) for d in [2, 1, 1, 1, 0]
    ]
    ids = [e.event_id for e in events]
    assert len(set(ids)) == 5
    assert ids[1:4] == sorted(ids[1:4], reverse=True)


def test_partly_read_history_does_not_block_writes(tmp_path, clock, monkeypatch):
    monkeypatch.setattr(database, "HISTORY_BATCH_SIZE", 3)
    engine = srs.get_engine(f"sqlite:///{tmp_path / 'revisions.db'}?timeout=1")
    srs.init_db(engine)
    scheduler = RevisionScheduler(srs.SqlRevisionStore(engine), clock=clock)
    scheduler.mark_memorized(1)
    for _ in range(8):
        clock.advance(days=1)
        scheduler.complete_review(1, ReviewOutcome.MEDIUM)

    history = scheduler.history_for(1)
    newest = next(history)
    clock.advance(days=1)
    scheduler.complete_review(1, ReviewOutcome.EASY)

    assert newest.outcome == ReviewOutcome.MEDIUM
    assert len(list(history)) == 7
    assert len(list(scheduler.history_for(1))) == 9
    engine.dispose()
