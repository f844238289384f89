from datetime import datetime, timedelta, timezone

import pytest

from hifz import srs
from hifz.notifications import ReminderQueue
from hifz.service import RevisionScheduler

DAY0 = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock so tests control "now"."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(DAY0)


@pytest.fixture
def memory_store():
    return srs.InMemoryRevisionStore()


@pytest.fixture
def sql_engine():
    engine = srs.get_engine("sqlite:///:memory:")
    srs.init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sql_engine):
    return srs.SqlRevisionStore(sql_engine)


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Runs a test against both store implementations."""
    if request.param == "memory":
        return srs.InMemoryRevisionStore()
    engine = srs.get_engine("sqlite:///:memory:")
    srs.init_db(engine)
    request.addfinalizer(engine.dispose)
    return srs.SqlRevisionStore(engine)


@pytest.fixture
def reminders():
    return ReminderQueue()


@pytest.fixture
def scheduler(store, clock, reminders):
    return RevisionScheduler(store, clock=clock, reminders=reminders)


def make_item(item_id=1, **overrides) -> srs.RevisionItem:
    """A memorized item at learning step 1, due tomorrow, with overrides."""
    fields = dict(
        item_id=item_id,
        memorized=True,
        last_reviewed_at=None,
        next_due_at=DAY0 + timedelta(days=1),
        interval_days=1,
        ease_factor=2.5,
        learning_step=1,
        consecutive_correct=0,
        lapse_count=0,
        memorized_at=DAY0,
    )
    fields.update(overrides)
    return srs.RevisionItem(**fields)
