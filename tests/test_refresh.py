"""Tests for midnight and periodic refresh."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from memodays.adapters.json_store import JsonEventStore
from memodays.adapters.memory_store import InMemoryEventStore
from memodays.core.events import Event, EventCategory
from memodays.ports.event_store import StoreError
from memodays.refresh import MIDNIGHT_JOB_ID, PERIODIC_JOB_ID, RefreshCoordinator


class FixedClock:
    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current


# Fixtures
@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 1, 15, 21, 30))


@pytest.fixture
def events():
    return [
        Event.create("Deadline", datetime(2025, 1, 20), EventCategory.WORK),
        Event.create("Dad", datetime(1955, 1, 16), EventCategory.BIRTHDAY, now=datetime(2025, 1, 15)),
    ]


@pytest.fixture
def store(events):
    return InMemoryEventStore(events)


@pytest.fixture
def scheduler():
    return MagicMock()


@pytest.fixture
def coordinator(store, scheduler, clock):
    return RefreshCoordinator(store, scheduler, clock=clock, interval_seconds=60)


def _job_call(scheduler, job_id):
    calls = [c for c in scheduler.add_job.call_args_list if c.kwargs.get("id") == job_id]
    assert calls, f"no add_job call for {job_id}"
    return calls[-1]


class TestStart:
    def test_schedules_midnight_and_periodic_jobs(self, coordinator, scheduler):
        coordinator.start()

        midnight = _job_call(scheduler, MIDNIGHT_JOB_ID)
        trigger = midnight.args[1]
        assert isinstance(trigger, DateTrigger)
        assert trigger.run_date.replace(tzinfo=None) == datetime(2025, 1, 16)
        assert midnight.kwargs["replace_existing"] is True

        periodic = _job_call(scheduler, PERIODIC_JOB_ID)
        assert isinstance(periodic.args[1], IntervalTrigger)
        assert periodic.args[1].interval.total_seconds() == 60
        assert coordinator.running is True

    def test_stop_removes_jobs(self, coordinator, scheduler):
        coordinator.start()
        scheduler.get_job.return_value = object()
        coordinator.stop()
        removed = {c.args[0] for c in scheduler.remove_job.call_args_list}
        assert removed == {MIDNIGHT_JOB_ID, PERIODIC_JOB_ID}
        assert coordinator.running is False

    def test_stop_skips_missing_jobs(self, coordinator, scheduler):
        scheduler.get_job.return_value = None
        coordinator.stop()
        scheduler.remove_job.assert_not_called()


class TestMidnight:
    def test_invalidates_every_event(self, coordinator, events, clock):
        now = datetime(2025, 1, 15, 21, 30)
        assert [e.days_remaining(now) for e in events] == [5, 1]

        clock.current = datetime(2025, 1, 16, 0, 0, 1)
        coordinator._on_midnight()

        after = datetime(2025, 1, 16, 0, 0, 1)
        assert [e.days_remaining(after) for e in events] == [4, 0]

    def test_reschedules_for_following_midnight(self, coordinator, scheduler, clock):
        coordinator.start()
        clock.current = datetime(2025, 1, 16, 0, 0, 1)
        coordinator._on_midnight()

        trigger = _job_call(scheduler, MIDNIGHT_JOB_ID).args[1]
        assert trigger.run_date.replace(tzinfo=None) == datetime(2025, 1, 17)

    def test_reschedules_even_if_callback_fails(self, store, scheduler, clock):
        coordinator = RefreshCoordinator(
            store, scheduler, clock=clock, on_refresh=MagicMock(side_effect=RuntimeError("render"))
        )
        with pytest.raises(RuntimeError):
            coordinator._on_midnight()
        _job_call(scheduler, MIDNIGHT_JOB_ID)


class TestInvalidateAll:
    def test_tick_resets_caches(self, coordinator, events):
        events[0].days_remaining(datetime(2025, 1, 15))
        coordinator._on_tick()
        assert events[0].days_remaining(datetime(2025, 1, 19)) == 1

    def test_calls_on_refresh(self, store, scheduler, clock):
        on_refresh = MagicMock()
        coordinator = RefreshCoordinator(store, scheduler, clock=clock, on_refresh=on_refresh)
        assert coordinator.invalidate_all() == 2
        on_refresh.assert_called_once_with()

    def test_store_failure_is_logged(self, scheduler, clock, caplog):
        store = MagicMock()
        store.fetch_all.side_effect = StoreError("disk gone")
        on_refresh = MagicMock()
        coordinator = RefreshCoordinator(store, scheduler, clock=clock, on_refresh=on_refresh)

        assert coordinator.invalidate_all() == 0
        on_refresh.assert_not_called()
        assert "disk gone" in caplog.text

    def test_force_uses_force_refresh(self, scheduler, clock):
        event = MagicMock()
        store = MagicMock()
        store.fetch_all.return_value = [event]
        coordinator = RefreshCoordinator(store, scheduler, clock=clock)
        coordinator.invalidate_all(force=True)
        event.force_refresh.assert_called_once_with()
        event.reset_cache.assert_not_called()


class TestWithRealScheduler:
    def test_restart_replaces_pending_jobs(self, store):
        scheduler = BackgroundScheduler()
        scheduler.start(paused=True)
        try:
            coordinator = RefreshCoordinator(store, scheduler)
            coordinator.start()
            coordinator.start()
            assert sorted(job.id for job in scheduler.get_jobs()) == [MIDNIGHT_JOB_ID, PERIODIC_JOB_ID]

            coordinator.stop()
            assert scheduler.get_jobs() == []
        finally:
            scheduler.shutdown(wait=False)


class TestWithJsonStore:
    def test_tick_picks_up_events_saved_elsewhere(self, tmp_path, scheduler, clock):
        path = tmp_path / "events.json"
        watcher = JsonEventStore(path)
        seen = []
        coordinator = RefreshCoordinator(
            watcher, scheduler, clock=clock, on_refresh=lambda: seen.append(len(watcher.fetch_all()))
        )
        coordinator._on_tick()

        writer = JsonEventStore(path)
        writer.insert(Event.create("Added from another terminal", datetime(2025, 2, 1)))
        writer.save()

        coordinator._on_tick()
        assert seen == [0, 1]
