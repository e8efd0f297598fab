"""Tests for the JSON file event store."""

import json
from datetime import datetime

import pytest

from memodays.adapters.json_store import JsonEventStore
from memodays.adapters.memory_store import InMemoryEventStore
from memodays.core.events import Event, EventCategory
from memodays.ports.event_store import StoreError


@pytest.fixture
def event():
    return Event.create("Launch", datetime(2025, 9, 1), EventCategory.WORK, notes="v1.0")


class TestJsonEventStore:
    def test_missing_file_is_empty(self, tmp_path):
        store = JsonEventStore(tmp_path / "events.json")
        assert store.fetch_all() == []

    def test_save_and_reload(self, tmp_path, event):
        path = tmp_path / "data" / "events.json"
        store = JsonEventStore(path)
        store.insert(event)
        store.save()

        assert path.exists()
        reloaded = JsonEventStore(path).fetch_all()
        assert reloaded == [event]

    def test_file_format(self, tmp_path, event):
        path = tmp_path / "events.json"
        store = JsonEventStore(path)
        store.insert(event)
        store.save()

        data = json.loads(path.read_text())
        assert data["events"][0]["title"] == "Launch"
        assert data["events"][0]["category"] == "work"
        assert data["events"][0]["start_date"] == "2025-09-01T00:00:00"

    def test_delete(self, tmp_path, event):
        path = tmp_path / "events.json"
        store = JsonEventStore(path)
        store.insert(event)
        store.save()
        store.delete(event)
        store.save()
        assert JsonEventStore(path).fetch_all() == []

    def test_get(self, tmp_path, event):
        store = JsonEventStore(tmp_path / "events.json")
        store.insert(event)
        assert store.get(event.id) is event
        assert store.get("nope") is None

    def test_keeps_event_objects_between_reads(self, tmp_path, event):
        store = JsonEventStore(tmp_path / "events.json")
        store.insert(event)
        assert store.fetch_all()[0] is store.fetch_all()[0]

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "events.json"
        path.write_text("{not json")
        with pytest.raises(StoreError):
            JsonEventStore(path).fetch_all()

    def test_unwritable_location_raises(self, tmp_path, event):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = JsonEventStore(blocker / "events.json")
        store.insert(event)
        with pytest.raises(StoreError):
            store.save()

    def test_expands_user_path(self):
        store = JsonEventStore("~/events.json")
        assert "~" not in str(store.path)


class TestInMemoryEventStore:
    def test_insert_fetch_delete(self, event):
        store = InMemoryEventStore()
        store.insert(event)
        assert store.fetch_all() == [event]
        assert store.get(event.id) is event
        store.delete(event)
        store.save()
        assert store.fetch_all() == []

    def test_delete_unknown_is_noop(self, event):
        InMemoryEventStore().delete(event)


class TestChangesFromOtherProcesses:
    @pytest.fixture
    def path(self, tmp_path):
        return tmp_path / "events.json"

    def test_sees_events_saved_by_another_store(self, path, event):
        watcher = JsonEventStore(path)
        assert watcher.fetch_all() == []

        writer = JsonEventStore(path)
        writer.insert(event)
        writer.save()

        assert watcher.fetch_all() == [event]

    def test_unchanged_events_keep_their_objects(self, path, event):
        first = JsonEventStore(path)
        first.insert(event)
        first.save()

        watcher = JsonEventStore(path)
        kept = watcher.get(event.id)

        writer = JsonEventStore(path)
        writer.insert(Event.create("A much longer second title", datetime(2025, 10, 1)))
        writer.save()

        assert len(watcher.fetch_all()) == 2
        assert watcher.get(event.id) is kept

    def test_sees_edits_and_deletes(self, path, event):
        first = JsonEventStore(path)
        first.insert(event)
        first.save()
        watcher = JsonEventStore(path)
        assert watcher.get(event.id).title == "Launch"

        writer = JsonEventStore(path)
        writer.get(event.id).update(title="Launch party on the roof")
        writer.save()
        assert watcher.get(event.id).title == "Launch party on the roof"

        writer.delete(writer.get(event.id))
        writer.save()
        assert watcher.fetch_all() == []

    def test_unsaved_changes_are_not_replaced(self, path, event):
        mine = JsonEventStore(path)
        mine.fetch_all()
        mine.insert(event)

        writer = JsonEventStore(path)
        writer.insert(Event.create("Elsewhere", datetime(2025, 10, 1)))
        writer.save()

        assert mine.fetch_all() == [event]


class TestEncoding:
    def test_writes_utf8(self, tmp_path):
        path = tmp_path / "events.json"
        store = JsonEventStore(path)
        store.insert(Event.create("生日 Émile", datetime(1990, 5, 4), EventCategory.BIRTHDAY))
        store.save()

        assert "生日 Émile" in path.read_bytes().decode("utf-8")
        assert JsonEventStore(path).fetch_all()[0].title == "生日 Émile"

    def test_unencodable_title_raises_and_leaves_no_temp_file(self, tmp_path):
        path = tmp_path / "events.json"
        store = JsonEventStore(path)
        store.insert(Event.create("bad \ud800 surrogate", datetime(2025, 1, 1)))

        with pytest.raises(StoreError):
            store.save()
        assert list(tmp_path.iterdir()) == []
