"""Tests for saved snapshot history."""
import pytest
from unittest.mock import Mock
from safety_checklist.errors import AuthRequiredError, PersistenceWarning
from safety_checklist.services.history import HistoryIndex
from safety_checklist.services.response_store import ResponseStore


@pytest.fixture
def auth_service():
    auth = Mock()
    auth.get_current_user.return_value = {'id': 1, 'email': 'inspector@example.com'}
    return auth


@pytest.fixture
def history(snapshot_store, auth_service, clock):
    return HistoryIndex(snapshot_store, auth_service, clock=clock)


@pytest.fixture
def store(snapshot_store, two_item_template, clock):
    return ResponseStore(two_item_template.id, snapshot_store, clock=clock)


def test_save_appends_snapshot_and_refreshes_live(history, store, two_item_template, snapshot_store):
    store.set_value('a', 'Yes')
    snapshot = history.save(two_item_template, store)
    assert snapshot.title == 'Two Item Check'
    assert snapshot.responses == store.responses
    assert history.list(two_item_template.id) == [snapshot]
    assert snapshot_store.get_live(two_item_template.id) == store.responses


def test_save_requires_login(history, store, two_item_template, auth_service):
    auth_service.get_current_user.return_value = None
    with pytest.raises(AuthRequiredError):
        history.save(two_item_template, store)
    assert history.list(two_item_template.id) == []


def test_list_newest_first(history, store, two_item_template):
    store.set_value('a', 'Yes')
    older = history.save(two_item_template, store)
    store.set_value('b', 'Dana')
    newer = history.save(two_item_template, store)
    assert [s.timestamp for s in history.list(two_item_template.id)] == [newer.timestamp, older.timestamp]


def test_restore_replaces_store_without_writing(history, store, two_item_template, snapshot_store):
    store.set_value('a', 'Yes')
    saved = history.save(two_item_template, store)
    store.set_value('a', 'No')
    store.set_value('b', 'Dana')
    live_before = snapshot_store.get_live(two_item_template.id)
    history_before = history.list(two_item_template.id)

    history.restore(saved, store)

    assert store.responses == saved.responses
    assert snapshot_store.get_live(two_item_template.id) == live_before
    assert history.list(two_item_template.id) == history_before


def test_duplicate_timestamp_is_persistence_warning(snapshot_store, auth_service, store, two_item_template):
    history = HistoryIndex(snapshot_store, auth_service, clock=lambda: '2024-05-01T08:00:00.000Z')
    history.save(two_item_template, store)
    with pytest.raises(PersistenceWarning):
        history.save(two_item_template, store)
