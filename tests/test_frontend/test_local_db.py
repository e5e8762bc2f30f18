"""Tests for the client key-value database and snapshot repository."""
import json
import pytest
from shared.schemas import Response, Snapshot
from safety_checklist.repositories.snapshot_repository import SnapshotKeys


def test_local_database_initialization(local_db):
    assert local_db.db_path.endswith('checklists.db')
    assert local_db.engine is not None
    assert local_db.Session is not None


def test_get_set_overwrite(local_db):
    assert local_db.get('missing') is None
    local_db.set('k', 'one', template_id='t')
    local_db.set('k', 'two', template_id='t')
    assert local_db.get('k') == 'two'


def test_insert_refuses_existing_key(local_db):
    local_db.insert('h', 'first', template_id='t')
    with pytest.raises(KeyError):
        local_db.insert('h', 'second', template_id='t')
    assert local_db.get('h') == 'first'


def test_list_values_filters_by_template_and_kind(local_db):
    local_db.set('live-a', '{}', template_id='a', kind='live')
    local_db.insert('hist-a', '{}', template_id='a', kind='history')
    local_db.insert('hist-ab', '{}', template_id='ab', kind='history')
    assert local_db.list_values('a', 'history') == [('hist-a', '{}')]


def test_delete(local_db):
    local_db.set('k', 'v')
    assert local_db.delete('k') is True
    assert local_db.delete('k') is False


def test_snapshot_keys():
    assert SnapshotKeys.live('fall-protection') == 'checklist-fall-protection-responses'
    assert SnapshotKeys.history('fall-protection', '2024-05-01T08:00:00.000Z') == \
        'checklist-fall-protection-2024-05-01T08:00:00.000Z'


class TestSnapshotStore:
    def test_live_round_trip_is_deep_equal(self, snapshot_store, png_bytes):
        responses = {
            'fp_guardrails': Response(
                value='No',
                timestamp='2024-05-01T08:00:00.000Z',
                notes='East edge open',
                images=['data:image/png;base64,AAAA'],
                blueprints=[{'id': 'bp1', 'file_name': 'level2.pdf', 'file_size': 10, 'url': 'https://x/level2.pdf'}],
                deadline='2024-05-03T17:00:00.000Z',
                flagged=True,
            ),
            'fp_site_location': Response(value='', timestamp='2024-05-01T08:00:01.000Z'),
        }
        snapshot_store.put_live('fall-protection', responses)
        assert snapshot_store.get_live('fall-protection') == responses

    def test_live_absent(self, snapshot_store):
        assert snapshot_store.get_live('nothing-here') is None

    def test_unreadable_live_entry(self, snapshot_store, local_db):
        local_db.set(SnapshotKeys.live('t'), 'not json', template_id='t')
        assert snapshot_store.get_live('t') is None

    def test_history_newest_first(self, snapshot_store):
        for ts in ('2024-05-01T08:00:00.000Z', '2024-05-03T08:00:00.000Z', '2024-05-02T08:00:00.000Z'):
            snapshot_store.append_history(Snapshot(template_id='t', title='T', timestamp=ts))
        assert [s.timestamp for s in snapshot_store.list_history('t')] == [
            '2024-05-03T08:00:00.000Z', '2024-05-02T08:00:00.000Z', '2024-05-01T08:00:00.000Z'
        ]

    def test_history_skips_malformed_entries(self, snapshot_store, local_db):
        snapshot_store.append_history(Snapshot(template_id='t', timestamp='2024-05-01T08:00:00.000Z'))
        local_db.insert('checklist-t-garbage', '{"oops"', template_id='t', kind='history')
        local_db.insert('checklist-t-bad-ts', json.dumps({'template_id': 't', 'timestamp': 'yesterday'}),
                        template_id='t', kind='history')
        history = snapshot_store.list_history('t')
        assert len(history) == 1

    def test_history_mixes_naive_and_utc_timestamps(self, snapshot_store, local_db):
        snapshot_store.append_history(Snapshot(template_id='t', timestamp='2024-05-01T08:00:00.000Z'))
        local_db.insert('checklist-t-2024-05-02T08:00:00',
                        json.dumps({'template_id': 't', 'timestamp': '2024-05-02T08:00:00'}),
                        template_id='t', kind='history')
        history = snapshot_store.list_history('t')
        assert [s.timestamp for s in history] == ['2024-05-02T08:00:00', '2024-05-01T08:00:00.000Z']

    def test_history_not_shared_with_prefix_templates(self, snapshot_store):
        snapshot_store.append_history(Snapshot(template_id='scaffold', timestamp='2024-05-01T08:00:00.000Z'))
        snapshot_store.append_history(Snapshot(template_id='scaffold-inspection', timestamp='2024-05-01T08:00:00.000Z'))
        assert len(snapshot_store.list_history('scaffold')) == 1

    def test_history_entries_immutable(self, snapshot_store):
        snapshot = Snapshot(template_id='t', timestamp='2024-05-01T08:00:00.000Z')
        snapshot_store.append_history(snapshot)
        with pytest.raises(KeyError):
            snapshot_store.append_history(Snapshot(template_id='t', title='other', timestamp=snapshot.timestamp))
