"""Snapshot storage over the durable key-value side-channel."""
import json
import logging

from pydantic import ValidationError

from shared.schemas import Response, Snapshot
from shared.validation import parse_timestamp

LIVE_KIND = 'live'
HISTORY_KIND = 'history'


class SnapshotKeys:
    """Builds the side-channel keys for one template."""

    @staticmethod
    def live(template_id):
        return f"checklist-{template_id}-responses"

    @staticmethod
    def history(template_id, timestamp):
        return f"checklist-{template_id}-{timestamp}"


def serialize_responses(responses):
    return {item_id: response.model_dump(mode='json') for item_id, response in responses.items()}


def deserialize_responses(raw):
    if not isinstance(raw, dict):
        raise ValueError("responses must be an object")
    return {item_id: Response.model_validate(data) for item_id, data in raw.items()}


class SnapshotStore:
    """Live and history snapshots for checklist response stores.

    Args:
        kv: Key-value side-channel exposing get/set/insert/list_values
            (LocalDatabase in production).
    """

    def __init__(self, kv):
        self.kv = kv
        self.logger = logging.getLogger(self.__class__.__name__)

    def get_live(self, template_id):
        """Return the live response mapping, or None when absent or unreadable."""
        raw = self.kv.get(SnapshotKeys.live(template_id))
        if raw is None:
            return None
        try:
            return deserialize_responses(json.loads(raw))
        except (ValueError, ValidationError) as e:
            self.logger.warning(f"Discarding unreadable live responses for {template_id}: {e}")
            return None

    def put_live(self, template_id, responses):
        """Overwrite the live entry with the full response mapping."""
        self.kv.set(
            SnapshotKeys.live(template_id),
            json.dumps(serialize_responses(responses)),
            template_id=template_id,
            kind=LIVE_KIND,
        )

    def append_history(self, snapshot):
        """Write a new immutable history entry and return its key.

        Raises:
            KeyError: If an entry with the same timestamp already exists.
        """
        key = SnapshotKeys.history(snapshot.template_id, snapshot.timestamp)
        self.kv.insert(
            key,
            snapshot.model_dump_json(),
            template_id=snapshot.template_id,
            kind=HISTORY_KIND,
            created_at=snapshot.timestamp,
        )
        self.logger.info(f"Appended history snapshot {key}")
        return key

    def list_history(self, template_id):
        """All readable history snapshots for a template, newest first.

        Malformed entries are skipped.
        """
        snapshots = []
        for key, raw in self.kv.list_values(template_id, HISTORY_KIND):
            try:
                snapshot = Snapshot.model_validate_json(raw)
                sort_key = parse_timestamp(snapshot.timestamp)
            except (ValueError, ValidationError) as e:
                self.logger.debug(f"Skipping malformed history entry {key}: {e}")
                continue
            snapshots.append((sort_key, snapshot))
        snapshots.sort(key=lambda pair: pair[0], reverse=True)
        return [snapshot for _, snapshot in snapshots]
