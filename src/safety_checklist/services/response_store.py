"""In-memory response store for one open checklist, persisted on every mutation."""
import logging

from sqlalchemy.exc import SQLAlchemyError

from shared.models import now_iso
from shared.schemas import Response
from shared.validation import parse_timestamp
from ..errors import AuthRequiredError, PersistenceWarning


class ResponseStore:
    """Mapping of item id -> Response for a single template.

    Responses are created lazily on first interaction. Every mutation builds a
    new Response, refreshes its timestamp and writes the whole store to the
    live key. Batch operations complete all of their work before touching the
    store, so a failure leaves the store unchanged.
    """

    def __init__(self, template_id, snapshot_store, media_service=None, blueprint_storage=None, clock=now_iso):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.template_id = template_id
        self.snapshot_store = snapshot_store
        self.media_service = media_service
        self.blueprint_storage = blueprint_storage
        self.clock = clock
        self._responses = {}

    @classmethod
    def open(cls, template_id, snapshot_store, **kwargs):
        """Create a store rehydrated from the live durable entry, if any."""
        store = cls(template_id, snapshot_store, **kwargs)
        live = snapshot_store.get_live(template_id)
        if live:
            store._responses = live
            store.logger.info(f"Rehydrated {len(live)} responses for {template_id}")
        return store

    def __len__(self):
        return len(self._responses)

    def __contains__(self, item_id):
        return item_id in self._responses

    def get(self, item_id):
        return self._responses.get(item_id)

    @property
    def responses(self):
        """Read-only view of the current responses."""
        return dict(self._responses)

    def snapshot(self):
        """Deep copy of every response."""
        return {item_id: r.model_copy(deep=True) for item_id, r in self._responses.items()}

    def replace_all(self, responses):
        """Replace the whole store. Does not persist."""
        self._responses = {item_id: r.model_copy(deep=True) for item_id, r in responses.items()}

    # Field mutations

    def set_value(self, item_id, value):
        return self._update(item_id, value=value)

    def set_notes(self, item_id, text):
        return self._update(item_id, notes=text)

    def set_deadline(self, item_id, iso_instant):
        return self._update(item_id, deadline=iso_instant)

    def toggle_flag(self, item_id):
        current = self._responses.get(item_id)
        flagged = current.flagged if current else False
        return self._update(item_id, flagged=not flagged)

    def add_images(self, item_id, files):
        """Encode a batch of image files and append them to the item.

        Raises:
            MediaEncodingError: If any file cannot be encoded; nothing is added.
        """
        data_uris = self.media_service.encode_images(files)
        return self._append_images(item_id, data_uris)

    def add_captured_image(self, item_id, data_uri):
        return self._append_images(item_id, [data_uri])

    def remove_image(self, item_id, index):
        """Remove an image by position. Out-of-range or unknown items are ignored."""
        current = self._responses.get(item_id)
        if current is None or not 0 <= index < len(current.images):
            self.logger.debug(f"Ignoring remove_image({item_id}, {index})")
            return current
        images = list(current.images)
        del images[index]
        return self._update(item_id, images=images)

    def add_blueprints(self, item_id, files, owner_id):
        """Upload blueprint files and attach all of them to the item at once.

        Raises:
            AuthRequiredError: If there is no owner.
            BlueprintUploadError: If any upload fails; nothing is attached.
        """
        if not owner_id:
            raise AuthRequiredError('Please log in to upload blueprints')
        uploaded = self.blueprint_storage.upload_batch(files, self.template_id, item_id, owner_id)
        current = self._responses.get(item_id)
        existing = list(current.blueprints) if current else []
        self.logger.info(f"Attached {len(uploaded)} blueprints to {item_id}")
        return self._update(item_id, blueprints=existing + list(uploaded))

    def remove_blueprint(self, blueprint_id):
        """Delete the remote blob, then drop the local record.

        Unknown ids are a no-op. A failed remote delete raises
        BlueprintUploadError and leaves the record in place.
        """
        for item_id, response in self._responses.items():
            for blueprint in response.blueprints:
                if blueprint.id == blueprint_id:
                    self.blueprint_storage.delete(blueprint.id, blueprint.file_name)
                    remaining = [b for b in response.blueprints if b.id != blueprint_id]
                    return self._update(item_id, blueprints=remaining)
        self.logger.debug(f"Blueprint {blueprint_id} not found, nothing to remove")
        return None

    # Internals

    def _append_images(self, item_id, data_uris):
        current = self._responses.get(item_id)
        existing = list(current.images) if current else []
        return self._update(item_id, images=existing + list(data_uris))

    def _next_timestamp(self, previous):
        current = self.clock()
        if previous and parse_timestamp(previous) > parse_timestamp(current):
            return previous
        return current

    def _update(self, item_id, **changes):
        previous = self._responses.get(item_id)
        data = previous.model_dump() if previous else {}
        data.update(changes)
        data['timestamp'] = self._next_timestamp(previous.timestamp if previous else None)
        response = Response.model_validate(data)
        self._responses[item_id] = response
        self._persist()
        return response

    def _persist(self):
        try:
            self.snapshot_store.put_live(self.template_id, self._responses)
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to persist responses for {self.template_id}: {e}")
            raise PersistenceWarning('Changes could not be saved on this device') from e
