"""Saved checklist snapshots: list, restore and explicit save."""
import logging

from sqlalchemy.exc import SQLAlchemyError

from shared.models import now_iso
from shared.schemas import Snapshot
from ..errors import AuthRequiredError, PersistenceWarning


class HistoryIndex:
    """Point-in-time snapshots of a template's response store, newest first."""

    def __init__(self, snapshot_store, auth_service, clock=now_iso):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.snapshot_store = snapshot_store
        self.auth_service = auth_service
        self.clock = clock

    def list(self, template_id):
        return self.snapshot_store.list_history(template_id)

    def restore(self, snapshot, response_store):
        """Replace the live store contents with a snapshot. Nothing is written."""
        response_store.replace_all(snapshot.responses)
        self.logger.info(f"Restored snapshot {snapshot.timestamp} for {snapshot.template_id}")
        return response_store

    def save(self, template, response_store):
        """Write a new history snapshot and refresh the live key.

        Raises:
            AuthRequiredError: If no user is logged in.
            PersistenceWarning: If the snapshot could not be written.
        """
        user = self.auth_service.get_current_user()
        if not user:
            raise AuthRequiredError('Please log in to save checklists')

        snapshot = Snapshot(
            template_id=template.id,
            title=template.title,
            responses=response_store.snapshot(),
            timestamp=self.clock(),
        )
        try:
            self.snapshot_store.append_history(snapshot)
            self.snapshot_store.put_live(template.id, snapshot.responses)
        except KeyError as e:
            raise PersistenceWarning('A snapshot was already saved at this moment') from e
        except SQLAlchemyError as e:
            self.logger.error(f"Failed to save snapshot for {template.id}: {e}")
            raise PersistenceWarning('Failed to save checklist') from e
        return snapshot
