"""Checklist view handlers for ChecklistApp."""
import logging

from shared.enums import AnalysisMode, NotificationLevel
from ..catalog import get_template_or_unknown
from ..errors import ChecklistError, PersistenceWarning
from ..services.progress import calculate_progress, section_progress
from ..services.report_formatter import format_for_email, format_for_sharing, format_printable_checklist
from ..services.response_store import ResponseStore


class ChecklistHandler:
    """Handles user actions on one open checklist.

    Every action that can fail reports through the app's event bus and
    returns None instead of raising. Actions after close are dropped.
    """

    def __init__(self, app):
        self.app = app
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def state(self):
        return self.app.state

    @property
    def store(self):
        return self.state.response_store

    @property
    def template(self):
        return self.state.current_template

    def open(self, template_id):
        """Open a template, rehydrating live responses and loading history."""
        template = get_template_or_unknown(template_id)
        store = ResponseStore.open(
            template.id,
            self.app.snapshot_store,
            media_service=self.app.media_service,
            blueprint_storage=self.app.blueprint_storage,
        )
        self.state.current_template = template
        self.state.response_store = store
        self.state.closed = False
        self.state.history = self.app.history.list(template.id)
        self.logger.info(f"Opened checklist {template.id} with {len(store)} responses and {len(self.state.history)} snapshots")
        return store

    def close(self):
        if self.template is not None:
            self.logger.info(f"Closed checklist {self.template.id}")
        self.state.reset_checklist_state()

    def progress(self):
        return calculate_progress(self.template, self.store.responses)

    def section_progress(self):
        return section_progress(self.template, self.store.responses)

    def set_analysis_mode(self, mode):
        self.state.analysis_mode = AnalysisMode(mode)

    # Response mutations

    def set_value(self, item_id, value):
        return self._run(lambda: self.store.set_value(item_id, value))

    def set_notes(self, item_id, text):
        return self._run(lambda: self.store.set_notes(item_id, text))

    def set_deadline(self, item_id, iso_instant):
        return self._run(lambda: self.store.set_deadline(item_id, iso_instant))

    def toggle_flag(self, item_id):
        return self._run(lambda: self.store.toggle_flag(item_id))

    def add_images(self, item_id, files):
        files = list(files)
        return self._run(
            lambda: self.store.add_images(item_id, files),
            success=f"Successfully uploaded {len(files)} image(s)",
        )

    def capture_image(self, item_id):
        def capture():
            data_uri = self.app.media_service.capture_image()
            return self.store.add_captured_image(item_id, data_uri)
        return self._run(capture, success='Photo captured')

    def remove_image(self, item_id, index):
        return self._run(lambda: self.store.remove_image(item_id, index))

    def add_blueprints(self, item_id, files):
        files = list(files)

        def upload():
            user = self.app.auth_service.get_current_user()
            return self.store.add_blueprints(item_id, files, user['id'] if user else None)
        return self._run(upload, success=f"Successfully uploaded {len(files)} blueprint(s)")

    def remove_blueprint(self, blueprint_id):
        return self._run(lambda: self.store.remove_blueprint(blueprint_id))

    # History

    def save(self):
        def save_snapshot():
            snapshot = self.app.history.save(self.template, self.store)
            self.state.history.insert(0, snapshot)
            return snapshot
        return self._run(save_snapshot, success='Checklist saved successfully')

    def restore(self, snapshot):
        return self._run(
            lambda: self.app.history.restore(snapshot, self.store),
            success='Loaded previous responses',
        )

    # Submission and output

    def submit(self):
        if self.state.closed:
            self.logger.warning("Submit ignored: checklist view is closed")
            return None
        template = self.template
        result = self.app.pipeline.submit(template, self.store.responses, self.state.analysis_mode)
        if self.state.closed or self.template is not template:
            self.logger.info(f"Dropping submission result for {template.id}: view closed")
            return None
        self.state.last_result = result
        return result

    def current_report(self):
        result = self.state.last_result
        return result.report if result and result.succeeded else None

    def share(self):
        report = self.current_report()
        if report is None:
            self.app.events.notify('Submit the checklist before sharing', NotificationLevel.WARNING)
            return None
        text = format_for_sharing(report)
        outcome = self._run(lambda: self.app.media_service.share_report(self.template.title, text))
        if outcome == 'copied':
            self.app.events.notify('Report copied to clipboard', NotificationLevel.SUCCESS)
        return outcome

    def email_report(self):
        report = self.current_report()
        if report is None:
            return None
        return format_for_email(report, self.template.title)

    def print_view(self):
        return format_printable_checklist(self.template, self.store.responses)

    def _run(self, action, success=None):
        """Run an action, publishing exactly one notification if it fails."""
        if self.state.closed:
            self.logger.warning("Action ignored: checklist view is closed")
            return None
        try:
            outcome = action()
        except PersistenceWarning as w:
            self.app.events.notify(str(w), NotificationLevel.WARNING)
            return None
        except ChecklistError as e:
            self.logger.error(f"Checklist action failed: {e}")
            self.app.events.notify(str(e), NotificationLevel.ERROR)
            return None
        if success:
            self.app.events.notify(success, NotificationLevel.SUCCESS)
        return outcome
