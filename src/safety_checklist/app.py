"""Safety Checklist client - composition root and command line entry point."""
import logging

import click

from .capabilities import MediaCapability
from .catalog import get_template, list_summaries
from .config_manager import ConfigManager
from .events import EventBus
from .handlers.checklist_handler import ChecklistHandler
from .local_db import LocalDatabase
from .logging_config import setup_logging
from .repositories.snapshot_repository import SnapshotStore
from .services.analysis_service import MultiModalAnalysis, SafetyCompanionAPI, TextAnalysisClient
from .services.api_service import APIService
from .services.auth_service import AuthService
from .services.blueprint_storage import BlueprintStorage
from .services.checklist_service import ChecklistService
from .services.history import HistoryIndex
from .services.media_service import MediaService
from .services.progress import calculate_progress
from .services.report_formatter import format_printable_checklist
from .services.submission import SubmissionPipeline
from .state import SessionState


class ChecklistApp:
    """Wires configuration, storage and collaborator clients together."""

    def __init__(self, config=None, capabilities=None, events=None, db=None, auth_service=None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config or ConfigManager()
        self.logger.info(f"Configuration loaded: API URL={self.config.api_base_url}")

        self.events = events or EventBus()
        self.state = SessionState()

        self.db = db or LocalDatabase(self.config.local_db_path or None)
        self.snapshot_store = SnapshotStore(self.db)

        self.auth_service = auth_service or AuthService(self.config.api_base_url, timeout=self.config.api_timeout)
        self.api_service = APIService.from_config(self.config, auth_service=self.auth_service)

        self.media_service = MediaService(
            capabilities or MediaCapability(),
            max_image_bytes=self.config.max_image_bytes,
            max_workers=self.config.upload_workers,
        )
        self.blueprint_storage = BlueprintStorage(
            self.api_service,
            max_bytes=self.config.max_blueprint_bytes,
            max_workers=self.config.upload_workers,
        )
        self.checklist_service = ChecklistService(self.api_service)
        self.history = HistoryIndex(self.snapshot_store, self.auth_service)

        self.text_client = TextAnalysisClient(self.config)
        self.pipeline = SubmissionPipeline(
            self.text_client,
            SafetyCompanionAPI(self.config, self.text_client),
            MultiModalAnalysis(self.text_client),
            self.checklist_service,
            self.events,
        )
        self.checklist_handler = ChecklistHandler(self)
        self.logger.info("ChecklistApp initialized")


@click.group()
@click.option('--log-level', default=None, help='Override LOG_LEVEL (DEBUG, INFO, WARNING).')
def cli(log_level):
    """Construction site safety checklists."""
    setup_logging(log_level)


@cli.command('templates')
def templates_command():
    """List the checklist templates in the catalog."""
    for summary in list_summaries():
        click.echo(f"{summary.id:24} {summary.title} ({summary.item_count} items)")


@cli.command('print')
@click.argument('template_id')
def print_command(template_id):
    """Print a checklist with its locally saved answers."""
    template = get_template(template_id)
    if template is None:
        raise click.ClickException(f"Unknown template: {template_id}")
    app = ChecklistApp()
    store = app.checklist_handler.open(template_id)
    click.echo(format_printable_checklist(template, store.responses))
    click.echo(f"Progress: {calculate_progress(template, store.responses)}%")


@cli.command('history')
@click.argument('template_id')
def history_command(template_id):
    """List saved snapshots for a template, newest first."""
    app = ChecklistApp()
    snapshots = app.history.list(template_id)
    if not snapshots:
        click.echo('No saved checklists.')
    for snapshot in snapshots:
        click.echo(f"{snapshot.timestamp}  {snapshot.title}  ({len(snapshot.responses)} responses)")


def main():
    cli()
