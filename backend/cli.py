import click
import logging
from flask.cli import with_appcontext
from .models import db, create_backend_tables, BACKEND_TABLES, ChecklistResponseRecord, Blueprint

logger = logging.getLogger(__name__)


@click.command('init-db')
@click.option('--drop', is_flag=True, help='Drop existing checklist tables first.')
@with_appcontext
def init_db_command(drop):
    """Create the backend tables."""
    if drop:
        logger.warning("Dropping existing checklist tables")
        db.metadata.drop_all(db.engine, tables=BACKEND_TABLES)
    logger.info("Creating database tables and schema")
    create_backend_tables()
    logger.info("Database tables created successfully")
    click.echo('Initialized the database.')


@click.command('stats')
@with_appcontext
def stats_command():
    """Show how many checklist records and blueprints are stored."""
    records = db.session.query(ChecklistResponseRecord).count()
    blueprints = db.session.query(Blueprint).count()
    click.echo(f"Checklist responses: {records}")
    click.echo(f"Blueprints: {blueprints}")
