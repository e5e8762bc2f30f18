from flask_sqlalchemy import SQLAlchemy
from shared.models import (
    Base, User, AuthToken, ChecklistResponseRecord, Blueprint, KeyValueEntry
)

db = SQLAlchemy(model_class=Base)

# The kv_store table belongs to the client's local database
BACKEND_TABLES = [
    User.__table__,
    AuthToken.__table__,
    ChecklistResponseRecord.__table__,
    Blueprint.__table__,
]


def create_backend_tables():
    db.metadata.create_all(db.engine, tables=BACKEND_TABLES)
