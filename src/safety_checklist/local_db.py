import logging
from pathlib import Path

from appdirs import user_data_dir
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from shared.models import Base, KeyValueEntry


def default_db_path():
    data_dir = Path(user_data_dir("safety_checklist", "safety_checklist"))
    data_dir.mkdir(parents=True, exist_ok=True)
    return str(data_dir / 'checklists.db')


class LocalDatabase:
    """Durable key-value side-channel backed by a local SQLite file.

    Only the kv_store table is created here; the other shared tables belong
    to the backend.
    """

    def __init__(self, db_path=None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.db_path = db_path or default_db_path()
        self.logger.info(f"Initializing LocalDatabase with path: {self.db_path}")

        self.engine = create_engine(f'sqlite:///{self.db_path}')
        Base.metadata.create_all(self.engine, tables=[KeyValueEntry.__table__])
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        self.logger.info("Local key-value store ready")

    def get_session(self):
        return self.Session()

    def get(self, key):
        """Return the stored string for key, or None."""
        session = self.get_session()
        try:
            entry = session.get(KeyValueEntry, key)
            return entry.value if entry else None
        finally:
            session.close()

    def set(self, key, value, template_id='', kind='live', created_at=''):
        """Insert or overwrite a key (last write wins)."""
        session = self.get_session()
        try:
            entry = session.get(KeyValueEntry, key)
            if entry is None:
                entry = KeyValueEntry(key=key)
                session.add(entry)
            entry.value = value
            entry.template_id = template_id
            entry.kind = kind
            entry.created_at = created_at
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def insert(self, key, value, template_id='', kind='history', created_at=''):
        """Insert a key that must not already exist.

        Raises:
            KeyError: If the key is already present.
        """
        session = self.get_session()
        try:
            if session.get(KeyValueEntry, key) is not None:
                raise KeyError(key)
            session.add(KeyValueEntry(
                key=key, value=value, template_id=template_id,
                kind=kind, created_at=created_at,
            ))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def list_values(self, template_id, kind):
        """Return (key, value) pairs for one template and entry kind."""
        session = self.get_session()
        try:
            rows = (
                session.query(KeyValueEntry.key, KeyValueEntry.value)
                .filter(KeyValueEntry.template_id == template_id, KeyValueEntry.kind == kind)
                .all()
            )
            return [(row.key, row.value) for row in rows]
        finally:
            session.close()

    def delete(self, key):
        session = self.get_session()
        try:
            entry = session.get(KeyValueEntry, key)
            if entry:
                session.delete(entry)
                session.commit()
                return True
            return False
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
