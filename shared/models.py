from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, JSON, Enum, text
from sqlalchemy.orm import relationship, declarative_base
from shared.enums import BlueprintStatus

Base = declarative_base()

# All timestamps are UTC. ISO-8601 strings written to the side-channel use the
# same clock so that snapshot ordering is comparable across processes.
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now():
    """Return current datetime in UTC (timezone-aware).

    Note: When stored in SQLite, timezone info is stripped (SQLite limitation).
    All stored datetimes should be treated as UTC, even though they're stored naive.
    """
    return datetime.now(timezone.utc)


def now_iso():
    """Return current UTC instant as an ISO-8601 string with millisecond precision."""
    return now().isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class User(Base):
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True, nullable=False)
    username = Column(String(80), unique=True, nullable=False, server_default="")
    email = Column(String(120), unique=True, nullable=False, server_default="")
    password_hash = Column(String(256), nullable=False, server_default="")
    created_at = Column(DateTime, default=now)
    updated_at = Column(DateTime, default=now, onupdate=now)
    tokens = relationship('AuthToken', backref='user', cascade="all, delete-orphan")


class AuthToken(Base):
    __tablename__ = 'auth_tokens'
    id = Column(Integer, primary_key=True, nullable=False)
    token = Column(String(128), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(DateTime, default=now)


class ChecklistResponseRecord(Base):
    """Owner-scoped durable copy of a submitted checklist."""
    __tablename__ = 'checklist_responses'
    id = Column(Integer, primary_key=True, nullable=False)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    template_id = Column(String(100), nullable=False, index=True, server_default="")
    title = Column(String(200), nullable=False, server_default="Untitled Checklist")
    responses = Column(JSON, nullable=False, default=dict)
    report = Column(Text, server_default="")
    created_at = Column(DateTime, default=now, index=True)
    updated_at = Column(DateTime, default=now, onupdate=now)

Index('idx_checklist_response_owner_template', ChecklistResponseRecord.user_id, ChecklistResponseRecord.template_id)


class Blueprint(Base):
    __tablename__ = 'blueprints'
    id = Column(String(100), primary_key=True, nullable=False)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    template_id = Column(String(100), nullable=False, server_default="")
    item_id = Column(String(100), nullable=False, server_default="")
    file_name = Column(String(255), nullable=False, server_default="")
    file_size = Column(Integer, server_default="0")
    url = Column(String(1000), server_default="")
    object_name = Column(String(500), server_default="")
    analysis_status = Column(Enum(BlueprintStatus), default=BlueprintStatus.PENDING, nullable=False, server_default=text("'pending'"))
    hash_value = Column(String(64), server_default="")
    uploaded_at = Column(DateTime, default=now, index=True)

Index('idx_blueprint_template_item', Blueprint.template_id, Blueprint.item_id)


class KeyValueEntry(Base):
    """Durable key-value side-channel row (local client database).

    Live entries have kind 'live'; history entries have kind 'history' and a
    creation timestamp. template_id is stored alongside the key so history can
    be listed without scanning key prefixes.
    """
    __tablename__ = 'kv_store'
    key = Column(String(300), primary_key=True, nullable=False)
    value = Column(Text, nullable=False, server_default="")
    template_id = Column(String(100), index=True, server_default="")
    kind = Column(String(20), index=True, server_default="live")
    created_at = Column(String(40), server_default="")
    updated_at = Column(DateTime, default=now, onupdate=now)

Index('idx_kv_template_kind', KeyValueEntry.template_id, KeyValueEntry.kind)
