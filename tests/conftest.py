"""Pytest configuration and fixtures for Safety Checklist tests."""
import io
import itertools
import os
import tempfile

import pytest
from PIL import Image

from backend.app import create_app
from backend.models import create_backend_tables
from shared.schemas import Template
from safety_checklist.local_db import LocalDatabase
from safety_checklist.repositories.snapshot_repository import SnapshotStore


@pytest.fixture
def app(tmp_path, monkeypatch):
    """Create and configure a test app instance."""
    monkeypatch.setenv('LOG_DIR', str(tmp_path / 'logs'))
    db_fd, db_path = tempfile.mkstemp()

    test_config = {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_path}',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    }

    app = create_app(test_config)

    with app.app_context():
        create_backend_tables()

    yield app

    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


def register_and_login(client, username='inspector', email='inspector@example.com', password='hardhat-123'):
    client.post('/api/auth/register', json={'username': username, 'email': email, 'password': password})
    response = client.post('/api/auth/login', json={'username': username, 'password': password})
    return {'Authorization': f"Bearer {response.get_json()['token']}"}


@pytest.fixture
def auth_headers(client):
    """Bearer headers for a freshly registered user."""
    return register_and_login(client)


@pytest.fixture
def login(client):
    """Register another user and return their bearer headers."""
    return lambda **kwargs: register_and_login(client, **kwargs)


@pytest.fixture
def local_db(tmp_path):
    """Client-side key-value database in a temporary file."""
    return LocalDatabase(str(tmp_path / 'checklists.db'))


@pytest.fixture
def snapshot_store(local_db):
    return SnapshotStore(local_db)


class FakeClock:
    """Deterministic ISO timestamps, one millisecond apart."""

    def __init__(self, start=0):
        self._ticks = itertools.count(start)
        self.current = None

    def __call__(self):
        tick = next(self._ticks)
        self.current = f"2024-05-01T08:00:{tick // 1000:02d}.{tick % 1000:03d}Z"
        return self.current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def two_item_template():
    return Template.model_validate({
        'id': 'two-item',
        'title': 'Two Item Check',
        'sections': [{
            'title': 'Basics',
            'items': [
                {'id': 'a', 'question': 'Area inspected?', 'input_kind': 'select', 'options': ['Yes', 'No']},
                {'id': 'b', 'question': 'Inspector name', 'input_kind': 'short_text'},
            ],
        }],
    })


@pytest.fixture
def five_item_template():
    return Template.model_validate({
        'id': 'five-item',
        'title': 'Five Item Check',
        'sections': [
            {'title': 'One', 'items': [
                {'id': f'q{i}', 'question': f'Question {i}', 'input_kind': 'short_text'} for i in range(1, 4)
            ]},
            {'title': 'Two', 'items': [
                {'id': f'q{i}', 'question': f'Question {i}', 'input_kind': 'short_text'} for i in range(4, 6)
            ]},
        ],
    })


def make_image_bytes(fmt='PNG', size=(4, 4), color=(200, 40, 40)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_image_bytes('PNG')


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes('JPEG')


@pytest.fixture
def image_factory():
    return make_image_bytes
