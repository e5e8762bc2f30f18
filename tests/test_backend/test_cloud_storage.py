"""Tests for cloud storage service."""

import io
import os
import pytest
from unittest.mock import Mock, patch
from libcloud.common.types import LibcloudError
from libcloud.storage.types import ContainerDoesNotExistError, ObjectDoesNotExistError
from backend.services.cloud_storage import CloudStorageService


@pytest.fixture
def mock_env():
    """Set up mock environment variables."""
    env_vars = {
        'CLOUD_STORAGE_PROVIDER': 's3',
        'CLOUD_STORAGE_ACCESS_KEY': 'test_key',
        'CLOUD_STORAGE_SECRET_KEY': 'test_secret',
        'CLOUD_STORAGE_BUCKET': 'test-bucket',
        'CLOUD_STORAGE_REGION': 'us-east-1',
    }
    with patch.dict(os.environ, env_vars):
        yield env_vars


@pytest.fixture
def mock_driver():
    """Create a mock libcloud driver."""
    driver = Mock()
    container = Mock()
    container.name = 'test-bucket'
    driver.get_container.return_value = container

    obj = Mock()
    obj.name = 'blueprints/1/scaffold/bp-plan.pdf'
    obj.get_cdn_url.return_value = 'https://cdn.example.com/plan.pdf'
    driver.upload_object_via_stream.return_value = obj
    driver.get_object.return_value = obj
    return driver


@patch('backend.services.cloud_storage.get_driver')
def test_cloud_storage_initialization(mock_get_driver, mock_env, mock_driver):
    """Test cloud storage service initialization."""
    mock_get_driver.return_value.return_value = mock_driver

    service = CloudStorageService()

    assert service.provider_name == 's3'
    assert service.bucket_name == 'test-bucket'
    mock_get_driver.return_value.assert_called_once_with(key='test_key', secret='test_secret', region='us-east-1')
    assert service.driver is mock_driver


def test_incomplete_configuration():
    with patch.dict(os.environ, {'CLOUD_STORAGE_BUCKET': ''}, clear=True):
        with pytest.raises(ValueError, match='configuration incomplete'):
            CloudStorageService()


def test_container_created_when_missing(mock_env, mock_driver):
    mock_driver.get_container.side_effect = ContainerDoesNotExistError('missing', mock_driver, 'test-bucket')
    CloudStorageService(driver=mock_driver)
    mock_driver.create_container.assert_called_once_with(container_name='test-bucket')


def test_object_name_for():
    assert CloudStorageService.object_name_for(7, 'scaffold', 'bp', 'plan.pdf') == 'blueprints/7/scaffold/bp-plan.pdf'


def test_upload_blueprint_streams_content(mock_env, mock_driver):
    uploaded = {}

    def consume(iterator, container, object_name, extra):
        uploaded['data'] = b''.join(iterator)
        uploaded['extra'] = extra
        return mock_driver.get_object.return_value
    mock_driver.upload_object_via_stream.side_effect = consume

    service = CloudStorageService(driver=mock_driver)
    url = service.upload_blueprint('blueprints/1/scaffold/bp-plan.pdf', io.BytesIO(b'pdf bytes'), 'application/pdf')
    assert url == 'https://cdn.example.com/plan.pdf'
    assert uploaded == {'data': b'pdf bytes', 'extra': {'content_type': 'application/pdf'}}


def test_upload_blueprint_retries_and_rewinds(mock_env, mock_driver):
    attempts = []

    def flaky(iterator, container, object_name, extra):
        attempts.append(b''.join(iterator))
        if len(attempts) == 1:
            raise LibcloudError('connection reset')
        return mock_driver.get_object.return_value
    mock_driver.upload_object_via_stream.side_effect = flaky

    service = CloudStorageService(driver=mock_driver)
    service.upload_blueprint('name', io.BytesIO(b'pdf bytes'))
    assert attempts == [b'pdf bytes', b'pdf bytes']


def test_object_url_falls_back_to_name(mock_env, mock_driver):
    obj = Mock(spec=['name', 'get_cdn_url'])
    obj.name = 'blueprints/plan.pdf'
    obj.get_cdn_url.side_effect = NotImplementedError
    assert CloudStorageService.object_url(obj) == 'blueprints/plan.pdf'


def test_delete_blueprint(mock_env, mock_driver):
    service = CloudStorageService(driver=mock_driver)
    assert service.delete_blueprint('blueprints/1/scaffold/bp-plan.pdf') is True
    mock_driver.delete_object.assert_called_once_with(mock_driver.get_object.return_value)

    mock_driver.get_object.side_effect = ObjectDoesNotExistError('gone', mock_driver, 'x')
    assert service.delete_blueprint('blueprints/1/scaffold/bp-plan.pdf') is False
