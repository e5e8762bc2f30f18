"""Blueprint blob storage using Apache Libcloud."""

import logging
import os
from threading import Lock
from libcloud.common.types import LibcloudError
from libcloud.storage.types import ContainerDoesNotExistError, ObjectDoesNotExistError, Provider
from libcloud.storage.providers import get_driver
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
    after_log
)


logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class CloudStorageService:
    """Stores blueprint files in an object storage container."""

    PROVIDERS = {
        's3': Provider.S3,
        'gcs': Provider.GOOGLE_STORAGE,
        'azure': Provider.AZURE_BLOBS,
        'minio': Provider.S3,  # MinIO uses S3 driver
    }

    def __init__(self, driver=None, container=None):
        """Initialize from CLOUD_STORAGE_* environment variables unless a driver is given."""
        self.provider_name = os.getenv('CLOUD_STORAGE_PROVIDER', 's3')
        self.bucket_name = os.getenv('CLOUD_STORAGE_BUCKET')
        if driver is None:
            access_key = os.getenv('CLOUD_STORAGE_ACCESS_KEY')
            secret_key = os.getenv('CLOUD_STORAGE_SECRET_KEY')
            if not all([access_key, secret_key, self.bucket_name]):
                raise ValueError("Cloud storage configuration incomplete. Check environment variables.")
            driver = self._get_driver(access_key, secret_key, os.getenv('CLOUD_STORAGE_REGION', 'us-east-1'))
        self.driver = driver
        self.container = container or self._get_container()
        logger.info(f"Cloud storage initialized with provider: {self.provider_name}")

    def _get_driver(self, access_key, secret_key, region):
        if self.provider_name not in self.PROVIDERS:
            raise ValueError(f"Unsupported provider: {self.provider_name}")
        kwargs = {'key': access_key, 'secret': secret_key}
        if self.provider_name == 's3':
            kwargs['region'] = region
        return get_driver(self.PROVIDERS[self.provider_name])(**kwargs)

    def _get_container(self):
        """Get or create the storage container/bucket."""
        try:
            return self.driver.get_container(container_name=self.bucket_name)
        except ContainerDoesNotExistError:
            logger.info(f"Creating container: {self.bucket_name}")
            return self.driver.create_container(container_name=self.bucket_name)

    @staticmethod
    def object_name_for(user_id, template_id, blueprint_id, file_name):
        """Blueprints are grouped by owner and template."""
        return f"blueprints/{user_id}/{template_id}/{blueprint_id}-{file_name}"

    def upload_blueprint(self, object_name, stream, content_type='application/octet-stream'):
        """Stream a blueprint file into the container and return its URL.

        The stream is rewound to its current position before each attempt.
        """
        return self._upload_stream(object_name, stream, stream.tell(), content_type)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        retry=retry_if_exception_type((LibcloudError, OSError)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        after=after_log(logger, logging.INFO)
    )
    def _upload_stream(self, object_name, stream, start, content_type):
        def chunks():
            while True:
                chunk = stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk

        stream.seek(start)
        logger.info(f"Uploading blueprint to {object_name}")
        obj = self.driver.upload_object_via_stream(
            iterator=chunks(),
            container=self.container,
            object_name=object_name,
            extra={'content_type': content_type},
        )
        return self.object_url(obj)

    def delete_blueprint(self, object_name):
        """Delete a blueprint object. Returns False when it was already gone."""
        try:
            obj = self.driver.get_object(self.container.name, object_name)
        except ObjectDoesNotExistError:
            logger.warning(f"Blueprint object already gone: {object_name}")
            return False
        self.driver.delete_object(obj)
        logger.info(f"Deleted blueprint: {object_name}")
        return True

    @staticmethod
    def object_url(obj):
        try:
            return obj.get_cdn_url()
        except (NotImplementedError, LibcloudError):
            return getattr(obj, 'public_url', None) or obj.name


# Global instance
_cloud_storage = None
_cloud_storage_lock = Lock()


def get_cloud_storage():
    """Get or create cloud storage service instance (thread-safe)."""
    global _cloud_storage
    if _cloud_storage is None:
        with _cloud_storage_lock:
            # Double-check pattern for thread safety
            if _cloud_storage is None:
                _cloud_storage = CloudStorageService()
    return _cloud_storage
