"""Blueprint blob storage through the backend /api/blueprints endpoints."""
import logging
import mimetypes
from concurrent.futures import ThreadPoolExecutor, wait

import requests

from shared.schemas import BlueprintUpload
from .api_service import APIService
from .media_service import load_file
from ..errors import BlueprintUploadError


class BlueprintStorage:
    """Uploads and deletes blueprint files for the logged-in owner."""

    def __init__(self, api_service, max_bytes=50 * 1024 * 1024, max_workers=4):
        self.api = api_service
        self.max_bytes = max_bytes
        self.max_workers = max_workers
        self.logger = logging.getLogger(self.__class__.__name__)

    def upload(self, file, template_id, item_id, owner_id):
        """Upload one file and return its BlueprintUpload record."""
        try:
            file_name, data = load_file(file)
        except (OSError, TypeError, ValueError) as e:
            raise BlueprintUploadError(f"Could not read {file!r}") from e
        if len(data) > self.max_bytes:
            raise BlueprintUploadError(f"{file_name} exceeds the blueprint size limit")

        content_type = mimetypes.guess_type(file_name)[0] or 'application/octet-stream'
        try:
            response = self.api.upload_file(
                '/api/blueprints', file_name, data, content_type,
                data={'template_id': template_id, 'item_id': item_id},
            )
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Blueprint upload of {file_name} for user {owner_id} failed: {e}")
            raise BlueprintUploadError() from e
        if response.status_code != 201:
            message = APIService.error_message(response, 'Upload failed')
            self.logger.error(f"Blueprint upload of {file_name} rejected: {response.status_code} {message}")
            raise BlueprintUploadError(f"Failed to upload {file_name}: {message}")
        return BlueprintUpload.model_validate(response.json())

    def upload_batch(self, files, template_id, item_id, owner_id):
        """Upload files concurrently and return all records, or raise.

        All uploads are joined before deciding. On any failure, blobs that did
        upload are deleted again and BlueprintUploadError is raised.
        """
        files = list(files)
        if not files:
            return []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(self.upload, f, template_id, item_id, owner_id) for f in files]
            wait(futures)

        failures = [f.exception() for f in futures if f.exception() is not None]
        uploaded = [f.result() for f in futures if f.exception() is None]
        if failures:
            self.logger.warning(f"Blueprint batch failed: {len(failures)} of {len(files)} uploads failed")
            self._discard(uploaded)
            first = failures[0]
            if isinstance(first, BlueprintUploadError):
                raise first
            raise BlueprintUploadError() from first
        self.logger.info(f"Uploaded {len(uploaded)} blueprints for {template_id}/{item_id}")
        return uploaded

    def delete(self, blueprint_id, file_name):
        """Delete a blueprint blob. A missing blob counts as deleted."""
        try:
            response = self.api.delete(f'/api/blueprints/{blueprint_id}')
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Failed to delete blueprint {file_name}: {e}")
            raise BlueprintUploadError('Failed to delete blueprint') from e
        if response.status_code not in (200, 204, 404):
            message = APIService.error_message(response, 'Delete failed')
            raise BlueprintUploadError(f"Failed to delete {file_name}: {message}")
        self.logger.info(f"Deleted blueprint {blueprint_id} ({file_name})")

    def _discard(self, uploads):
        for blueprint in uploads:
            try:
                self.delete(blueprint.id, blueprint.file_name)
            except BlueprintUploadError as e:
                self.logger.warning(f"Orphaned blueprint {blueprint.id} left in storage: {e}")
