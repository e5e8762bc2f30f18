"""Media service for image encoding, camera capture and report sharing."""
import logging
import os
from concurrent.futures import ThreadPoolExecutor, wait

from shared.utils import CorruptedImageError, detect_image_mime, encode_data_uri
from ..errors import ChecklistError, MediaEncodingError


def load_file(file):
    """Return (file_name, bytes) for a path, a (name, bytes) pair or a binary file object."""
    if isinstance(file, (str, os.PathLike)):
        with open(file, 'rb') as f:
            return os.path.basename(os.fspath(file)), f.read()
    if isinstance(file, tuple):
        file_name, data = file
        return file_name, bytes(data)
    if hasattr(file, 'read'):
        return os.path.basename(getattr(file, 'name', '') or 'upload'), file.read()
    raise TypeError(f"Unsupported file object: {type(file).__name__}")


class MediaService:
    """Encodes local images as data URIs and talks to injected device capabilities."""

    def __init__(self, capabilities, max_image_bytes=10 * 1024 * 1024, max_workers=4):
        self.capabilities = capabilities
        self.max_image_bytes = max_image_bytes
        self.max_workers = max_workers
        self.logger = logging.getLogger(self.__class__.__name__)

    def encode_image(self, file):
        """Read, verify and encode one image file."""
        try:
            file_name, data = load_file(file)
        except (OSError, TypeError, ValueError) as e:
            self.logger.error(f"Failed to read image {file!r}: {e}")
            raise MediaEncodingError() from e
        if len(data) > self.max_image_bytes:
            self.logger.error(f"Image {file_name} exceeds {self.max_image_bytes} bytes")
            raise MediaEncodingError(f"{file_name} is too large")
        try:
            mime_type = detect_image_mime(data)
        except CorruptedImageError as e:
            raise MediaEncodingError(f"{file_name} is not a readable image") from e
        return encode_data_uri(data, mime_type)

    def encode_images(self, files):
        """Encode a batch of images, preserving input order.

        Every file is processed before returning; if any fails the first
        failure is raised and no result is returned.

        Raises:
            MediaEncodingError: If any file cannot be encoded.
        """
        files = list(files)
        if not files:
            return []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(self.encode_image, f) for f in files]
            wait(futures)
        failures = [f.exception() for f in futures if f.exception() is not None]
        if failures:
            self.logger.warning(f"Rejected image batch: {len(failures)} of {len(files)} files failed")
            raise failures[0]
        data_uris = [f.result() for f in futures]
        self.logger.info(f"Encoded {len(data_uris)} images")
        return data_uris

    def capture_image(self):
        """Capture a still frame from the camera and return it as a data URI."""
        if not self.capabilities.can_capture:
            raise MediaEncodingError('Camera not available')
        try:
            data = self.capabilities.camera.capture()
        except OSError as e:
            self.logger.error(f"Camera capture failed: {e}")
            raise MediaEncodingError('Failed to access camera') from e
        return self.encode_image(('capture.jpg', data))

    def share_report(self, title, text):
        """Share via the share target, falling back to the clipboard.

        Returns 'shared' or 'copied'.
        """
        if self.capabilities.share is not None:
            self.capabilities.share.share(title, text)
            return 'shared'
        if self.capabilities.clipboard is not None:
            self.capabilities.clipboard.write_text(text)
            return 'copied'
        raise ChecklistError('Sharing is not available on this device')
