"""Shared utility functions for the Safety Checklist application.

This module contains utility functions used across both backend and client
components: file hashing, image verification and data URI encoding.
"""

import base64
import hashlib
import io
import logging
import re
from functools import wraps
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


class CorruptedImageError(Exception):
    """Raised when image data is corrupted and cannot be processed."""
    pass


# File hash algorithm constant - always SHA256
FILE_HASH_ALGO = 'sha256'

# Pillow format name -> MIME type for formats accepted as checklist images
IMAGE_MIME_TYPES = {
    'JPEG': 'image/jpeg',
    'PNG': 'image/png',
    'GIF': 'image/gif',
    'WEBP': 'image/webp',
    'BMP': 'image/bmp',
}

DATA_URI_PATTERN = re.compile(r'^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>[A-Za-z0-9+/=]*)$')
UNSAFE_FILENAME_CHARS = re.compile(r'[^A-Za-z0-9._-]+')


def handle_image_errors(func):
    """Decorator to convert image decoding failures to CorruptedImageError.

    The decorated function should accept image_data as a keyword or first
    positional argument so the size can be reported in the log line.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        image_data = kwargs.get('image_data', args[0] if args else None)

        def log_and_raise(msg, exc):
            size = len(image_data) if isinstance(image_data, (bytes, bytearray)) else 0
            logger.error(f"{msg} - image data (size: {size} bytes): {exc}")
            raise CorruptedImageError(f"{msg}: {exc}") from exc

        try:
            return func(*args, **kwargs)
        except UnidentifiedImageError as e:
            log_and_raise("Corrupted or unsupported image format", e)
        except (OSError, ValueError, SyntaxError) as e:
            # Pillow raises SyntaxError for some malformed headers
            log_and_raise("Error processing image", e)

    return wrapper


def compute_file_hash(data_or_stream):
    """Compute SHA256 hash of uploaded file content.

    Args:
        data_or_stream: Raw bytes or a readable binary file-like object.
            Streams are rewound to their starting position afterwards.

    Returns:
        str: Hexadecimal hash string (64 characters)

    Raises:
        TypeError: If input type is invalid
    """
    hasher = hashlib.new(FILE_HASH_ALGO)
    if isinstance(data_or_stream, (bytes, bytearray)):
        hasher.update(data_or_stream)
    elif hasattr(data_or_stream, 'read'):
        start = data_or_stream.tell() if hasattr(data_or_stream, 'tell') else None
        while chunk := data_or_stream.read(8192):
            hasher.update(chunk)
        if start is not None:
            data_or_stream.seek(start)
    else:
        raise TypeError(f"compute_file_hash expected bytes or file-like object, got {type(data_or_stream).__name__}")
    return hasher.hexdigest()


@handle_image_errors
def detect_image_mime(image_data):
    """Verify image bytes with Pillow and return their MIME type.

    Raises:
        CorruptedImageError: When the data is not a readable image or the
            format is not one of IMAGE_MIME_TYPES.
    """
    if not image_data:
        raise ValueError("empty image data")
    img = Image.open(io.BytesIO(image_data))
    image_format = img.format
    img.verify()
    mime_type = IMAGE_MIME_TYPES.get(image_format)
    if mime_type is None:
        raise ValueError(f"unsupported image format {image_format}")
    return mime_type


def encode_data_uri(data, mime_type):
    """Encode raw bytes as a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(data_uri):
    """Split a base64 data URI into (mime_type, raw bytes).

    Raises:
        ValueError: If the string is not a base64 data URI.
    """
    match = DATA_URI_PATTERN.match(data_uri or '')
    if not match:
        raise ValueError("not a base64 data URI")
    return match.group('mime'), base64.b64decode(match.group('data'))


def safe_file_name(file_name, default='upload'):
    """Reduce a client-supplied file name to a storage-safe token."""
    name = UNSAFE_FILENAME_CHARS.sub('_', (file_name or '').strip()).strip('._')
    return name[:200] or default
