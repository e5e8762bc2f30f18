"""Input validation utilities."""
import re
from datetime import datetime, timezone
import bleach


class ValidationError(Exception):
    """Raised when input validation fails."""
    pass


# Allow only safe tags and attributes, no CSS or JavaScript
ALLOWED_TAGS = ['p', 'br', 'strong', 'em', 'u', 'ul', 'ol', 'li', 'blockquote']

TEMPLATE_ID_PATTERN = re.compile(r'^[a-z0-9][a-z0-9_-]{0,99}$')


def validate_required(value, field_name):
    """Validate that a required field is not empty."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")
    return value


def validate_string_length(value, field_name, min_length=0, max_length=None):
    """Validate string length constraints."""
    if not isinstance(value, str):
        raise ValidationError(f"Validation failed: {field_name} must be a string")
    value = value.strip()
    if len(value) < min_length:
        raise ValidationError(f"Validation failed: {field_name} must be at least {min_length} characters")
    if max_length and len(value) > max_length:
        raise ValidationError(f"Validation failed: {field_name} must be no more than {max_length} characters")
    return value


def parse_timestamp(value):
    """Parse an ISO-8601 instant into an aware datetime.

    A trailing 'Z' is accepted and a value without an offset is taken as UTC.

    Raises:
        ValueError: If the value is not ISO-8601.
    """
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def validate_template_id(template_id):
    """Validate a template identifier (lowercase slug)."""
    if not isinstance(template_id, str) or not TEMPLATE_ID_PATTERN.match(template_id):
        raise ValidationError(f"Validation failed: invalid template id '{template_id}'")
    return template_id


def sanitize_html(text):
    """Secure HTML sanitization using bleach library.

    Plain text (no tags or entities) is returned untouched to avoid
    expensive HTML parsing in the common case.
    """
    if not text:
        return text
    if '<' not in text and '>' not in text and '&' not in text:
        return text
    return bleach.clean(text, tags=ALLOWED_TAGS, attributes={}, strip=True)


def format_pydantic_errors(exc):
    """Flatten a pydantic ValidationError into a 'field: msg; ...' string."""
    errors = []
    for error in exc.errors():
        field = '.'.join(str(x) for x in error['loc'])
        errors.append(f"{field}: {error['msg']}")
    return '; '.join(errors)
