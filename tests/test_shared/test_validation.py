"""Tests for shared validation utilities."""
import pytest
from pydantic import BaseModel, ValidationError as PydanticValidationError
from shared.validation import (
    ValidationError, validate_required, validate_string_length, parse_timestamp,
    validate_template_id, sanitize_html, format_pydantic_errors
)


class TestValidation:
    """Test validation helpers."""

    def test_validate_required_success(self):
        assert validate_required("test", "test_field") == "test"
        assert validate_required(123, "test_field") == 123

    def test_validate_required_failure(self):
        for value in ("", None, "   "):
            with pytest.raises(ValidationError, match="test_field is required"):
                validate_required(value, "test_field")

    def test_validate_string_length(self):
        assert validate_string_length("  test  ", "field", 1, 10) == "test"
        with pytest.raises(ValidationError, match="field must be at least 5 characters"):
            validate_string_length("test", "field", 5, 10)
        with pytest.raises(ValidationError, match="field must be no more than 3 characters"):
            validate_string_length("testing", "field", 1, 3)
        with pytest.raises(ValidationError, match="must be a string"):
            validate_string_length(12, "field")

    def test_parse_timestamp(self):
        utc = parse_timestamp("2024-05-01T08:00:00.000Z")
        assert utc.tzinfo is not None
        assert parse_timestamp("2024-05-01T08:00:00") == utc
        assert parse_timestamp("2024-05-01T10:00:00+02:00") == utc
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")

    def test_validate_template_id(self):
        assert validate_template_id("fall-protection") == "fall-protection"
        for bad in ("", "Fall Protection", "../etc", None, "-leading"):
            with pytest.raises(ValidationError, match="invalid template id"):
                validate_template_id(bad)


class TestSanitizeHtml:
    def test_plain_text_untouched(self):
        assert sanitize_html("Guardrail missing on east side") == "Guardrail missing on east side"

    def test_script_tags_stripped(self):
        cleaned = sanitize_html("<script>alert(1)</script><strong>Loose</strong> planks")
        assert "<script>" not in cleaned
        assert "<strong>Loose</strong> planks" in cleaned

    def test_attributes_removed(self):
        assert sanitize_html('<p onclick="x()">Note</p>') == "<p>Note</p>"

    def test_empty_values(self):
        assert sanitize_html("") == ""
        assert sanitize_html(None) is None


def test_format_pydantic_errors():
    class Sample(BaseModel):
        name: str
        count: int

    with pytest.raises(PydanticValidationError) as exc_info:
        Sample(count="many")
    message = format_pydantic_errors(exc_info.value)
    assert "name: Field required" in message
    assert "count:" in message
    assert "; " in message
