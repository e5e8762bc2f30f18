"""Shared utilities package for the Safety Checklist application.

This package contains shared code used by both the backend Flask API and the
checklist client. It includes:

- Database models (models.py) - SQLAlchemy models for users, durable checklist
  records, blueprint uploads and the client key-value side-channel
- Enums (enums.py) - Shared enumeration definitions for input kinds, statuses and levels
- Validation utilities (validation.py, schemas.py) - Input validation, sanitization
  and the pydantic checklist/template/analysis schemas
- Utility functions (utils.py) - File hashing, image verification and data URI helpers
"""
