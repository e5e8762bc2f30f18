"""Configuration Manager for the checklist client."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigManager(BaseSettings):
    """Manages client configuration settings using Pydantic BaseSettings."""

    # API settings
    api_timeout: float = 10.0
    api_base_url: str = 'http://localhost:5000'
    api_max_retries: int = 3
    api_retry_delay: float = 1.0

    # Local storage
    local_db_path: str = ''  # empty -> user data dir

    # Gemini settings
    gemini_api_key: str = ''
    gemini_model: str = 'gemini-2.5-flash'
    gemini_base_url: str = 'https://generativelanguage.googleapis.com/v1beta'
    gemini_temperature: float = 0.8
    gemini_max_output_tokens: int = 2000
    gemini_timeout: float = 60.0
    analysis_retry_attempts: int = 3  # exponential backoff, 1s then 2s
    analysis_retry_delay: float = 1.0

    # Risk profile service (OSHA reference data)
    risk_profile_url: str = ''
    default_naics_code: str = '238'

    # Media settings
    max_image_bytes: int = 10 * 1024 * 1024
    max_blueprint_bytes: int = 50 * 1024 * 1024
    upload_workers: int = 4

    model_config = SettingsConfigDict(env_prefix='CHECKLIST_', case_sensitive=False)

    def get(self, key, default=None):
        """Get a configuration value."""
        return getattr(self, key, default)

    def set(self, key, value):
        """Set a configuration value."""
        setattr(self, key, value)

    def get_all(self):
        """Get all configuration values as dictionary."""
        return self.model_dump()
