"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class BotConfig(BaseModel):
    """A validated configuration model for the application."""

    # Authentication
    token: str = ""

    # Behaviour
    log_level: str = "INFO"
    request_timeout: float = 20.0
    search_limit: int = 10
    output_dir: str = "."

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalizes the level name; an empty value means INFO."""
        level = v.upper() or "INFO"
        if level == "WARN":
            level = "WARNING"
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Request timeout must be positive.")
        return v

    @field_validator("search_limit")
    @classmethod
    def validate_search_limit(cls, v: int) -> int:
        """Ensures a reasonable page size."""
        if v < 1 or v > 50:
            raise ValueError("Search limit must be between 1 and 50.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
