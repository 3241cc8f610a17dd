"""Configuration Manager for Recall.

Configuration is read from environment variables with sensible defaults
and validated at load time so bad values fail fast.
"""

import os
from dataclasses import dataclass

from recall.core.exceptions import ConfigurationError

DEFAULT_MODEL = "gemini-3-pro-preview"

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    Attributes:
        gemini_api_key: API key for the Gemini API (GEMINI_API_KEY, or the
            legacy API_KEY).
        model: Gemini model used for analysis and recaps (RECALL_MODEL).
        log_level: Logging verbosity (LOG_LEVEL).
    """

    gemini_api_key: str
    model: str = DEFAULT_MODEL
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid LOG_LEVEL '{self.log_level}'. "
                f"Must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}"
            )
        self.log_level = self.log_level.upper()

        self.model = self.model.strip()
        if not self.model:
            raise ConfigurationError("RECALL_MODEL must not be empty")


def load_config(*, require_api_key: bool = True) -> Config:
    """Load configuration from environment variables.

    Args:
        require_api_key: If True (default), raise ConfigurationError when no
            Gemini API key is set. Pass False when only the offline parts
            (classification, heuristics) are needed.

    Returns:
        A validated Config.

    Raises:
        ConfigurationError: If required config is missing or values are invalid.
    """
    api_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY", "")

    if require_api_key and not api_key:
        raise ConfigurationError(
            "GEMINI_API_KEY environment variable is required but not set"
        )

    return Config(
        gemini_api_key=api_key,
        model=os.environ.get("RECALL_MODEL", DEFAULT_MODEL),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )


_config: Config | None = None


def get_config(*, require_api_key: bool = True) -> Config:
    """Get the cached configuration, loading it on first use.

    Use reset_config() to force a reload.
    """
    global _config
    if _config is None:
        _config = load_config(require_api_key=require_api_key)
    return _config


def reset_config() -> None:
    """Drop the cached configuration (used by tests)."""
    global _config
    _config = None
