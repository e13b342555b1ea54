"""
Configuration for the Plant Care Advisory Core
==============================================
Runtime settings for the care scheduler and the AI advisory layer, loaded
from environment variables. Sets up the logging configuration as well.

The inference credential is validated once, in :func:`load_config`; a missing
key is a fatal startup condition rather than a per-call check.
"""

import logging
import os
import sys
from contextlib import suppress
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler

from plantcare.constants import AdvisoryDefaults, ImageLimits, Models
from plantcare.domain.exceptions import ConfigurationError

_LOG_LEVEL_BY_ENV = {
    "production": "WARNING",
    "test": "INFO",
    "development": "DEBUG",
}


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number.") from None


def _default_log_level() -> str:
    explicit = os.getenv("PLANTCARE_LOG_LEVEL")
    if explicit:
        return explicit.upper()
    environment = os.getenv("PLANTCARE_ENV", "development")
    return _LOG_LEVEL_BY_ENV.get(environment, "DEBUG")


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("PLANTCARE_ENV", "development"))
    log_level: str = field(default_factory=_default_log_level)
    log_file: str = field(default_factory=lambda: os.getenv("PLANTCARE_LOG_FILE", ""))

    # Inference service
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    openai_base_url: str = field(default_factory=lambda: os.getenv("OPENAI_BASE_URL", ""))
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", Models.PRIMARY))
    llm_fallback_model: str = field(default_factory=lambda: os.getenv("LLM_FALLBACK_MODEL", Models.FALLBACK))
    llm_timeout: int = field(default_factory=lambda: _env_int("LLM_TIMEOUT", 60))
    llm_temperature: float = field(default_factory=lambda: _env_float("LLM_TEMPERATURE", 0.4))

    # Retry policy
    advisory_max_attempts: int = field(
        default_factory=lambda: _env_int("ADVISORY_MAX_ATTEMPTS", AdvisoryDefaults.MAX_ATTEMPTS)
    )
    advisory_backoff_base_ms: int = field(
        default_factory=lambda: _env_int("ADVISORY_BACKOFF_BASE_MS", AdvisoryDefaults.BACKOFF_BASE_MS)
    )

    # Images / history
    max_image_mb: float = field(default_factory=lambda: _env_float("PLANTCARE_MAX_IMAGE_MB", ImageLimits.MAX_MB))
    care_history_limit: int = field(
        default_factory=lambda: _env_int("PLANTCARE_CARE_HISTORY_LIMIT", AdvisoryDefaults.CARE_HISTORY_LIMIT)
    )

    silence_http_clients: bool = field(default_factory=lambda: _env_bool("PLANTCARE_SILENCE_HTTP_LOGS", True))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


# ==================== CONFIGURATION VALIDATION ====================


def validate_config(config: AppConfig) -> list[str]:
    """
    Validate configuration and return a list of problems.

    Args:
        config: AppConfig instance

    Returns:
        List of problem descriptions (empty if all valid)
    """
    problems = []

    if not config.openai_api_key:
        problems.append("OPENAI_API_KEY is not set; the advisory service cannot start")

    if config.advisory_max_attempts < 1:
        problems.append(f"ADVISORY_MAX_ATTEMPTS must be at least 1 (got {config.advisory_max_attempts})")

    if config.advisory_backoff_base_ms < 0:
        problems.append(f"ADVISORY_BACKOFF_BASE_MS cannot be negative (got {config.advisory_backoff_base_ms})")

    if config.max_image_mb <= 0:
        problems.append(f"PLANTCARE_MAX_IMAGE_MB must be positive (got {config.max_image_mb})")

    if config.care_history_limit < 1:
        problems.append(f"PLANTCARE_CARE_HISTORY_LIMIT must be at least 1 (got {config.care_history_limit})")

    if config.llm_timeout <= 0:
        problems.append(f"LLM_TIMEOUT must be positive (got {config.llm_timeout})")

    return problems


def setup_logging(level: str = "INFO", log_file: str = "", *, silence_http_clients: bool = True) -> None:
    """Setup logging configuration."""
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    root = logging.getLogger()
    root.setLevel(log_level)

    # Avoid duplicate handlers when setup_logging is called more than once
    has_console = any(getattr(h, "name", "") == "plantcare_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "plantcare_file" for h in root.handlers)
    added_handler = False

    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "plantcare_console"
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if log_file and not has_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "plantcare_file"
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    for handler in root.handlers:
        if getattr(handler, "name", "") in {"plantcare_console", "plantcare_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(log_level))

    # The SDK and its HTTP client log every request at INFO
    if silence_http_clients:
        logging.getLogger("openai").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Load configuration from the environment and fail fast if it is unusable."""
    config = AppConfig()
    problems = validate_config(config)
    if problems:
        raise ConfigurationError(
            "Invalid plant care configuration: " + "; ".join(problems),
            detail={"problems": problems},
        )
    return config
