"""Settings loaded from the environment and .env file."""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from .errors import ConfigurationError
from .key_pool import DEFAULT_QUOTA_PATTERNS

# Provider name -> (API key variable, default model)
PROVIDERS = {
    "groq": ("GROQ_API_KEY", "llama-3.3-70b-versatile"),
    "openai": ("OPENAI_API_KEY", "gpt-4o"),
    "anthropic": ("ANTHROPIC_API_KEY", "claude-3-5-sonnet-latest"),
}

DEFAULT_PROVIDER = "groq"
DEFAULT_TIMEOUT_SECONDS = 60.0
DATA_FILE_NAME = "proposal_data.json"


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the proposal generator."""
    api_keys: Tuple[str, ...]
    provider: str = DEFAULT_PROVIDER
    model_name: str = PROVIDERS[DEFAULT_PROVIDER][1]
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    quota_patterns: Tuple[str, ...] = DEFAULT_QUOTA_PATTERNS
    data_file: Path = field(default_factory=lambda: get_data_directory() / DATA_FILE_NAME)
    log_level: str = "WARNING"


def split_list(value: Optional[str]) -> List[str]:
    """Split a comma or newline separated value, dropping blanks.

    Examples:
        >>> split_list("key-a, key-b\\nkey-c")
        ['key-a', 'key-b', 'key-c']
    """
    if not value:
        return []
    return [item.strip() for item in re.split(r"[,\n]", value) if item.strip()]


def _clean_path(value: str) -> Path:
    # Remove quotes if present and expand ~ to home directory
    return Path(value.strip('"').strip("'")).expanduser().resolve()


def get_data_directory() -> Path:
    """Get the data directory from environment or default location.

    Returns:
        Path: Resolved data directory path
    """
    data_dir_env = os.getenv("DATA_DIR")
    if data_dir_env:
        return _clean_path(data_dir_env)

    # Default to project data directory
    return Path(__file__).parent.parent.parent / "data"


def load_settings(dotenv: bool = True) -> Settings:
    """Build Settings from environment variables.

    Args:
        dotenv: Whether to load a .env file first

    Returns:
        Settings instance

    Raises:
        ConfigurationError: If the provider is unknown or the timeout is not a positive number
    """
    if dotenv:
        load_dotenv()

    provider = (os.getenv("LLM_PROVIDER") or DEFAULT_PROVIDER).strip().lower()
    if provider not in PROVIDERS:
        raise ConfigurationError(
            f"Unknown LLM_PROVIDER '{provider}'. Choose one of: {', '.join(sorted(PROVIDERS))}"
        )
    key_variable, default_model = PROVIDERS[provider]

    # MODEL_API_KEYS holds the rotation list; the provider's own variable is a single-key fallback
    api_keys = split_list(os.getenv("MODEL_API_KEYS")) or split_list(os.getenv(key_variable))

    timeout_env = os.getenv("MODEL_TIMEOUT_SECONDS")
    try:
        timeout_seconds = float(timeout_env) if timeout_env else DEFAULT_TIMEOUT_SECONDS
    except ValueError as e:
        raise ConfigurationError(f"MODEL_TIMEOUT_SECONDS must be a number, got '{timeout_env}'") from e
    if timeout_seconds <= 0:
        raise ConfigurationError("MODEL_TIMEOUT_SECONDS must be greater than zero")

    quota_patterns = tuple(split_list(os.getenv("QUOTA_ERROR_PATTERNS"))) or DEFAULT_QUOTA_PATTERNS

    data_file_env = os.getenv("PROPOSAL_DATA_FILE")
    data_file = _clean_path(data_file_env) if data_file_env else get_data_directory() / DATA_FILE_NAME

    return Settings(
        api_keys=tuple(api_keys),
        provider=provider,
        model_name=os.getenv("LLM_MODEL") or default_model,
        timeout_seconds=timeout_seconds,
        quota_patterns=quota_patterns,
        data_file=data_file,
        log_level=os.getenv("LOG_LEVEL", "WARNING"),
    )
