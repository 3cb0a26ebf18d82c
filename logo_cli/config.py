import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

from .errors import ConfigurationError
from .schemas import ImageQuality, ImageSize, LogoStyle

# Load environment variables from a local .env file if present.
load_dotenv()

logger = logging.getLogger(__name__)


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: expected a number, using %s", name, raw, default)
        return default


# User config file; environment variables always win over its values.
CONFIG_PATH = Path(
    os.getenv("LOGO_CONFIG_PATH", Path.home() / ".config" / "logo-cli" / "config.json")
)

# Where generated logo files will be written.
OUTPUT_DIR = Path(os.getenv("LOGO_OUTPUT_DIR", "./logos"))
STATIC_URL_PATH = os.getenv("LOGO_STATIC_URL_PATH", "/logos")

# Image generation defaults.
IMAGE_MODEL = os.getenv("LOGO_IMAGE_MODEL", "gpt-image-1")
IMAGE_BACKGROUND = os.getenv("LOGO_IMAGE_BACKGROUND", "transparent")

# Cache settings.
CACHE_DIR = Path(os.getenv("LOGO_CACHE_DIR", "./cache"))
CACHE_TTL_SECONDS = _env_number("LOGO_CACHE_TTL", 3600, int)
CACHE_MAX_SIZE_MB = _env_number("LOGO_CACHE_MAX_MB", 500.0, float)

# Directory holding user-defined templates for the `template` command.
TEMPLATES_DIR = Path(os.getenv("LOGO_TEMPLATES_DIR", "./templates"))

# Batch concurrency when the caller does not pass one.
DEFAULT_CONCURRENCY = _env_number("LOGO_BATCH_CONCURRENCY", 3, int)

API_KEY_HINT = "Set OPENAI_API_KEY or run 'logo-cli config set --api-key YOUR_KEY'"
ENV_HINT = "Check the LOGO_* environment variables and your .env file"

_ENV_OVERRIDES = {
    "OPENAI_API_KEY": "api_key",
    "LOGO_OUTPUT_DIR": "output_dir",
    "LOGO_CACHE_ENABLED": "cache_enabled",
    "LOGO_CACHE_DIR": "cache_dir",
    "LOGO_CACHE_TTL": "cache_ttl",
    "LOGO_CACHE_MAX_MB": "max_cache_size_mb",
    "LOGO_DEFAULT_STYLE": "default_style",
    "LOGO_DEFAULT_QUALITY": "default_quality",
    "LOGO_DEFAULT_SIZE": "default_size",
}


class Settings(BaseModel):
    api_key: Optional[str] = None
    default_style: LogoStyle = LogoStyle.MODERN
    default_quality: ImageQuality = ImageQuality.STANDARD
    default_size: ImageSize = ImageSize.SQUARE
    output_dir: str = str(OUTPUT_DIR)
    cache_enabled: bool = True
    cache_dir: str = str(CACHE_DIR)
    cache_ttl: int = CACHE_TTL_SECONDS
    max_cache_size_mb: float = CACHE_MAX_SIZE_MB

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError("OpenAI API key not found.", hint=API_KEY_HINT)
        return self.api_key


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not load config from %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config at %s: expected a JSON object", path)
        return {}
    return data


def _env_values() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for env_name, field_name in _ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if not raw:
            continue
        if field_name == "cache_enabled":
            values[field_name] = raw.lower() == "true"
        else:
            values[field_name] = raw
    return values


def load_settings(config_path: Path | None = None) -> Settings:
    """Merge defaults, the JSON config file and the environment, in that order."""
    path = config_path or CONFIG_PATH
    values = _read_config_file(path)
    values.update(_env_values())
    try:
        return Settings.model_validate(values)
    except ValidationError as exc:
        logger.warning("Invalid configuration in %s, using defaults: %s", path, exc)
    try:
        return Settings.model_validate(_env_values())
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid configuration in environment: {_describe(exc)}",
            hint=ENV_HINT,
        ) from exc


def save_settings(updates: Dict[str, Any], config_path: Path | None = None) -> Path:
    """Merge *updates* into the JSON config file and return its path."""
    path = config_path or CONFIG_PATH
    current = _read_config_file(path)
    current.update({key: value for key, value in updates.items() if value is not None})
    try:
        Settings.model_validate(current)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {_describe(exc)}", hint=f"Check {path}") from exc
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(current, indent=2), encoding="utf-8")
    return path


def ensure_output_dir(output_dir: Path | None = None) -> Path:
    """Create the output directory if it does not already exist."""
    target = output_dir or OUTPUT_DIR
    target.mkdir(parents=True, exist_ok=True)
    return target
