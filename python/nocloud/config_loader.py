import configparser
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, NamedTuple

import structlog
from pydantic import SecretStr

from .config import NoCloudConfig
from .errors import APIKeyNotFoundError

logger = structlog.get_logger("nocloud.config_loader")

NOCLOUD_CONFIG_DIR = Path.home() / ".nocloud"


class FileConfig(NamedTuple):
    """Raw values extracted from ~/.nocloud/ config and credentials files."""

    base_url: str | None
    api_key: SecretStr | None


def _resolve_section_name(profile: str) -> str:
    """Convert a profile name to the INI section name.

    Follows AWS CLI convention:
    - "default" maps to [default]
    - Any other name maps to [profile <name>]
    """
    if profile == "default":
        return "default"
    return f"profile {profile}"


def _read_option(path: Path, section: str, option: str) -> str | None:
    if not path.is_file():
        return None
    parser = configparser.ConfigParser()
    try:
        parser.read(path)
    except configparser.Error as e:
        logger.warning("Failed to parse nocloud config file.", path=str(path), error=str(e))
        return None
    if not parser.has_section(section):
        logger.debug(f"Profile section '{section}' not found.", path=str(path))
        return None
    return parser.get(section, option, fallback=None) or None


def load_file_config(
    profile: str | None = None,
    config_dir: Path | None = None,
) -> FileConfig:
    """Load configuration from ~/.nocloud/config and ~/.nocloud/credentials files.

    Args:
        profile: Profile name to load. If None, uses NOCLOUD_PROFILE env var
                 or falls back to "default".
        config_dir: Override the config directory (for testing).
    """
    if profile is None:
        profile = os.getenv("NOCLOUD_PROFILE", "default")

    base_dir = config_dir or NOCLOUD_CONFIG_DIR
    section = _resolve_section_name(profile)

    base_url = _read_option(base_dir / "config", section, "base_url")
    api_key = _read_option(base_dir / "credentials", section, "api_key")

    return FileConfig(
        base_url=base_url,
        api_key=SecretStr(api_key) if api_key else None,
    )


def resolve_config(
    options: str | NoCloudConfig | Mapping[str, Any] | None = None,
    profile: str | None = None,
    config_dir: Path | None = None,
) -> NoCloudConfig:
    """Build the client configuration by merging sources with precedence.

    Per-field precedence (highest to lowest):
    1. Explicit options (an API key string, a config object or a mapping of fields)
    2. Environment variables (NOCLOUD_API_KEY, NOCLOUD_API_URL, NOCLOUD_BASE_PATH)
    3. ~/.nocloud/ config and credentials files

    Raises:
        APIKeyNotFoundError: If no source provides an API key.
    """
    if isinstance(options, NoCloudConfig):
        return options

    if isinstance(options, str):
        values: dict[str, Any] = {"api_key": options}
    else:
        values = {k: v for k, v in (options or {}).items() if v is not None}

    file_config = None

    def from_file() -> FileConfig:
        nonlocal file_config
        if file_config is None:
            file_config = load_file_config(profile=profile, config_dir=config_dir)
        return file_config

    if "api_key" not in values:
        api_key = os.getenv("NOCLOUD_API_KEY")
        if api_key:
            logger.debug("Resolved api_key from NOCLOUD_API_KEY.")
        else:
            api_key = from_file().api_key
            if api_key:
                logger.debug("Resolved api_key from credentials file.")
        if not api_key:
            raise APIKeyNotFoundError(
                "API key is required. Pass it explicitly, set NOCLOUD_API_KEY "
                "or add it to ~/.nocloud/credentials."
            )
        values["api_key"] = api_key

    if "base_url" not in values:
        base_url = os.getenv("NOCLOUD_API_URL") or from_file().base_url
        if base_url:
            logger.debug("Resolved base_url.", base_url=base_url)
            values["base_url"] = base_url

    if "base_path" not in values:
        base_path = os.getenv("NOCLOUD_BASE_PATH")
        if base_path is not None:
            values["base_path"] = base_path

    return NoCloudConfig.model_validate(values)
