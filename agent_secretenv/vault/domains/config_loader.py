"""Configuration loader for agent-secretenv."""
import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .channel import DEFAULT_CONNECT_TIMEOUT
from .errors import ConfigurationError
from .google_vault import GoogleVault

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "SECRETENV_CONFIG"
PROJECT_ENV = "GCP_PROJECT"
CREDENTIALS_ENV = "GOOGLE_APPLICATION_CREDENTIALS"


def default_config_path() -> Path:
    return Path.home() / ".config" / "agent-secretenv" / "config.yml"


@dataclass
class DataConfig:
    """Which secrets to turn into environment entries."""
    json: List[str] = field(default_factory=list)
    prefix: Optional[str] = None


@dataclass
class GoogleConfig:
    """Settings needed to build a GoogleVault."""
    project: str
    credentials_file: Optional[Path] = None
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    data: DataConfig = field(default_factory=DataConfig)

    def into_vault(self) -> Tuple[GoogleVault, DataConfig]:
        vault = GoogleVault(
            project=self.project,
            credentials_file=self.credentials_file,
            connect_timeout=self.connect_timeout,
        )
        return vault, self.data


def get_config_path() -> Tuple[Path, str]:
    """
    Locate the config file.

    Priority order:
    1. SECRETENV_CONFIG environment variable
    2. Default location: ~/.config/agent-secretenv/config.yml

    Returns:
        Tuple of (path, source) where source is "env" or "default".
        The file may not exist.
    """
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path).expanduser(), "env"
    return default_config_path(), "default"


def load_config_file(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load the YAML config file.

    A missing file at the default location is not an error (everything can
    be given on the command line); a missing file named explicitly is.

    Args:
        config_path: Explicit path; resolved with get_config_path() when None

    Returns:
        Parsed configuration, or an empty dict when no file is present

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    source = "explicit"
    if config_path is None:
        config_path, source = get_config_path()

    if not config_path.exists():
        if source == "default":
            logger.debug(f"No config file at {config_path}")
            return {}
        raise ConfigurationError(f"Configuration file not found at: {config_path}")

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML config at {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read config file at {config_path}: {e}") from e

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ConfigurationError(f"Config file at {config_path} must contain a mapping")

    for section in ("google", "data"):
        if section in config and not isinstance(config[section], dict):
            raise ConfigurationError(f"'{section}' section in {config_path} must be a mapping")

    logger.info(f"Configuration loaded from {config_path}")
    return config


def _data_config(section: Dict[str, Any], json_secrets: Optional[List[str]], prefix: Optional[str]) -> DataConfig:
    if json_secrets:
        names = list(json_secrets)
    else:
        names = section.get("json") or []
        if isinstance(names, str):
            names = [names]
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ConfigurationError("'data.json' must be a secret name or a list of secret names")

    if prefix is None:
        prefix = section.get("prefix")
    if prefix is not None and not isinstance(prefix, str):
        raise ConfigurationError("'data.prefix' must be a string")

    return DataConfig(json=names, prefix=prefix)


def build_google_config(
    project: Optional[str] = None,
    credentials_file: Optional[str] = None,
    connect_timeout: Optional[float] = None,
    json_secrets: Optional[List[str]] = None,
    prefix: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None,
) -> GoogleConfig:
    """
    Merge command line values, environment variables and the config file.

    Priority order for each setting:
    1. Explicit argument (command line flag)
    2. Environment variable (GCP_PROJECT, GOOGLE_APPLICATION_CREDENTIALS)
    3. Config file

    Raises:
        ConfigurationError: If no project is configured or a value is invalid
    """
    config = config or {}
    google = config.get("google") or {}

    project = project or os.getenv(PROJECT_ENV) or google.get("project")
    if not project:
        raise ConfigurationError(
            "Google project not configured. Pass --project, set the GCP_PROJECT "
            "environment variable or add 'google.project' to the config file"
        )

    credentials_file = credentials_file or os.getenv(CREDENTIALS_ENV) or google.get("credentials_file")

    if connect_timeout is None:
        connect_timeout = google.get("connect_timeout", DEFAULT_CONNECT_TIMEOUT)
    try:
        connect_timeout = float(connect_timeout)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid connect timeout: {connect_timeout!r}") from e
    if connect_timeout <= 0:
        raise ConfigurationError(f"Connect timeout must be positive, got {connect_timeout}")

    data = _data_config(config.get("data") or {}, json_secrets, prefix)

    logger.debug(f"Using project: {project}")
    return GoogleConfig(
        project=str(project),
        credentials_file=Path(credentials_file).expanduser() if credentials_file else None,
        connect_timeout=connect_timeout,
        data=data,
    )
