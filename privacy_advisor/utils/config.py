"""Configuration utilities."""
import logging
import os
import re
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..api.models import ApiVersion

logger = logging.getLogger(__name__)

# ${NAME} or ${NAME:-fallback}
ENV_REFERENCE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")

CONFIG_DIR = "config"


class ClientSettings(BaseSettings):
    """Client configuration, read from ``PRIVACY_ADVISOR_*`` variables or ``.env``."""
    api_origin: str = "http://localhost:5000"
    use_api_v2: bool = True
    request_timeout: float = 30.0
    app_origin: Optional[str] = None
    history_path: str = "scan_history.db"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="PRIVACY_ADVISOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def api_version(self) -> ApiVersion:
        """Contract version, fixed for the lifetime of these settings."""
        return ApiVersion.V2 if self.use_api_v2 else ApiVersion.V1

    @classmethod
    def from_yaml(cls, config_path: str) -> "ClientSettings":
        """
        Load settings from the ``client`` section of a YAML file.

        Values in the file win over the environment. Empty values, including
        a ``${VAR}`` reference to an unset variable, fall back to the
        environment and then to the defaults.
        """
        config = load_yaml_config(config_path) or {}
        section = config.get("client", config) or {}
        return cls(**{key: value for key, value in section.items() if value is not None})


def load_yaml_config(config_path: str) -> Dict[str, Any]:
    """Load a YAML file and expand environment references in its string values."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    return expand_env_refs(config)


def expand_env_refs(obj: Any) -> Any:
    """
    Recursively expand ``${VAR}`` and ``${VAR:-fallback}`` references.

    A value that is exactly one reference to an unset variable without a
    fallback becomes None. Inside longer strings such a reference expands
    to an empty string.
    """
    if isinstance(obj, dict):
        return {k: expand_env_refs(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [expand_env_refs(item) for item in obj]
    if not isinstance(obj, str):
        return obj

    whole = ENV_REFERENCE.fullmatch(obj)
    if whole is not None:
        name, fallback = whole.groups()
        value = os.getenv(name, fallback)
        if value is None:
            logger.debug(f"Config references unset variable {name}")
        return value

    return ENV_REFERENCE.sub(lambda m: os.getenv(m.group(1), m.group(2) or ""), obj)


def get_config_path(filename: str) -> Path:
    """``./config/<filename>``, else ``../config/<filename>``, else the former."""
    candidates = [base / CONFIG_DIR / filename for base in (Path.cwd(), Path.cwd().parent)]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return candidates[0]
