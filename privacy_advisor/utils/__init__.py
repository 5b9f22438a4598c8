"""Utilities package initialization."""
from .config import load_yaml_config, get_config_path, ClientSettings

__all__ = ["load_yaml_config", "get_config_path", "ClientSettings"]
