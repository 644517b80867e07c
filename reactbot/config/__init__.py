"""Configuration module for reactbot."""

from reactbot.config.loader import get_config_path, load_config
from reactbot.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
