"""Configuration module for icxclient."""

from icxclient.config.loader import get_config_path, load_config, save_config
from icxclient.config.schema import ClientConfig, EndpointConfig, KeystoreConfig
from icxclient.config.access import clear_config_cache, get_config, set_config

__all__ = [
    "ClientConfig",
    "EndpointConfig",
    "KeystoreConfig",
    "load_config",
    "save_config",
    "get_config_path",
    "get_config",
    "clear_config_cache",
    "set_config",
]
