"""Configuration models and loaders for cloudroot."""

from .loader import ConfigError, DEFAULT_CONFIG_PATH, dump_example_config, load_config
from .models import ChannelConfig, CloudRootConfig, LoggingConfig, ResolverConfig

__all__ = [
    "ChannelConfig",
    "CloudRootConfig",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "LoggingConfig",
    "ResolverConfig",
    "dump_example_config",
    "load_config",
]
