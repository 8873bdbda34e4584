"""Configuration loading for EnvGuard."""
from .loader import DEFAULT_CONFIG, ConfigLoadResult, EnvGuardConfig, load_config

__all__ = ["DEFAULT_CONFIG", "ConfigLoadResult", "EnvGuardConfig", "load_config"]
