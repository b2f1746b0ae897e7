"""Pipeline configuration and packaged default code tables."""

from .configuration_manager import (
    ComposerSettings,
    ConfigurationManager,
    ConfigurationValidator,
    DispositionSettings,
    IdentitySettings,
    PipelineConfig,
    PipelineSettings,
    TokenizerSettings,
    load_config_from_env,
)

__all__ = [
    "ComposerSettings",
    "ConfigurationManager",
    "ConfigurationValidator",
    "DispositionSettings",
    "IdentitySettings",
    "PipelineConfig",
    "PipelineSettings",
    "TokenizerSettings",
    "load_config_from_env",
]
