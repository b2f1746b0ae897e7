"""
Configuration Management System for Plant Tag Resolution

This module provides configuration management for the tokenizer, composer,
identity resolver and disposition classifier, loaded from YAML and checked
against a schema per section.

Features:
- YAML settings files with per-environment overrides
- jsonschema validation per settings section
- Settings from PTR_* environment variables
- Scoring weights and composer defaults
- Identity store and disposition route settings

Author: Plant Tag Resolution Team
Version: 1.0.0
"""

import copy
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import jsonschema
import yaml
from dotenv import load_dotenv

from ..common.exceptions import ConfigurationError
from ..utils.scoring import DEFAULT_MISSING_PENALTY, DEFAULT_SOURCE_WEIGHTS, validate_weights

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent

QUALITY_BUCKET_NAMES = ["FinalImport", "DbLimbo", "MdbLimbo"]


@dataclass
class TokenizerSettings:
    """Configuration for token scoring."""

    score_weights: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_SOURCE_WEIGHTS)
    )
    missing_penalty: float = DEFAULT_MISSING_PENALTY


@dataclass
class ComposerSettings:
    """Configuration for discipline/entity defaults and context codes."""

    default_discipline: str = "ME"
    default_entity: str = "SDE"
    discipline_context_codes: Dict[str, str] = field(
        default_factory=lambda: {
            "Mechanical": "ME",
            "Civil": "CI",
            "Structural": "ST",
            "Electrical": "EA",
            "Piping": "PI",
        }
    )
    entity_context_codes: Dict[str, str] = field(default_factory=dict)


@dataclass
class IdentitySettings:
    """Configuration for the identity store."""

    store_path: str = "identity_store.json"
    known_geometry_kinds: List[str] = field(
        default_factory=lambda: [
            "NOZZ",
            "ELCONN",
            "DATUM",
            "CYLI",
            "WORL",
            "SITE",
            "SUB_SITE",
            "ZONE",
            "EQUI",
        ]
    )
    flush_every: int = 100

    def __post_init__(self):
        if not isinstance(self.flush_every, int) or self.flush_every < 1:
            raise ConfigurationError(
                f"identity.flush_every must be a positive integer, got {self.flush_every!r}"
            )


@dataclass
class DispositionSettings:
    """Configuration for disposition routes."""

    routes: Dict[str, str] = field(
        default_factory=lambda: {
            "FinalImport": "ProductionHierarchy",
            "DbLimbo": "DbLimboHierarchy",
            "MdbLimbo": "MdbLimboHierarchy",
        }
    )


@dataclass
class PipelineSettings:
    """Configuration for batch execution and logging."""

    max_workers: int = 4
    maps_dir: str = ""
    log_level: str = "INFO"
    verbose: bool = False


@dataclass
class PipelineConfig:
    """Main configuration class for the tag resolution pipeline."""

    tokenizer: TokenizerSettings = field(default_factory=TokenizerSettings)
    composer: ComposerSettings = field(default_factory=ComposerSettings)
    identity: IdentitySettings = field(default_factory=IdentitySettings)
    disposition: DispositionSettings = field(default_factory=DispositionSettings)
    pipeline: PipelineSettings = field(default_factory=PipelineSettings)
    metadata: Dict[str, Any] = field(default_factory=dict)


class ConfigurationValidator:
    """Validates configuration sections against schemas."""

    def __init__(self):
        """Build the per-section schemas."""
        self.schemas = self._load_schemas()

    def _load_schemas(self) -> Dict[str, Dict[str, Any]]:
        """One JSON schema per settings section."""
        code_map = {"type": "object", "additionalProperties": {"type": "string"}}
        return {
            "tokenizer": {
                "type": "object",
                "properties": {
                    "score_weights": {
                        "type": "object",
                        "additionalProperties": {
                            "type": "number",
                            "minimum": 0,
                            "maximum": 100,
                        },
                    },
                    "missing_penalty": {"type": "number", "minimum": 0, "maximum": 100},
                },
            },
            "composer": {
                "type": "object",
                "properties": {
                    "default_discipline": {"type": "string", "minLength": 1},
                    "default_entity": {"type": "string", "minLength": 1},
                    "discipline_context_codes": code_map,
                    "entity_context_codes": code_map,
                },
            },
            "identity": {
                "type": "object",
                "properties": {
                    "store_path": {"type": "string", "minLength": 1},
                    "known_geometry_kinds": {
                        "type": "array",
                        "items": {"type": "string", "minLength": 1},
                    },
                    "flush_every": {"type": "integer", "minimum": 1},
                },
            },
            "disposition": {
                "type": "object",
                "properties": {
                    "routes": {
                        "type": "object",
                        "propertyNames": {"enum": QUALITY_BUCKET_NAMES},
                        "additionalProperties": {"type": "string"},
                    },
                },
            },
            "pipeline": {
                "type": "object",
                "properties": {
                    "max_workers": {"type": "integer", "minimum": 1, "maximum": 64},
                    "maps_dir": {"type": "string"},
                    "log_level": {
                        "type": "string",
                        "enum": ["DEBUG", "INFO", "WARNING", "ERROR"],
                    },
                    "verbose": {"type": "boolean"},
                },
            },
        }

    def validate_section(self, section: str, section_config: Dict[str, Any]) -> List[str]:
        """Validate one configuration section."""
        errors = []
        schema = self.schemas.get(section)
        if schema is None:
            return [f"Unknown configuration section '{section}'"]
        try:
            jsonschema.validate(section_config, schema)
        except jsonschema.ValidationError as e:
            errors.append(f"{section} validation error: {e.message}")

        if section == "tokenizer" and not errors and "score_weights" in section_config:
            weights = dict(DEFAULT_SOURCE_WEIGHTS)
            weights.update(section_config["score_weights"])
            errors.extend(f"tokenizer: {e}" for e in validate_weights(weights))
        return errors


class ConfigurationManager:
    """Loads, caches and saves pipeline settings files."""

    def __init__(self, config_dir: Union[str, Path] = DEFAULT_CONFIG_DIR):
        """Initialize configuration manager.

        Args:
            config_dir: Directory containing config files. Defaults to the packaged config.
        """
        self.config_dir = Path(config_dir)
        self.validator = ConfigurationValidator()
        self.config_cache: Dict[str, PipelineConfig] = {}

    def load_config(
        self, config_name: str = "default", environment: Optional[str] = None
    ) -> PipelineConfig:
        """
        Load configuration from file.

        Args:
            config_name: Name of the configuration file
            environment: Environment-specific override

        Returns:
            Loaded configuration

        Raises:
            FileNotFoundError: If the base configuration file does not exist
            ConfigurationError: If the merged configuration fails validation
        """
        cache_key = f"{config_name}_{environment or 'default'}"
        if cache_key in self.config_cache:
            return self.config_cache[cache_key]

        config_file = self.config_dir / f"{config_name}.yaml"
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_file}")

        with open(config_file, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

        if environment:
            env_file = self.config_dir / f"{config_name}_{environment}.yaml"
            if env_file.exists():
                with open(env_file, "r", encoding="utf-8") as f:
                    env_data = yaml.safe_load(f) or {}
                config_data = self._merge_configs(config_data, env_data)

        validation_errors = self.validate_config(config_data)
        if validation_errors:
            raise ConfigurationError(f"Configuration validation failed: {validation_errors}")

        config = self._parse_config(config_data)
        self.config_cache[cache_key] = config
        return config

    def save_config(
        self,
        config: PipelineConfig,
        config_name: str = "default",
        environment: Optional[str] = None,
    ) -> str:
        """
        Save configuration to file.

        Returns:
            Path to saved file
        """
        config_data = self._config_to_dict(config)

        if environment:
            config_file = self.config_dir / f"{config_name}_{environment}.yaml"
        else:
            config_file = self.config_dir / f"{config_name}.yaml"

        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            yaml.dump(config_data, f, default_flow_style=False, indent=2)

        logger.info(f"Configuration saved to: {config_file}")
        return str(config_file)

    def validate_config(self, config_data: Dict[str, Any]) -> List[str]:
        """Validate every known section; returns the error messages."""
        errors = []
        for section in self.validator.schemas:
            if section in config_data:
                section_data = config_data[section]
                if not isinstance(section_data, dict):
                    errors.append(f"Section '{section}' must be a mapping")
                    continue
                errors.extend(self.validator.validate_section(section, section_data))
        return errors

    def _parse_config(self, config_data: Dict[str, Any]) -> PipelineConfig:
        """Build a PipelineConfig from validated settings data."""
        defaults = PipelineConfig()

        tokenizer_data = config_data.get("tokenizer", {})
        weights = dict(DEFAULT_SOURCE_WEIGHTS)
        weights.update(tokenizer_data.get("score_weights", {}))
        tokenizer = TokenizerSettings(
            score_weights=weights,
            missing_penalty=tokenizer_data.get("missing_penalty", DEFAULT_MISSING_PENALTY),
        )

        composer_data = config_data.get("composer", {})
        composer = ComposerSettings(
            default_discipline=composer_data.get(
                "default_discipline", defaults.composer.default_discipline
            ),
            default_entity=composer_data.get("default_entity", defaults.composer.default_entity),
            discipline_context_codes=composer_data.get(
                "discipline_context_codes", defaults.composer.discipline_context_codes
            ),
            entity_context_codes=composer_data.get(
                "entity_context_codes", defaults.composer.entity_context_codes
            ),
        )

        identity_data = config_data.get("identity", {})
        identity = IdentitySettings(
            store_path=identity_data.get("store_path", defaults.identity.store_path),
            known_geometry_kinds=identity_data.get(
                "known_geometry_kinds", defaults.identity.known_geometry_kinds
            ),
            flush_every=identity_data.get("flush_every", defaults.identity.flush_every),
        )

        disposition_data = config_data.get("disposition", {})
        routes = dict(defaults.disposition.routes)
        routes.update(disposition_data.get("routes", {}))
        disposition = DispositionSettings(routes=routes)

        pipeline_data = config_data.get("pipeline", {})
        pipeline = PipelineSettings(
            max_workers=pipeline_data.get("max_workers", defaults.pipeline.max_workers),
            maps_dir=pipeline_data.get("maps_dir", defaults.pipeline.maps_dir),
            log_level=pipeline_data.get("log_level", defaults.pipeline.log_level),
            verbose=pipeline_data.get("verbose", defaults.pipeline.verbose),
        )

        return PipelineConfig(
            tokenizer=tokenizer,
            composer=composer,
            identity=identity,
            disposition=disposition,
            pipeline=pipeline,
            metadata=config_data.get("metadata", {}),
        )

    def _config_to_dict(self, config: PipelineConfig) -> Dict[str, Any]:
        """Serialize a PipelineConfig back to plain settings data."""
        return {
            "tokenizer": {
                "score_weights": config.tokenizer.score_weights,
                "missing_penalty": config.tokenizer.missing_penalty,
            },
            "composer": {
                "default_discipline": config.composer.default_discipline,
                "default_entity": config.composer.default_entity,
                "discipline_context_codes": config.composer.discipline_context_codes,
                "entity_context_codes": config.composer.entity_context_codes,
            },
            "identity": {
                "store_path": config.identity.store_path,
                "known_geometry_kinds": config.identity.known_geometry_kinds,
                "flush_every": config.identity.flush_every,
            },
            "disposition": {"routes": config.disposition.routes},
            "pipeline": {
                "max_workers": config.pipeline.max_workers,
                "maps_dir": config.pipeline.maps_dir,
                "log_level": config.pipeline.log_level,
                "verbose": config.pipeline.verbose,
            },
            "metadata": config.metadata,
        }

    def _merge_configs(
        self, base_config: Dict[str, Any], override_config: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Deep-merge an environment override over the base settings."""
        merged = copy.deepcopy(base_config)

        for key, value in override_config.items():
            if (
                key in merged
                and isinstance(merged[key], dict)
                and isinstance(value, dict)
            ):
                merged[key] = self._merge_configs(merged[key], value)
            else:
                merged[key] = value

        return merged

    def create_template_config(self, config_name: str = "template") -> str:
        """
        Create a template configuration file from the defaults.

        Returns:
            Path to created template file
        """
        template = PipelineConfig(
            metadata={
                "version": "1.0.0",
                "created_at": datetime.now().isoformat(),
                "description": "Template configuration for plant tag resolution",
            }
        )
        template_file = self.config_dir / f"{config_name}.yaml"
        template_file.parent.mkdir(parents=True, exist_ok=True)

        with open(template_file, "w", encoding="utf-8") as f:
            yaml.dump(self._config_to_dict(template), f, default_flow_style=False, indent=2)

        logger.info(f"Template configuration created: {template_file}")
        return str(template_file)


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config_from_env() -> PipelineConfig:
    """Load configuration from ``PTR_*`` environment variables (and a ``.env`` file)."""
    load_dotenv()
    config_manager = ConfigurationManager()
    defaults = PipelineConfig()

    config_data = {
        "tokenizer": {
            "missing_penalty": float(
                os.getenv("PTR_MISSING_PENALTY", str(DEFAULT_MISSING_PENALTY))
            ),
        },
        "composer": {
            "default_discipline": os.getenv(
                "PTR_DEFAULT_DISCIPLINE", defaults.composer.default_discipline
            ),
            "default_entity": os.getenv("PTR_DEFAULT_ENTITY", defaults.composer.default_entity),
        },
        "identity": {
            "store_path": os.getenv("PTR_IDENTITY_STORE", defaults.identity.store_path),
            "known_geometry_kinds": _env_list(
                "PTR_KNOWN_GEOMETRY_KINDS", defaults.identity.known_geometry_kinds
            ),
            "flush_every": int(
                os.getenv("PTR_FLUSH_EVERY", str(defaults.identity.flush_every))
            ),
        },
        "pipeline": {
            "max_workers": int(
                os.getenv("PTR_MAX_WORKERS", str(defaults.pipeline.max_workers))
            ),
            "maps_dir": os.getenv("PTR_MAPS_DIR", defaults.pipeline.maps_dir),
            "log_level": os.getenv("PTR_LOG_LEVEL", defaults.pipeline.log_level).upper(),
            "verbose": os.getenv("PTR_VERBOSE", "false").lower() == "true",
        },
        "metadata": {
            "loaded_from": "environment_variables",
            "loaded_at": datetime.now().isoformat(),
        },
    }

    validation_errors = config_manager.validate_config(config_data)
    if validation_errors:
        raise ConfigurationError(
            f"Environment configuration validation failed: {validation_errors}"
        )

    return config_manager._parse_config(config_data)
