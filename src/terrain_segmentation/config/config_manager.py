"""
Configuration Manager

This module loads, validates, overrides and saves extraction configuration
stored as YAML, on top of the structured defaults.
"""

import logging
from typing import Dict, List, Optional, Any, Union
from dataclasses import dataclass
from pathlib import Path
import copy
import time
import yaml
from omegaconf import DictConfig, OmegaConf

from .hydra_config import ExtractionConfig, PRESETS
from .validators import ConfigValidator

logger = logging.getLogger(__name__)


@dataclass
class ConfigChange:
    """Individual configuration change."""
    key: str
    old_value: Any
    new_value: Any
    timestamp: float
    reason: str


class ConfigManager:
    """Configuration manager with validation and change history."""

    def __init__(self, config_dir: Union[str, Path] = "conf"):
        self.config_dir = Path(config_dir)
        self.config_file = self.config_dir / "extraction.yaml"

        # Current configuration
        self._config: Optional[ExtractionConfig] = None
        self._config_dict: Optional[DictConfig] = None

        self.validator = ConfigValidator()
        self.change_history: List[ConfigChange] = []

        logger.info(f"ConfigManager initialized with config dir: {self.config_dir}")

    def load_config(self, config_path: Optional[Union[str, Path]] = None,
                    preset: Optional[str] = None) -> ExtractionConfig:
        """
        Load configuration from file with an optional preset applied.

        Missing files fall back to the defaults. Values from the file are
        merged over the structured defaults, so partial files are allowed.
        """
        config_path = Path(config_path) if config_path else self.config_file

        try:
            config_dict = OmegaConf.structured(ExtractionConfig)

            if config_path.exists():
                with open(config_path, 'r') as f:
                    config_data = yaml.safe_load(f) or {}
                config_dict = OmegaConf.merge(config_dict, OmegaConf.create(config_data))
            else:
                logger.info(f"No configuration at {config_path}, using defaults")

            if preset:
                config_dict = OmegaConf.merge(config_dict, self._get_preset(preset))

            config = self._to_validated_config(config_dict)

            self._config_dict = config_dict
            self._config = config

            logger.info(f"Configuration loaded (preset: {preset or 'none'})")
            return config

        except Exception as e:
            logger.error(f"Failed to load configuration: {e}")
            raise

    def save_config(self, config: Optional[Union[ExtractionConfig, DictConfig]] = None,
                    config_path: Optional[Union[str, Path]] = None) -> Path:
        """Validate and save configuration as YAML."""
        if config is None:
            config = self._config if self._config is not None else ExtractionConfig()

        if isinstance(config, ExtractionConfig):
            config_dict = OmegaConf.structured(config)
        else:
            config_dict = config

        config_obj = self._to_validated_config(config_dict)

        config_path = Path(config_path) if config_path else self.config_file
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w') as f:
            yaml.dump(OmegaConf.to_container(config_dict, enum_to_str=True), f, default_flow_style=False)

        self._config_dict = config_dict
        self._config = config_obj

        logger.info(f"Configuration saved to {config_path}")
        return config_path

    def update_config(self, updates: Dict[str, Any], reason: str = "") -> ExtractionConfig:
        """Update configuration values given as dotted keys."""
        if self._config_dict is None:
            raise ValueError("No configuration loaded")

        updated_config = copy.deepcopy(self._config_dict)

        changes = []
        for key, new_value in updates.items():
            old_value = OmegaConf.select(updated_config, key)
            if old_value != new_value:
                changes.append(ConfigChange(
                    key=key,
                    old_value=old_value,
                    new_value=new_value,
                    timestamp=time.time(),
                    reason=reason
                ))
                OmegaConf.update(updated_config, key, new_value, merge=False)

        if not changes:
            logger.info("No configuration changes detected")
            return self._config

        config = self._to_validated_config(updated_config)

        self._config_dict = updated_config
        self._config = config
        self.change_history.extend(changes)

        logger.info(f"Updated {len(changes)} configuration values")
        return config

    def apply_preset(self, preset: str) -> ExtractionConfig:
        """Merge a named preset into the current configuration."""
        base = self._config_dict if self._config_dict is not None else OmegaConf.structured(ExtractionConfig)
        config_dict = OmegaConf.merge(base, self._get_preset(preset))

        self._config = self._to_validated_config(config_dict)
        self._config_dict = config_dict
        return self._config

    def get_config(self) -> Optional[ExtractionConfig]:
        """Get current configuration."""
        return self._config

    def get_config_dict(self) -> Optional[DictConfig]:
        """Get current configuration as DictConfig."""
        return self._config_dict

    def get_change_history(self) -> List[ConfigChange]:
        """Get configuration change history."""
        return self.change_history.copy()

    @staticmethod
    def available_presets() -> List[str]:
        return sorted(PRESETS)

    def _get_preset(self, preset: str) -> DictConfig:
        if preset not in PRESETS:
            raise ValueError(f"Unknown preset '{preset}', available: {self.available_presets()}")
        return OmegaConf.create(PRESETS[preset])

    def _to_validated_config(self, config_dict: DictConfig) -> ExtractionConfig:
        config = OmegaConf.to_object(config_dict)

        validation_result = self.validator.validate_config(config)
        for warning in validation_result.warnings:
            logger.warning(f"Configuration warning: {warning}")
        if not validation_result.is_valid:
            raise ValueError(f"Configuration validation failed: {validation_result.errors}")

        return config
