"""
Configuration Management System

This module provides structured configuration with Hydra registration,
terrain presets, YAML persistence and validation.
"""

from .hydra_config import ExtractionConfig, LogLevel, PRESETS, register_configs
from .validators import ConfigValidator, ValidationResult
from .config_manager import ConfigManager, ConfigChange

__all__ = [
    'ExtractionConfig',
    'LogLevel',
    'PRESETS',
    'register_configs',
    'ConfigValidator',
    'ValidationResult',
    'ConfigManager',
    'ConfigChange'
]
