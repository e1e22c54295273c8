"""
Configuration Validators

This module provides validation for extraction configuration with type
checking, range validation and cross-parameter consistency checks.
"""

from typing import Dict, List, Optional, Any
from dataclasses import dataclass, asdict

from .hydra_config import ExtractionConfig


@dataclass
class ValidationResult:
    """Result of configuration validation."""
    is_valid: bool
    errors: List[str]
    warnings: List[str]

    def add_error(self, error: str):
        """Add validation error."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str):
        """Add validation warning."""
        self.warnings.append(warning)


class ConfigValidator:
    """Extraction configuration validator."""

    def __init__(self):
        self.validation_rules = {
            # Sliding window rules
            'sliding_window.kernel_size': self._validate_kernel_size,
            'sliding_window.planarity_erosion': self._validate_non_negative_int,
            'sliding_window.connectivity': self._validate_connectivity,
            'sliding_window.plane_patch_error_threshold': self._validate_positive_float,
            'sliding_window.plane_inclination_threshold_degrees': self._validate_inclination,
            'sliding_window.min_number_points_per_label': self._validate_non_negative_int,
            'sliding_window.global_plane_fit_distance_error_threshold': self._validate_positive_float,
            'sliding_window.global_plane_fit_angle_error_threshold_degrees': self._validate_angle,

            # RANSAC rules
            'ransac.probability': self._validate_probability,
            'ransac.max_iterations': self._validate_positive_int,
            'ransac.seed': self._validate_non_negative_int,
            'ransac.min_points': self._validate_positive_int,
            'ransac.epsilon': self._validate_positive_float,
            'ransac.cluster_epsilon': self._validate_positive_float,
            'ransac.normal_threshold': self._validate_inclination,
        }

    def validate_config(self, config: ExtractionConfig) -> ValidationResult:
        """Validate complete configuration."""
        result = ValidationResult(is_valid=True, errors=[], warnings=[])

        self._validate_structure(config, result)
        if not result.is_valid:
            return result

        self._validate_fields(config, result)
        self._validate_dependencies(config, result)

        return result

    def _validate_structure(self, config: ExtractionConfig, result: ValidationResult):
        """Validate configuration structure."""
        for section in ('sliding_window', 'ransac'):
            if not hasattr(config, section):
                result.add_error(f"Missing required configuration section: {section}")

        if not getattr(config, 'layer_name', None):
            result.add_error("layer_name must be a non-empty string")

    def _validate_fields(self, config: ExtractionConfig, result: ValidationResult):
        """Validate individual configuration fields."""
        config_dict = asdict(config)

        for field_path, validator in self.validation_rules.items():
            value = self._get_nested_value(config_dict, field_path)
            if value is not None:
                error = validator(value, field_path)
                if error:
                    result.add_error(error)

    def _validate_dependencies(self, config: ExtractionConfig, result: ValidationResult):
        """Validate relations between parameters."""
        sliding_window = config.sliding_window
        ransac = config.ransac

        if sliding_window.include_ransac_refinement:
            if ransac.normal_threshold > sliding_window.global_plane_fit_angle_error_threshold_degrees:
                result.add_warning("RANSAC normal threshold is looser than the global angle threshold, "
                                   "refined planes may not pass the global test")

            if ransac.min_points > sliding_window.min_number_points_per_label > 0:
                result.add_warning("RANSAC min_points exceeds min_number_points_per_label, "
                                   "small regions will be removed by refinement")

        if sliding_window.planarity_erosion * 2 + 1 > sliding_window.kernel_size * 3:
            result.add_warning("Large erosion compared to kernel size removes most planar cells")

    def _get_nested_value(self, config_dict: Dict[str, Any], path: str) -> Optional[Any]:
        value: Any = config_dict
        for key in path.split('.'):
            if not isinstance(value, dict) or key not in value:
                return None
            value = value[key]
        return value

    def _validate_positive_int(self, value: Any, field_path: str) -> Optional[str]:
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            return f"{field_path} must be a positive integer"
        return None

    def _validate_non_negative_int(self, value: Any, field_path: str) -> Optional[str]:
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            return f"{field_path} must be a non-negative integer"
        return None

    def _validate_positive_float(self, value: Any, field_path: str) -> Optional[str]:
        if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
            return f"{field_path} must be a positive number"
        return None

    def _validate_kernel_size(self, value: Any, field_path: str) -> Optional[str]:
        if not isinstance(value, int) or value < 3 or value % 2 == 0:
            return f"{field_path} must be an odd integer >= 3"
        return None

    def _validate_connectivity(self, value: Any, field_path: str) -> Optional[str]:
        if value not in (4, 8):
            return f"{field_path} must be 4 or 8"
        return None

    def _validate_inclination(self, value: Any, field_path: str) -> Optional[str]:
        if not isinstance(value, (int, float)) or not 0 < value <= 90:
            return f"{field_path} must be in (0, 90] degrees"
        return None

    def _validate_angle(self, value: Any, field_path: str) -> Optional[str]:
        if not isinstance(value, (int, float)) or not 0 <= value <= 180:
            return f"{field_path} must be in [0, 180] degrees"
        return None

    def _validate_probability(self, value: Any, field_path: str) -> Optional[str]:
        if not isinstance(value, (int, float)) or not 0 < value < 1:
            return f"{field_path} must be in (0, 1)"
        return None
