"""
Configuration Management Module

Handles loading, validation, and merging of simulation configurations
with support for presets and user-defined overrides.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from dataclasses import dataclass, field, asdict
from copy import deepcopy
import logging

from .generators.numeric import DistributionKind
from .orchestrator import CollectMode, LABEL_OPTIONS

logger = logging.getLogger(__name__)


@dataclass
class GenerationConfig:
    """Configuration for seeding and replication"""
    seed: Optional[int] = None
    trials: int = 1
    collect_mode: str = "list"  # stack, list


@dataclass
class DatasetConfig:
    """Declarative column entries, evaluated in order"""
    columns: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class Config:
    """Main configuration class combining all sub-configurations"""
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    dataset: DatasetConfig = field(default_factory=DatasetConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return asdict(self)

    def merge(self, other: 'Config') -> 'Config':
        """Merge another configuration into this one (other takes precedence)"""
        merged = deepcopy(self)

        for field_name, field_value in asdict(other.generation).items():
            if field_value is not None:
                setattr(merged.generation, field_name, field_value)

        # A column list replaces the base list as a whole
        if other.dataset.columns:
            merged.dataset.columns = deepcopy(other.dataset.columns)

        return merged


class ConfigLoader:
    """Loads and manages configuration from various sources"""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize the configuration loader

        Args:
            config_dir: Directory containing preset YAML files
        """
        if config_dir is None:
            self.config_dir = Path(__file__).parent / "presets"
        else:
            self.config_dir = Path(config_dir)

        self.presets = self._load_presets()

    def _load_presets(self) -> Dict[str, Config]:
        """Load all available preset configurations"""
        presets = {}

        if not self.config_dir.exists():
            logger.warning(f"Config directory not found: {self.config_dir}")
            return presets

        for preset_file in sorted(self.config_dir.glob("*.yaml")):
            preset_name = preset_file.stem
            presets[preset_name] = self.load_from_file(preset_file)
            logger.debug(f"Loaded preset: {preset_name}")

        return presets

    def load_from_file(self, filepath: Union[str, Path]) -> Config:
        """
        Load configuration from a YAML file

        Args:
            filepath: Path to the YAML configuration file

        Returns:
            Config object
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        with open(filepath, 'r') as f:
            config_dict = yaml.safe_load(f) or {}

        return self._dict_to_config(config_dict)

    def load_from_dict(self, config_dict: Dict[str, Any]) -> Config:
        """
        Load configuration from a dictionary

        Args:
            config_dict: Configuration dictionary

        Returns:
            Config object
        """
        return self._dict_to_config(config_dict)

    def load_preset(self, preset_name: str) -> Config:
        """
        Load a preset configuration by name

        Args:
            preset_name: Name of the preset (e.g., 'two_groups')

        Returns:
            Config object
        """
        if preset_name not in self.presets:
            available = ", ".join(self.presets.keys())
            raise ValueError(f"Preset '{preset_name}' not found. Available: {available}")

        return deepcopy(self.presets[preset_name])

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> Config:
        """Convert dictionary to Config object"""
        config = Config()

        if 'generation' in config_dict:
            config.generation = GenerationConfig(**config_dict['generation'])

        if 'dataset' in config_dict:
            config.dataset = DatasetConfig(**config_dict['dataset'])

        return config

    def merge_configs(self, base: Config, override: Union[Config, Dict[str, Any], str]) -> Config:
        """
        Merge configurations with override taking precedence

        A dictionary override only replaces the keys it names; a Config or
        preset override is complete, so its non-None values all win.

        Args:
            base: Base configuration
            override: Override configuration (Config object, dict, or preset name)

        Returns:
            Merged Config object
        """
        if isinstance(override, dict):
            merged = base.to_dict()
            merged['generation'].update(override.get('generation') or {})
            columns = (override.get('dataset') or {}).get('columns')
            if columns:
                merged['dataset']['columns'] = deepcopy(columns)
            return self.load_from_dict(merged)

        if isinstance(override, str):
            override = self.load_preset(override)

        return base.merge(override)

    def save_config(self, config: Config, filepath: Union[str, Path]):
        """
        Save configuration to a YAML file

        Args:
            config: Configuration to save
            filepath: Path to save the file
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to: {filepath}")

    def list_presets(self) -> List[str]:
        """Get list of available preset names"""
        return list(self.presets.keys())


class ConfigValidator:
    """Validates configuration parameters"""

    @staticmethod
    def validate(config: Config) -> tuple[bool, List[str]]:
        """
        Validate configuration parameters

        Args:
            config: Configuration to validate

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        trials = config.generation.trials
        if isinstance(trials, bool) or not isinstance(trials, int) or trials <= 0:
            errors.append("generation.trials must be a positive integer")

        valid_modes = [mode.value for mode in CollectMode]
        if str(config.generation.collect_mode).lower() not in valid_modes:
            errors.append(f"generation.collect_mode must be one of {valid_modes}")

        seed = config.generation.seed
        if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
            errors.append("generation.seed must be an integer")

        if not config.dataset.columns:
            errors.append("dataset.columns must define at least one column")

        seen = set()
        for index, column in enumerate(config.dataset.columns):
            name = column.get('name') if isinstance(column, dict) else None
            label = name or f"columns[{index}]"
            if name and name in seen:
                errors.append(f"{label}: duplicate column name")
            seen.add(name)

            _, column_errors = ConfigValidator.validate_column_config(label, column)
            errors.extend(column_errors)

        return len(errors) == 0, errors

    @staticmethod
    def validate_column_config(column_name: str, column_config: Dict[str, Any]) -> tuple[bool, List[str]]:
        """
        Validate a single declarative column entry

        Args:
            column_name: Name used in error messages
            column_config: Column configuration dictionary

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        if not isinstance(column_config, dict):
            return False, [f"{column_name}: column entry must be a mapping"]

        if not column_config.get('name'):
            errors.append(f"{column_name}: name is required")

        has_distribution = 'distribution' in column_config
        has_labels = 'labels' in column_config

        if has_distribution == has_labels:
            errors.append(f"{column_name}: define exactly one of 'distribution' or 'labels'")

        elif has_distribution:
            valid_distributions = [kind.value for kind in DistributionKind]
            if str(column_config['distribution']).lower() not in valid_distributions:
                errors.append(f"{column_name}: distribution must be one of {valid_distributions}")
            if 'count' not in column_config:
                errors.append(f"{column_name}: count is required for distribution columns")

        else:
            labels = column_config['labels']
            if not isinstance(labels, list):
                errors.append(f"{column_name}: labels must be a list")
            elif len(labels) == 0:
                errors.append(f"{column_name}: labels cannot be empty")

            unknown = set(column_config) - {'name', 'labels', *LABEL_OPTIONS}
            if unknown:
                errors.append(f"{column_name}: unknown label options {sorted(unknown)}")

        return len(errors) == 0, errors


def get_default_config() -> Config:
    """Get the default configuration: two groups of three normal responses"""
    config = Config()
    config.dataset.columns = [
        {'name': 'group', 'labels': ['a', 'b'], 'each': 3},
        {'name': 'response', 'distribution': 'normal', 'count': 6,
         'mean': [5, 5, 5, 8, 8, 8], 'sd': 2},
    ]
    return config
