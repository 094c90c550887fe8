"""Configuration management for Tonal Beat components."""

from typing import Dict, Any, Optional
import copy
import json
import os
from pathlib import Path

from ..logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIGS: Dict[str, Dict[str, Any]] = {
    "beat_detector": {
        "history_size": 40,
        "cooldown_ms": 100.0,
        "fft_size": 2048,
        "smoothing_time_constant": 0.8,
        "bands": {
            "kick": {"low_hz": 20.0, "high_hz": 150.0, "threshold": 1.3},
            "snare": {"low_hz": 150.0, "high_hz": 500.0, "threshold": 1.2},
            "hihat": {"low_hz": 5000.0, "high_hz": 12000.0, "threshold": 1.15},
        },
    },
    "chord_detector": {
        "fft_size": 4096,
        "smoothing_time_constant": 0.8,
        "amplitude_threshold": 0.3,
        "confidence_threshold": 0.6,
        "min_frequency": 80.0,
        "max_frequency": 2000.0,
        "max_peaks": 6,
        "reference_frequency": 440.0,
    },
    "audio_input": {
        "sample_rate": 44100,
        "frames_per_buffer": 1024,
        "channels": 1,
    },
}


class ConfigManager:
    """Configuration manager for Tonal Beat components."""

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory to store configuration files, or None to use default
        """
        if config_dir is None:
            # Use ~/.config/tonal_beat by default
            home = os.path.expanduser("~")
            config_dir = os.path.join(home, ".config", "tonal_beat")

        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.default_configs = copy.deepcopy(DEFAULT_CONFIGS)

        # Load existing configurations or create default ones
        self.configs: Dict[str, Dict[str, Any]] = {}
        for config_name, default_config in self.default_configs.items():
            self.configs[config_name] = self.load_config(config_name, default_config)

    def load_config(self, name: str, default_config: Dict[str, Any]) -> Dict[str, Any]:
        """Load configuration from file or create default.

        Args:
            name: Configuration name
            default_config: Default configuration to use if file doesn't exist

        Returns:
            Configuration dictionary
        """
        config_file = self.config_dir / f"{name}.json"

        if not config_file.exists():
            config = copy.deepcopy(default_config)
            self.save_config(name, config)
            return config

        try:
            with open(config_file, "r") as f:
                config = json.load(f)
            if not isinstance(config, dict):
                raise ValueError("top-level JSON value must be an object")
            logger.info(f"Loaded configuration from {config_file}")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading configuration from {config_file}: {e}")
            return copy.deepcopy(default_config)

        return _merge_defaults(config, default_config)

    def save_config(self, name: str, config: Dict[str, Any]) -> bool:
        """Save configuration to file.

        Args:
            name: Configuration name
            config: Configuration dictionary

        Returns:
            True if saved successfully, False otherwise
        """
        config_file = self.config_dir / f"{name}.json"

        try:
            with open(config_file, "w") as f:
                json.dump(config, f, indent=2)
            logger.info(f"Saved configuration to {config_file}")
            return True
        except (OSError, TypeError) as e:
            logger.error(f"Error saving configuration to {config_file}: {e}")
            return False

    def get_config(self, name: str) -> Dict[str, Any]:
        """Get a deep copy of a configuration by name.

        Args:
            name: Configuration name

        Returns:
            Configuration dictionary (empty if unknown)
        """
        return copy.deepcopy(self.configs.get(name, {}))

    def update_config(self, name: str, updates: Dict[str, Any]) -> bool:
        """Update configuration and save to file.

        Nested dictionaries (such as ``bands``) are merged key by key.

        Args:
            name: Configuration name
            updates: Dictionary of updates to apply

        Returns:
            True if updated and saved successfully, False otherwise
        """
        if name not in self.configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        _deep_update(self.configs[name], updates)
        return self.save_config(name, self.configs[name])

    def reset_config(self, name: str) -> bool:
        """Reset configuration to default.

        Args:
            name: Configuration name

        Returns:
            True if reset successfully, False otherwise
        """
        if name not in self.default_configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name] = copy.deepcopy(self.default_configs[name])
        return self.save_config(name, self.configs[name])


def _merge_defaults(config: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Back-fill keys missing from ``config`` with their defaults, recursively."""
    for key, value in defaults.items():
        if key not in config:
            config[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(config[key], dict):
            _merge_defaults(config[key], value)
    return config


def _deep_update(target: Dict[str, Any], updates: Dict[str, Any]) -> None:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = value
