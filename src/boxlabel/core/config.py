"""Configuration management for boxlabel."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

# Default configuration file path
DEFAULT_CONFIG_PATH = Path("config.yaml")

DEFAULT_IMAGE_EXTENSIONS = [".png", ".jpg", ".jpeg", ".bmp", ".webp", ".tif"]


@dataclass
class AppConfig:
    """
    Application configuration settings.

    Stores user preferences and editing thresholds.
    """

    default_directory: str = ""
    click_tolerance: float = 8.0  # Pixels around a box that still count as a hit (1-30)
    min_box_pixels: float = 6.0  # Smallest on-screen width/height of a new box (1-40)
    history_limit: int = 200  # Maximum undo snapshots per image
    labels_file_name: str = "_darknet.labels"
    image_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_IMAGE_EXTENSIONS))
    line_thickness: int = 2
    font_size: int = 10

    def __post_init__(self) -> None:
        self.click_tolerance = min(30.0, max(1.0, float(self.click_tolerance)))
        self.min_box_pixels = min(40.0, max(1.0, float(self.min_box_pixels)))
        self.history_limit = max(1, int(self.history_limit))
        self.image_extensions = [
            ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            for ext in self.image_extensions
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return {
            "defaultDirectory": self.default_directory,
            "clickTolerance": self.click_tolerance,
            "minBoxPixels": self.min_box_pixels,
            "historyLimit": self.history_limit,
            "labelsFileName": self.labels_file_name,
            "imageExtensions": self.image_extensions,
            "lineThickness": self.line_thickness,
            "fontSize": self.font_size,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        """Create config from dictionary."""
        return cls(
            default_directory=data.get("defaultDirectory", ""),
            click_tolerance=data.get("clickTolerance", 8.0),
            min_box_pixels=data.get("minBoxPixels", 6.0),
            history_limit=data.get("historyLimit", 200),
            labels_file_name=data.get("labelsFileName", "_darknet.labels"),
            image_extensions=data.get("imageExtensions", list(DEFAULT_IMAGE_EXTENSIONS)),
            line_thickness=data.get("lineThickness", 2),
            font_size=data.get("fontSize", 10),
        )


class ConfigManager:
    """
    Manager for loading and saving application configuration.

    Handles YAML serialization and provides a clean interface
    for configuration access.
    """

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Optional[AppConfig] = None

    @property
    def config(self) -> AppConfig:
        """Get the current configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self) -> AppConfig:
        """
        Load configuration from file.

        Returns:
            AppConfig instance with loaded or default values
        """
        if not self.config_path.exists():
            logger.info(f"Config file not found at {self.config_path}, using defaults")
            return AppConfig()

        try:
            with open(self.config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                logger.error(f"Config file {self.config_path} is not a mapping")
                return AppConfig()
            logger.info(f"Loaded configuration from {self.config_path}")
            return AppConfig.from_dict(data)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing config file: {e}")
            return AppConfig()
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error loading config: {e}")
            return AppConfig()

    def save(self, config: Optional[AppConfig] = None) -> bool:
        """
        Save configuration to file.

        Args:
            config: Configuration to save, or use current config

        Returns:
            True if save was successful
        """
        if config is not None:
            self._config = config

        if self._config is None:
            logger.warning("No configuration to save")
            return False

        try:
            with open(self.config_path, "w") as f:
                yaml.dump(self._config.to_dict(), f, default_flow_style=False)
            logger.info(f"Saved configuration to {self.config_path}")
            return True
        except OSError as e:
            logger.error(f"Error saving config: {e}")
            return False

    def update(self, **kwargs: Any) -> None:
        """
        Update configuration with new values.

        Args:
            **kwargs: Key-value pairs to update
        """
        config = self.config
        for key, value in kwargs.items():
            if hasattr(config, key):
                setattr(config, key, value)
            else:
                logger.warning(f"Unknown config key: {key}")
        self.save()
