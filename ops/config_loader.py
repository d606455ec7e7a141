"""
Configuration Loader for the Popular Vote Forecast Pipeline

This module provides a centralized way to load and access configuration
settings from the config.yaml file.

Usage:
    from ops.config_loader import Config

    config = Config()
    popvote_csv = config.get_input_path('popvote_csv')
    maps_dir = config.get_output_dir('maps')
    base_year = config.get('forecast.base_year')
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml  # type: ignore[import-untyped]
from loguru import logger


class Config:
    """Configuration manager for the popular vote forecast pipeline."""

    # Default values that can be overridden in config
    DEFAULTS: Dict[str, Any] = {
        "columns": {
            "state_name": "name",
        },
        "analysis": {"two_party_tolerance": 0.5},
        "forecast": {
            "base_year": 2020,
            "target_year": 2024,
            "weights": [0.75, 0.25],
        },
        "visualization": {
            "map_dpi": 150,
            "figure_max_width": 14,
            "democrat_color": "#104E8B",  # dodgerblue4
            "republican_color": "#FF3030",  # firebrick1
            "margin_limit": 50,
            "margin_breaks": [-50, -25, 0, 25, 50],
            "facet_start_year": 1980,
        },
    }

    def __init__(
        self,
        config_file: Optional[Union[str, Path]] = None,
        project_root_override: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to config file. If None, looks for:
                        1. Environment variable PIPELINE_CONFIG_PATH
                        2. config.yaml in current directory
                        3. ops/config.yaml (when running from the project root)
            project_root_override: Override project root detection (useful for temp configs)
        """
        if config_file is None:
            env_config = os.environ.get("PIPELINE_CONFIG_PATH")
            if env_config and Path(env_config).exists():
                config_file = env_config
                logger.debug(f"Using config from environment: {config_file}")
            elif Path("config.yaml").exists():
                config_file = "config.yaml"
            elif Path("ops/config.yaml").exists():
                config_file = "ops/config.yaml"
                logger.debug("Using ops/config.yaml from project root")
            else:
                raise FileNotFoundError(
                    "No config.yaml found. Check current directory or set PIPELINE_CONFIG_PATH"
                )

        self.config_path = Path(config_file).resolve()
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        if project_root_override:
            self.project_root = Path(project_root_override).resolve()
            logger.debug(f"Using project root override: {self.project_root}")
        elif os.environ.get("PROJECT_ROOT_OVERRIDE"):
            self.project_root = Path(os.environ["PROJECT_ROOT_OVERRIDE"]).resolve()
            logger.debug(f"Using project root from environment: {self.project_root}")
        else:
            self.project_root = self._find_project_root()

        logger.debug(f"Loading config from: {self.config_path}")
        logger.debug(f"Project root: {self.project_root}")

        with open(self.config_path, "r") as f:
            self.data: Dict[str, Any] = yaml.safe_load(f) or {}

        self._setup_paths()

    def _setup_paths(self) -> None:
        """Setup base directory paths relative to project root."""
        dirs = self.data.get("directories", {})

        self.maps_dir = self.project_root / dirs.get("maps", "data/maps")

    def get_input_path(self, filename_key: str) -> Path:
        """
        Get full path to an input file. The path is taken directly from config.yaml
        and joined with the project root.

        Args:
            filename_key: Key for the filename in input_files

        Returns:
            Full absolute path to the input file
        """
        relative_path_str = self.data.get("input_files", {}).get(filename_key)
        if not relative_path_str:
            raise ValueError(
                f"Input filename key '{filename_key}' not found in config: input_files"
            )
        return self.project_root / relative_path_str

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation with intelligent defaults.

        Args:
            key_path: Dot-separated path to the configuration value
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key_path.split(".")

        value: Any = self.data
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                value = None
                break

        if value is None:
            value = self.DEFAULTS
            for key in keys:
                if isinstance(value, dict) and key in value:
                    value = value[key]
                else:
                    return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set a configuration value using dot notation, creating sections as needed."""
        keys = key_path.split(".")
        current = self.data
        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]
        current[keys[-1]] = value

        if keys[0] == "directories":
            self._setup_paths()

    def get_output_dir(self, dir_key: str) -> Path:
        """
        Get full path to an output directory, creating it if needed.

        Args:
            dir_key: Directory key ('maps')

        Returns:
            Full path to the directory
        """
        if dir_key == "maps":
            directory = self.maps_dir
        else:
            raise ValueError(f"Unknown directory key: {dir_key}")

        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def get_column_name(self, column_key: str) -> str:
        """Get column name with intelligent defaults."""
        result = self.get(f"columns.{column_key}")
        if isinstance(result, str):
            return result
        raise ValueError(f"Column name not found or not a string: {column_key}")

    def get_visualization_setting(self, setting_key: str) -> Any:
        """Get visualization setting with intelligent defaults."""
        return self.get(f"visualization.{setting_key}")

    def get_forecast_weights(self) -> List[float]:
        """Get the (current cycle, prior cycle) forecast weights."""
        weights = self.get("forecast.weights")
        if not isinstance(weights, (list, tuple)) or len(weights) != 2:
            raise ValueError(f"forecast.weights must be a pair of numbers, got: {weights!r}")
        return [float(w) for w in weights]

    def validate_input_files(self) -> Dict[str, bool]:
        """Validate that input files exist."""
        results: Dict[str, bool] = {}
        for filename_key in self.data.get("input_files", {}):
            results[filename_key] = self.get_input_path(filename_key).exists()
        return results

    def print_config_summary(self) -> None:
        """Print a summary of the current configuration."""
        logger.debug("📋 Configuration Summary")
        logger.debug("=" * 50)
        logger.debug(f"Project: {self.get('project_name', 'Unknown')}")
        logger.debug(f"Description: {self.get('description', 'No description')}")
        logger.debug(f"Config file: {self.config_path}")
        logger.debug(
            f"Forecast: {self.get('forecast.base_year')} -> {self.get('forecast.target_year')} "
            f"weights={self.get('forecast.weights')}"
        )

        logger.debug("📊 Input Files:")
        for file_key, exists in self.validate_input_files().items():
            status = "✅" if exists else "❌"
            logger.debug(f"  {status} {file_key}")

    def _find_project_root(self) -> Path:
        """Find the project root directory by looking for characteristic files/directories."""
        current = self.config_path.parent

        project_markers = ["analysis", "processing", "data", "ops", "pyproject.toml", ".git"]

        for _ in range(5):
            markers_found = sum(1 for marker in project_markers if (current / marker).exists())
            if markers_found >= 2:
                return current

            parent = current.parent
            if parent == current:
                break
            current = parent

        # Fallback: if config is in ops/, project root is parent
        if self.config_path.parent.name == "ops":
            return self.config_path.parent.parent

        logger.warning(
            f"Could not reliably detect project root, using config directory: {self.config_path.parent}"
        )
        return self.config_path.parent
