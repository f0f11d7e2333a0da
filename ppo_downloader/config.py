"""
Configuration management for PPO Downloader.

Supports loading and saving query presets from YAML files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ppo_downloader.query import FilterSet
from ppo_downloader.utils import get_logger


class Config:
    """
    Configuration manager for PPO Downloader.

    Handles loading and saving filter sets from YAML files.

    Example:
        # Load from file
        config = Config.load("oaks.yaml")
        filter_set = config.get_filter_set()

        # Save to file
        config = Config(filter_set=filter_set, output_format="excel")
        config.save("oaks.yaml")
    """

    def __init__(
        self,
        filter_set: FilterSet | None = None,
        output_format: str = "csv",
        output_path: str | None = None,
    ):
        """
        Initialize configuration.

        Args:
            filter_set: FilterSet instance
            output_format: Output format (csv, excel, geojson)
            output_path: Default output file path
        """
        self.filter_set = filter_set
        self.output_format = output_format
        self.output_path = output_path
        self.logger = get_logger()

    @classmethod
    def load(cls, path: str | Path) -> Config:
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If file doesn't exist
            yaml.YAMLError: If file is invalid YAML
            ValidationError: If the filters are invalid
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not data:
            raise ValueError(f"Empty config file: {path}")

        filter_set = FilterSet.from_dict(data)

        output = data.get("output") or {}

        return cls(
            filter_set=filter_set,
            output_format=output.get("format", "csv"),
            output_path=output.get("filename"),
        )

    def save(self, path: str | Path) -> None:
        """
        Save configuration to a YAML file.

        Args:
            path: Path to save to
        """
        path = Path(path)

        if self.filter_set is None:
            raise ValueError("No filter configuration to save")

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

        self.logger.info(f"Configuration saved to: {path}")

    def get_filter_set(self) -> FilterSet:
        """
        Get the filter set.

        Raises:
            ValueError: If no filter set is configured
        """
        if self.filter_set is None:
            raise ValueError("No filter configuration set")
        return self.filter_set

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result = {}

        if self.filter_set:
            result.update(self.filter_set.to_dict())

        result["output"] = {"format": self.output_format}

        if self.output_path:
            result["output"]["filename"] = self.output_path

        return result


# Default config directory
DEFAULT_CONFIG_DIR = Path.home() / ".ppo_downloader"


def get_config_dir() -> Path:
    """
    Get the configuration directory, creating it if needed.

    Returns:
        Path to config directory
    """
    DEFAULT_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return DEFAULT_CONFIG_DIR


def list_presets() -> list[str]:
    """
    List available preset configurations.

    Returns:
        List of preset names (without .yaml extension)
    """
    return sorted(path.stem for path in get_config_dir().glob("*.yaml"))


def load_preset(name: str) -> Config:
    """
    Load a preset configuration by name.

    Raises:
        FileNotFoundError: If preset doesn't exist
    """
    return Config.load(get_config_dir() / f"{name}.yaml")


def save_preset(name: str, config: Config) -> Path:
    """
    Save a configuration as a preset.

    Args:
        name: Preset name (without .yaml extension)
        config: Config instance to save

    Returns:
        Path to saved file
    """
    path = get_config_dir() / f"{name}.yaml"
    config.save(path)
    return path


def delete_preset(name: str) -> bool:
    """
    Delete a preset configuration.

    Returns:
        True if deleted, False if not found
    """
    path = get_config_dir() / f"{name}.yaml"

    if path.exists():
        path.unlink()
        return True

    return False


# Example configuration template
EXAMPLE_CONFIG = """# PPO Downloader Configuration
# Save this file and use with: ppo-data --config my_search.yaml

taxonomy:
  genus: Quercus
  # specific_epithet: alba

filters:
  from_year: 1979
  to_year: 2004
  # Plant stage from the Plant Phenology Ontology:
  # term_id: obo:PPO_0002324
  # Day of year range (1-366):
  # from_day: 1
  # to_day: 60
  # Bounding box as lat,long,lat,long:
  # bbox: 44,-124,46,-122
  # limit: 100

output:
  format: csv  # csv, excel, or geojson
  filename: quercus_ppo.csv
"""


def create_example_config(path: str | Path | None = None) -> Path:
    """
    Create an example configuration file.

    Args:
        path: Where to save (default: config_dir/example.yaml)

    Returns:
        Path to created file
    """
    if path is None:
        path = get_config_dir() / "example.yaml"
    else:
        path = Path(path)

    with open(path, "w", encoding="utf-8") as f:
        f.write(EXAMPLE_CONFIG)

    return path
