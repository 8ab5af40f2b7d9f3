"""Configuration file management for ipa-meta."""

import re
from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_PLACEHOLDER_PATTERN = r"\$\(|%[@{]"


@dataclass
class Config:
    """Configuration for metadata extraction and archive retrieval."""

    # Display names matching this are treated as unresolved build variables
    placeholder_pattern: str = DEFAULT_PLACEHOLDER_PATTERN

    # Localization directory tried when CFBundleDevelopmentRegion is missing
    default_region: str = "en"

    # Object storage
    cdn_base_url: str = "https://cdn.rudownload.win/"
    fetch_timeout: int = 30

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        try:
            re.compile(self.placeholder_pattern)
        except re.error as e:
            raise ValueError(f"Invalid placeholder pattern '{self.placeholder_pattern}': {e}")
        if not self.default_region.strip():
            raise ValueError("default_region must not be empty")
        if self.fetch_timeout <= 0:
            raise ValueError(f"fetch_timeout must be positive, got {self.fetch_timeout}")


def load_config(config_path: Path | str | None = None) -> Config:
    """
    Load configuration from file.

    Args:
        config_path: Path to config file. If None, checks default locations:
            1. ~/.ipa-meta.yaml
            2. ~/.ipa-meta.yml
            3. ~/.config/ipa-meta/config.yaml
            4. ~/.config/ipa-meta/config.yml

    Returns:
        Config object with loaded settings (or defaults if no config found)

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        ValueError: If the file cannot be parsed or holds invalid settings
    """
    if config_path:
        config_file = Path(config_path).expanduser()
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
    else:
        default_paths = [
            Path.home() / ".ipa-meta.yaml",
            Path.home() / ".ipa-meta.yml",
            Path.home() / ".config" / "ipa-meta" / "config.yaml",
            Path.home() / ".config" / "ipa-meta" / "config.yml",
        ]
        config_file = next((path for path in default_paths if path.exists()), None)
        if not config_file:
            return Config()

    try:
        with open(config_file, "r") as f:
            data = yaml.safe_load(f) or {}
        return Config(**data)
    except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
        raise ValueError(f"Failed to load config from {config_file}: {e}") from e


def save_example_config(output_path: Path | str) -> None:
    """
    Save an example configuration file with all options documented.

    Args:
        output_path: Where to save the example config
    """
    example = """# ipa-meta configuration file
# Place at ~/.ipa-meta.yaml or ~/.config/ipa-meta/config.yaml

# Display names matching this regex are looked up in InfoPlist.strings
placeholder_pattern: '\\$\\(|%[@{]'

# Localization tried when the app declares no CFBundleDevelopmentRegion
default_region: en

# Base URL that object-storage keys are resolved against (--key)
cdn_base_url: https://cdn.rudownload.win/

# HTTP timeout in seconds for archive downloads
fetch_timeout: 30
"""

    path = Path(output_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(example)
