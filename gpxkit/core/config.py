"""
Configuration for gpxkit.

Reader and writer defaults live here; a YAML file can override them. The CLI
picks up `gpxkit_config.yaml` (or `.yml`) from the working directory when no
explicit file is given.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from gpxkit.model import GpxVersion


DEFAULT_CONFIG_FILES = ("gpxkit_config.yaml", "gpxkit_config.yml")

KNOWN_KEYS = frozenset({"fallback_version", "output_version", "indent", "creator"})


def parse_version_setting(value: Any, key: str) -> Optional[GpxVersion]:
    """
    Interpret a version from YAML.

    YAML reads an unquoted 1.1 as a float, so numbers are accepted too.
    null and "strict" mean "no version".
    """
    if value is None:
        return None
    text = str(value).strip().lower()
    if text in ("", "strict", "none"):
        return None
    try:
        return GpxVersion(text)
    except ValueError:
        raise ValueError(f"Invalid {key} '{value}' (expected 1.0, 1.1 or null)") from None


class GpxConfig:
    """Reader/writer defaults with user overrides."""

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_file: Optional path to user config YAML file
        """
        self.fallback_version: Optional[GpxVersion] = GpxVersion.GPX11
        self.output_version: Optional[GpxVersion] = None
        self.indent = 2
        self.creator: Optional[str] = "gpxkit"
        self.config_file: Optional[Path] = None

        if config_file and config_file.exists():
            self.load_user_config(config_file)

    @property
    def indent_text(self) -> str:
        """Indent string for the writer; "" means compact output."""
        return " " * self.indent

    def load_user_config(self, config_file: Path) -> None:
        """
        Load user configuration from YAML file.

        Format:
        fallback_version: "1.1"   # or null / strict
        output_version: null      # or "1.0" / "1.1"
        indent: 2
        creator: gpxkit

        Args:
            config_file: Path to YAML config file (.yaml or .yml)
        """
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                user_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_file}: {e}") from e

        # Handle empty config file
        if user_config is None:
            user_config = {}
        if not isinstance(user_config, dict):
            raise ValueError(f"Config file {config_file} must contain a mapping")

        unknown = sorted(set(user_config) - KNOWN_KEYS)
        if unknown:
            raise ValueError(f"Unknown config keys in {config_file}: {', '.join(map(str, unknown))}")

        if "fallback_version" in user_config:
            self.fallback_version = parse_version_setting(user_config["fallback_version"], "fallback_version")

        if "output_version" in user_config:
            self.output_version = parse_version_setting(user_config["output_version"], "output_version")

        if "indent" in user_config:
            indent = user_config["indent"]
            if isinstance(indent, bool) or not isinstance(indent, int) or indent < 0:
                raise ValueError(f"Invalid indent '{indent}' in {config_file} (expected a non-negative integer)")
            self.indent = indent

        if "creator" in user_config:
            creator = user_config["creator"]
            self.creator = str(creator) if creator is not None else None

        self.config_file = Path(config_file)

    def export_template(self, output_path: Path) -> None:
        """
        Export a configuration template file for user customization.

        Args:
            output_path: Path to write the template file (.yaml)
        """
        yaml_content = """# =============================================================================
# gpxkit configuration
# =============================================================================
# Place this file in the working directory as gpxkit_config.yaml, or pass it
# with --config.
# =============================================================================

# Version used when a file's <gpx version="..."> is missing or not 1.0/1.1.
# Use null (or "strict") to reject such files instead.
fallback_version: "1.1"

# Version written by `gpxkit convert` when --to is not given.
# null keeps each document's own version.
output_version: null

# Spaces per nesting level in written files. 0 writes compact XML.
indent: 2

# Written as <gpx creator="..."> when the document does not carry one.
creator: gpxkit
"""
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(yaml_content)

    def get_config_summary(self) -> Dict[str, Any]:
        return {
            "config_file": str(self.config_file) if self.config_file else None,
            "fallback_version": str(self.fallback_version) if self.fallback_version else None,
            "output_version": str(self.output_version) if self.output_version else None,
            "indent": self.indent,
            "creator": self.creator,
        }


def find_config_file() -> Optional[Path]:
    for name in DEFAULT_CONFIG_FILES:
        candidate = Path(name)
        if candidate.exists():
            return candidate
    return None


def load_config(config_file: Optional[Path] = None) -> GpxConfig:
    """
    Load gpxkit configuration.

    Args:
        config_file: Optional path to user config file (.yaml or .yml).
                    If None, looks for 'gpxkit_config.yaml' in current directory.
    """
    if config_file is None:
        config_file = find_config_file()
    return GpxConfig(config_file)
