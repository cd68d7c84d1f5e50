"""Layered configuration: bundled defaults, an optional YAML file, then flag overrides."""

from .loader import ClassifierPolicy, PackageSettings, Settings, load_settings

__all__ = ["ClassifierPolicy", "PackageSettings", "Settings", "load_settings"]
