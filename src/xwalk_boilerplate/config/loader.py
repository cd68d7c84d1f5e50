from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import yaml

from ..core.env import getenv
from ..core.schema import validate_payload
from ..errors import ConfigError

PolicyName = Literal["strict", "permissive"]

CONFIG_DIR = Path(__file__).resolve().parent
DEFAULTS_PATH = CONFIG_DIR / "defaults.yaml"
SCHEMA_PATH = CONFIG_DIR / "config.schema.json"
POLICIES: tuple[PolicyName, ...] = ("strict", "permissive")


@dataclass(frozen=True)
class ClassifierPolicy:
    name: PolicyName
    placeholder: str
    reference_paths: tuple[str, ...]
    min_tagged: int = 2
    min_ratio: float = 0.6


@dataclass(frozen=True)
class PackageSettings:
    compression_level: int
    output_name: str

    def archive_name(self, repo_name: str) -> str:
        return self.output_name.format(repo=repo_name)


@dataclass(frozen=True)
class Settings:
    placeholder: str
    manifest_path: str
    classifier: ClassifierPolicy
    package: PackageSettings
    source: str

    @property
    def reference_paths(self) -> tuple[str, ...]:
        return self.classifier.reference_paths


def load_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle)
    except OSError as exc:
        raise ConfigError(f"unable to read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in config {path}: {exc}") from exc


def merge_config(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = value
    return merged


def _from_mapping(data: dict[str, Any], source: str) -> Settings:
    classifier = data["classifier"]
    permissive = classifier["permissive"]
    package = data["package"]
    return Settings(
        placeholder=data["placeholder"],
        manifest_path=data["manifest_path"].strip("/"),
        classifier=ClassifierPolicy(
            name=classifier["policy"],
            placeholder=data["placeholder"],
            reference_paths=tuple(data["reference_paths"]),
            min_tagged=int(permissive["min_tagged"]),
            min_ratio=float(permissive["min_ratio"]),
        ),
        package=PackageSettings(
            compression_level=int(package["compression_level"]),
            output_name=package["output_name"],
        ),
        source=source,
    )


def load_settings(config_path: str | None = None, policy: str | None = None) -> Settings:
    data = load_yaml(DEFAULTS_PATH)
    sources = [DEFAULTS_PATH.name]
    resolved_path = config_path or getenv("XWALK_BOILERPLATE_CONFIG")
    if resolved_path:
        path = Path(resolved_path)
        if not path.is_file():
            raise ConfigError(f"config file not found: {path}")
        override = load_yaml(path)
        if override is None:
            override = {}
        if not isinstance(override, dict):
            raise ConfigError(f"{path}: root must be mapping")
        data = merge_config(data, override)
        sources.append(str(path))
    resolved_policy = policy or getenv("XWALK_CLASSIFIER_POLICY")
    if resolved_policy:
        if resolved_policy not in POLICIES:
            raise ConfigError(f"unknown classifier policy: {resolved_policy} (expected one of {', '.join(POLICIES)})")
        data = merge_config(data, {"classifier": {"policy": resolved_policy}})
    validate_payload(data, SCHEMA_PATH, ConfigError)
    return _from_mapping(data, "+".join(sources))
