from __future__ import annotations

from dataclasses import dataclass

from .exit_codes import (
    ERR_CONFIG,
    ERR_INPUT,
    ERR_INTERNAL,
    ERR_MANIFEST_MISSING,
    ERR_MANIFEST_UNREADABLE,
    ERR_RENAME,
    ERR_REPACKAGE,
    ERR_REPO_NAME,
)


@dataclass
class ScriptError(Exception):
    message: str
    code: int = ERR_INTERNAL
    kind: str = "internal"

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigError(ScriptError):
    code: int = ERR_CONFIG
    kind: str = "config_error"


@dataclass
class InputNotFound(ScriptError):
    code: int = ERR_INPUT
    kind: str = "input_not_found"


@dataclass
class ManifestNotFound(ScriptError):
    code: int = ERR_MANIFEST_MISSING
    kind: str = "manifest_not_found"


@dataclass
class ManifestUnreadable(ScriptError):
    code: int = ERR_MANIFEST_UNREADABLE
    kind: str = "manifest_unreadable"


@dataclass
class RepositoryNameMissing(ScriptError):
    code: int = ERR_REPO_NAME
    kind: str = "repository_name_missing"


@dataclass
class RepositoryNameInvalid(ScriptError):
    code: int = ERR_REPO_NAME
    kind: str = "repository_name_invalid"


@dataclass
class RenameConflict(ScriptError):
    code: int = ERR_RENAME
    kind: str = "rename_conflict"


@dataclass
class RepackageError(ScriptError):
    code: int = ERR_REPACKAGE
    kind: str = "repackage_error"
