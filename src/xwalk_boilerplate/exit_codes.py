from __future__ import annotations

OK = 0
ERR_CONFIG = 3
ERR_INPUT = 10
ERR_MANIFEST_MISSING = 11
ERR_MANIFEST_UNREADABLE = 12
ERR_REPO_NAME = 13
ERR_RENAME = 14
ERR_REPACKAGE = 15
ERR_VALIDATION = 16
ERR_INTERNAL = 99
