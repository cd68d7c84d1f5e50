"""Decide whether a set of filter paths describes the xwalk boilerplate template.

Two policies exist. `strict` accepts exactly the reference path set and
nothing else. `permissive` (the default) also accepts packages that carry the
reference paths plus extras, or whose paths are mostly placeholder-tagged.
"""

from __future__ import annotations

from collections.abc import Iterable

from .config.loader import ClassifierPolicy

PLACEHOLDER = "sta-xwalk-boilerplate"
REFERENCE_PATHS: tuple[str, ...] = (
    f"/content/{PLACEHOLDER}/tools",
    f"/content/{PLACEHOLDER}/block-collection",
    f"/content/dam/{PLACEHOLDER}/block-collection",
)
DEFAULT_POLICY = ClassifierPolicy(name="permissive", placeholder=PLACEHOLDER, reference_paths=REFERENCE_PATHS)


def is_strict_match(paths: list[str], policy: ClassifierPolicy) -> bool:
    return len(paths) == len(policy.reference_paths) and set(paths) == set(policy.reference_paths)


def is_permissive_match(paths: list[str], policy: ClassifierPolicy) -> bool:
    present = set(paths)
    if all(ref in present for ref in policy.reference_paths):
        return True
    tagged = [p for p in paths if policy.placeholder in p]
    return len(tagged) >= policy.min_tagged and len(tagged) >= len(paths) * policy.min_ratio


def is_boilerplate(paths: Iterable[str], policy: ClassifierPolicy = DEFAULT_POLICY) -> bool:
    items = list(paths)
    if not items:
        return False
    if policy.name == "strict":
        return is_strict_match(items, policy)
    return is_permissive_match(items, policy)
