"""Operations on nested locale message trees addressed by dot-notation paths.

A message tree maps string keys either to a translatable leaf (normally a
string) or to another tree acting as a namespace. ``en.json`` is the canonical
tree; every other locale is diffed against it and patched leaf by leaf.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

MessageTree = dict[str, Any]

PATH_SEPARATOR = "."


def is_tree(value: Any) -> bool:
    return isinstance(value, Mapping)


def join_path(prefix: str, key: str) -> str:
    return f"{prefix}{PATH_SEPARATOR}{key}" if prefix else key


def leaf_paths(tree: Mapping[str, Any], prefix: str = "") -> list[str]:
    """All leaf paths of ``tree`` in document order."""
    paths: list[str] = []
    for key, value in tree.items():
        path = join_path(prefix, key)
        if is_tree(value):
            paths.extend(leaf_paths(value, path))
        else:
            paths.append(path)
    return paths


def is_blank(value: Any) -> bool:
    return value is None or value == ""


def _leaf_needs_translation(canonical: Any, target: Any) -> bool:
    if is_tree(target):
        return True
    if is_blank(target):
        return not is_blank(canonical)
    return type(target) is not type(canonical)


def find_missing_keys(
    canonical: Mapping[str, Any],
    target: Mapping[str, Any] | None,
    prefix: str = "",
) -> list[str]:
    """Leaf paths of ``canonical`` that ``target`` lacks or holds unusable values for.

    Only canonical keys are walked, so keys that exist solely in the target are
    never reported. A canonical namespace whose target counterpart is absent or
    is not a tree is reported leaf by leaf, never as the namespace path itself.
    """
    target = target if is_tree(target) else {}
    missing: list[str] = []

    for key, canonical_value in canonical.items():
        path = join_path(prefix, key)

        if key not in target:
            if is_tree(canonical_value):
                missing.extend(leaf_paths(canonical_value, path))
            else:
                missing.append(path)
            continue

        target_value = target[key]
        if is_tree(canonical_value):
            if is_tree(target_value):
                missing.extend(find_missing_keys(canonical_value, target_value, path))
            else:
                # TODO: a scalar at a namespace path is expanded to every leaf while a
                # scalar type mismatch reports one path; settle on one behaviour once
                # the locale files have been audited for such collisions.
                missing.extend(leaf_paths(canonical_value, path))
        elif _leaf_needs_translation(canonical_value, target_value):
            missing.append(path)

    return missing


def get_path(tree: Mapping[str, Any], path: str, default: Any = None) -> Any:
    node: Any = tree
    for part in path.split(PATH_SEPARATOR):
        if not is_tree(node) or part not in node:
            return default
        node = node[part]
    return node


def set_path(tree: MessageTree, path: str, value: Any) -> None:
    """Assign ``value`` at ``path``, creating (or replacing non-tree) parents."""
    parts = path.split(PATH_SEPARATOR)
    node = tree
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


_MISSING = object()


def extract_keys(tree: Mapping[str, Any], paths: Iterable[str]) -> MessageTree:
    """Partial copy of ``tree`` holding only the requested leaf paths.

    Paths that do not resolve to a leaf in ``tree`` are skipped.
    """
    partial: MessageTree = {}
    for path in paths:
        value = get_path(tree, path, _MISSING)
        if value is _MISSING or is_tree(value):
            continue
        set_path(partial, path, value)
    return partial


def deep_merge(existing: Mapping[str, Any], partial: Mapping[str, Any]) -> MessageTree:
    """Key-wise union of two trees where ``partial`` wins on conflicts.

    Nested trees merge recursively so sibling keys of ``existing`` survive a
    partial translation pass. Neither argument is mutated.
    """
    merged: MessageTree = {
        key: deep_merge(value, {}) if is_tree(value) else value
        for key, value in existing.items()
    }
    for key, value in partial.items():
        current = merged.get(key)
        if is_tree(value) and is_tree(current):
            merged[key] = deep_merge(current, value)
        elif is_tree(value):
            merged[key] = deep_merge({}, value)
        else:
            merged[key] = value
    return merged
