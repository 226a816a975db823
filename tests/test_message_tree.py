from __future__ import annotations

import pytest

from bytespark.i18n.message_tree import (
    deep_merge,
    extract_keys,
    find_missing_keys,
    get_path,
    leaf_paths,
    set_path,
)


def test_leaf_paths_follow_document_order() -> None:
    tree = {"b": "1", "a": {"y": "2", "x": {"z": "3"}}, "c": "4"}

    assert leaf_paths(tree) == ["b", "a.y", "a.x.z", "c"]


def test_missing_keys_for_partially_translated_namespace() -> None:
    canonical = {"a": {"b": "x", "c": "y"}}
    target = {"a": {"b": "ok"}}

    assert find_missing_keys(canonical, target) == ["a.c"]


def test_missing_keys_treat_empty_string_as_missing() -> None:
    canonical = {"a": {"b": "x", "c": "y"}}
    target = {"a": {"b": ""}}

    assert find_missing_keys(canonical, target) == ["a.b", "a.c"]


def test_missing_keys_ignore_blank_canonical_values() -> None:
    assert find_missing_keys({"a": ""}, {"a": ""}) == []
    assert find_missing_keys({"a": ""}, {}) == ["a"]


def test_missing_keys_for_empty_target_lists_every_leaf() -> None:
    canonical = {"nav": {"home": "Home", "about": "About"}, "title": "Blog"}

    assert find_missing_keys(canonical, {}) == ["nav.home", "nav.about", "title"]
    assert find_missing_keys(canonical, None) == ["nav.home", "nav.about", "title"]


def test_missing_keys_never_report_namespace_paths() -> None:
    canonical = {"footer": {"quickLinks": {"home": "Home", "blogs": "Blog"}}}

    missing = find_missing_keys(canonical, {"footer": "oops"})

    assert missing == ["footer.quickLinks.home", "footer.quickLinks.blogs"]
    assert "footer" not in missing


def test_missing_keys_report_leaf_shadowed_by_tree_and_type_mismatch() -> None:
    canonical = {"title": "Blog", "count": 3}
    target = {"title": {"nested": "x"}, "count": "three"}

    assert find_missing_keys(canonical, target) == ["title", "count"]


def test_missing_keys_ignore_target_only_keys() -> None:
    canonical = {"a": "x"}
    target = {"a": "y", "legacy": {"old": "value"}}

    assert find_missing_keys(canonical, target) == []


def test_get_and_set_path_create_intermediate_trees() -> None:
    tree: dict = {"a": "scalar"}
    set_path(tree, "a.b.c", "value")

    assert tree == {"a": {"b": {"c": "value"}}}
    assert get_path(tree, "a.b.c") == "value"
    assert get_path(tree, "a.missing", "fallback") == "fallback"


def test_extract_keys_skips_namespaces_and_unknown_paths() -> None:
    tree = {"header": {"nav": {"home": "Home", "about": "About"}}, "title": "Blog"}

    partial = extract_keys(tree, ["header.nav.home", "header.nav", "nope.key", "title"])

    assert partial == {"header": {"nav": {"home": "Home"}}, "title": "Blog"}


def test_deep_merge_preserves_siblings_and_lets_partial_win() -> None:
    existing = {"a": {"b": "keep", "c": "old"}, "d": "untouched"}
    partial = {"a": {"c": "new", "e": "added"}}

    merged = deep_merge(existing, partial)

    assert merged == {"a": {"b": "keep", "c": "new", "e": "added"}, "d": "untouched"}
    assert existing == {"a": {"b": "keep", "c": "old"}, "d": "untouched"}
    assert partial == {"a": {"c": "new", "e": "added"}}


def test_deep_merge_with_empty_partial_is_a_copy() -> None:
    existing = {"a": {"b": "x"}}

    merged = deep_merge(existing, {})

    assert merged == existing
    assert merged["a"] is not existing["a"]


def test_deep_merge_replaces_scalar_with_tree() -> None:
    assert deep_merge({"a": "flat"}, {"a": {"b": "x"}}) == {"a": {"b": "x"}}


MIXED_TREE = {
    "siteInfo": {"brandName": "ByteSpark", "tagline": ""},
    "blogs": {"pagination": {"next": "Next", "perPage": 18, "enabled": True}},
    "placeholder": None,
    "footer": {},
    "title": "Blog",
}


@pytest.mark.parametrize(
    "tree",
    [
        {},
        {"a": ""},
        {"a": None, "b": 0, "c": False},
        MIXED_TREE,
    ],
)
def test_a_tree_has_no_missing_keys_against_itself(tree: dict) -> None:
    assert find_missing_keys(tree, tree) == []


@pytest.mark.parametrize(
    "target",
    [
        {},
        {"siteInfo": "flat", "blogs": {"pagination": "flat"}},
        {"siteInfo": {"brandName": {"nested": "x"}}, "title": 3, "placeholder": "set"},
        {"blogs": {"pagination": {"next": "", "perPage": "18"}}, "footer": "x"},
    ],
)
def test_reported_paths_resolve_to_canonical_leaves(target: dict) -> None:
    missing = find_missing_keys(MIXED_TREE, target)

    assert missing
    leaves = set(leaf_paths(MIXED_TREE))
    for path in missing:
        assert path in leaves
        assert not isinstance(get_path(MIXED_TREE, path), dict)


@pytest.mark.parametrize(
    ("existing", "partial"),
    [
        ({}, {"a": "x"}),
        ({"a": {"b": "keep"}}, {"a": {"c": "new"}}),
        ({"a": "flat", "d": "untouched"}, {"a": {"b": "x"}}),
        ({"a": {"b": {"c": "old"}}}, {"a": {"b": {"c": "new", "d": "added"}}}),
    ],
)
def test_deep_merge_is_idempotent(existing: dict, partial: dict) -> None:
    once = deep_merge(existing, partial)

    assert deep_merge(existing, once) == once
    assert deep_merge(once, partial) == once
