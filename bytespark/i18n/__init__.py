"""Locale registry, message trees and AI-assisted translation reconciliation."""

from bytespark.i18n.catalog import MessageCatalog
from bytespark.i18n.locales import CANONICAL_LOCALE, KNOWN_LOCALES, Locale, LocaleRegistry
from bytespark.i18n.message_tree import (
    deep_merge,
    extract_keys,
    find_missing_keys,
    get_path,
    leaf_paths,
    set_path,
)

__all__ = [
    "CANONICAL_LOCALE",
    "KNOWN_LOCALES",
    "Locale",
    "LocaleRegistry",
    "MessageCatalog",
    "deep_merge",
    "extract_keys",
    "find_missing_keys",
    "get_path",
    "leaf_paths",
    "set_path",
]
