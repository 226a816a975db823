"""AI-assisted reconciliation of locale message files against English.

``translate_messages`` performs one remote call covering every requested
locale; ``reconcile`` diffs all locales, batches the union of missing keys and
feeds the batches one at a time through the same call, merging each answer
into the locale files without touching values that were already present.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any, Protocol

from bytespark.core.config import AppSettings
from bytespark.i18n.catalog import MessageCatalog
from bytespark.i18n.locales import Locale, LocaleRegistry
from bytespark.i18n.message_tree import (
    MessageTree,
    deep_merge,
    extract_keys,
    find_missing_keys,
    get_path,
    is_blank,
    is_tree,
    leaf_paths,
    set_path,
)
from bytespark.integrations.prompts import build_translation_prompt
from bytespark.schemas.translation import (
    BatchReport,
    LocaleTranslationResult,
    ReconcileOptions,
    ReconciliationSummary,
    TranslationMode,
    TranslationOptions,
)
from bytespark.utils.chunking import ChunkedScheduler, ChunkMode
from bytespark.utils.json_extract import extract_json_object

logger = logging.getLogger(__name__)

TRANSLATION_MAX_TOKENS = 4000

_ABSENT = object()


class TextCompleter(Protocol):
    async def complete(self, prompt: str, *, model: str | None = None, max_tokens: int = ...) -> str:
        ...


class TranslationReconciler:
    """Keep every target locale file in step with the canonical English messages."""

    def __init__(
        self,
        completer: TextCompleter,
        catalog: MessageCatalog,
        registry: LocaleRegistry,
        settings: AppSettings,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._completer = completer
        self._catalog = catalog
        self._registry = registry
        self._settings = settings
        self._sleep = sleep

    async def translate_messages(self, options: TranslationOptions) -> list[LocaleTranslationResult]:
        """Translate canonical messages into the target locales with a single model call."""
        canonical = self._catalog.load_canonical()
        locales = self._resolve_targets(options.target_locales)
        model = options.model or self._settings.workers_ai_translation_model

        keys_by_locale: dict[str, list[str]] | None = None
        complete: list[LocaleTranslationResult] = []
        if options.mode is TranslationMode.FULL:
            source = canonical
        elif options.mode is TranslationMode.KEYS:
            source = extract_keys(canonical, options.keys)
        else:
            keys_by_locale = {}
            readable: list[Locale] = []
            for locale in locales:
                existing = self._load_target(locale)
                if isinstance(existing, LocaleTranslationResult):
                    complete.append(existing)
                    continue
                readable.append(locale)
                missing = find_missing_keys(canonical, existing)
                if missing:
                    keys_by_locale[locale.code] = missing

            complete.extend(
                LocaleTranslationResult(
                    locale=locale.code,
                    success=True,
                    message=f"No missing keys found for {locale.name}",
                )
                for locale in readable
                if locale.code not in keys_by_locale
            )
            if not keys_by_locale:
                return complete
            source = extract_keys(
                canonical, self._ordered_union(canonical, keys_by_locale.values())
            )
            locales = [locale for locale in readable if locale.code in keys_by_locale]

        if not leaf_paths(source):
            return [
                LocaleTranslationResult(
                    locale=locale.code,
                    success=True,
                    message=f"Nothing to translate for {locale.name}",
                )
                for locale in locales
            ]

        translated = await self._translate_and_merge(
            source,
            locales,
            model=model,
            keys_by_locale=keys_by_locale,
            replace=options.mode is TranslationMode.FULL and options.force,
        )
        return complete + translated

    async def reconcile(self, options: ReconcileOptions | None = None) -> ReconciliationSummary:
        """Diff, batch and translate missing keys for every target locale, batch by batch."""
        options = options or ReconcileOptions()
        batch_size = options.batch_size or self._settings.translation_batch_size
        delay = (
            options.delay if options.delay is not None else self._settings.translation_batch_delay
        )
        no_translate = set(
            options.no_translate_keys
            if options.no_translate_keys is not None
            else self._settings.no_translate_keys
        )
        model = options.model or self._settings.workers_ai_translation_model

        canonical = self._catalog.load_canonical()
        locales = self._resolve_targets(options.target_locales)
        all_leaves = leaf_paths(canonical)

        needed: dict[str, set[str]] = {}
        summary = ReconciliationSummary()
        readable: list[Locale] = []
        for locale in locales:
            existing = self._load_target(locale)
            if isinstance(existing, LocaleTranslationResult):
                summary.unreadable.append(existing)
                continue
            readable.append(locale)
            keys = find_missing_keys(canonical, existing) if options.only_missing else all_leaves

            # Blank English values have nothing to translate and are copied as-is.
            verbatim = [
                key
                for key in keys
                if key in no_translate or is_blank(get_path(canonical, key))
            ]
            if verbatim:
                self._catalog.save(
                    locale.code, deep_merge(existing, extract_keys(canonical, verbatim))
                )
                summary.skipped += len(verbatim)
                logger.info(
                    "Copied %d untranslatable key(s) into %s", len(verbatim), locale.code
                )
            needed[locale.code] = set(keys) - set(verbatim)

        pending = [key for key in all_leaves if any(key in keys for keys in needed.values())]
        summary.total_keys = len(pending)
        if not pending:
            logger.info("All locales are complete; nothing to translate.")
            return summary

        logger.info(
            "Translating %d key(s) for %d locale(s) in batches of %d",
            len(pending),
            len(readable),
            batch_size,
        )

        async def translate_batch(batch: list[str]) -> list[LocaleTranslationResult]:
            keys_by_locale = {
                code: [key for key in batch if key in keys]
                for code, keys in needed.items()
                if any(key in keys for key in batch)
            }
            batch_locales = [locale for locale in locales if locale.code in keys_by_locale]
            return await self._translate_and_merge(
                extract_keys(canonical, batch),
                batch_locales,
                model=model,
                keys_by_locale=keys_by_locale,
                replace=False,
            )

        scheduler = ChunkedScheduler(
            batch_size, mode=ChunkMode.SEQUENTIAL, delay=delay, sleep=self._sleep
        )
        outcomes = await scheduler.run(pending, translate_batch)

        for index, outcome in enumerate(outcomes):
            batch = list(outcome.item)
            report = BatchReport(index=index, keys=batch)
            if outcome.succeeded and outcome.value is not None:
                report.results = outcome.value
                for result in outcome.value:
                    if result.success:
                        summary.succeeded += len(result.translated_keys)
                        summary.failed += len(result.untranslated_keys)
                    else:
                        summary.failed += len(needed[result.locale] & set(batch))
            else:
                error = str(outcome.error)
                for code, keys in needed.items():
                    pairs = len(keys & set(batch))
                    if pairs:
                        summary.failed += pairs
                        report.results.append(
                            LocaleTranslationResult(locale=code, success=False, error=error)
                        )
            summary.batches.append(report)

        logger.info(
            "Reconciliation finished: %d translated, %d failed, %d skipped",
            summary.succeeded,
            summary.failed,
            summary.skipped,
        )
        return summary

    async def _translate_and_merge(
        self,
        source: MessageTree,
        locales: Sequence[Locale],
        *,
        model: str,
        keys_by_locale: dict[str, list[str]] | None,
        replace: bool,
    ) -> list[LocaleTranslationResult]:
        if not locales:
            return []

        prompt = build_translation_prompt(source, locales)
        try:
            raw = await self._completer.complete(prompt, model=model, max_tokens=TRANSLATION_MAX_TOKENS)
            translations = extract_json_object(raw)
        except Exception as exc:
            logger.warning(
                "Translation request for %s failed: %s",
                ", ".join(locale.code for locale in locales),
                exc,
            )
            return [
                LocaleTranslationResult(locale=locale.code, success=False, error=str(exc))
                for locale in locales
            ]

        source_keys = leaf_paths(source)
        results: list[LocaleTranslationResult] = []
        for locale in locales:
            translated = translations.get(locale.code)
            if not is_tree(translated):
                results.append(
                    LocaleTranslationResult(
                        locale=locale.code,
                        success=False,
                        error=f"No translation returned for {locale.name}",
                    )
                )
                continue

            requested = keys_by_locale.get(locale.code, []) if keys_by_locale else source_keys
            partial = self._accepted_translations(translated, source, requested)
            translated_keys = leaf_paths(partial)

            try:
                if replace:
                    final = partial
                else:
                    final = deep_merge(self._catalog.load(locale.code), partial)
                self._catalog.save(locale.code, final)
            except (OSError, ValueError) as exc:
                logger.warning("Could not update messages for %s", locale.code, exc_info=exc)
                results.append(
                    LocaleTranslationResult(locale=locale.code, success=False, error=str(exc))
                )
                continue

            accepted = set(translated_keys)
            untranslated = [key for key in requested if key not in accepted]
            message = f"Translated {len(translated_keys)} key(s) into {locale.name}"
            if untranslated:
                message += f"; {len(untranslated)} key(s) missing from the answer"
            results.append(
                LocaleTranslationResult(
                    locale=locale.code,
                    success=True,
                    message=message,
                    translated_keys=translated_keys,
                    untranslated_keys=untranslated,
                )
            )
        return results

    def _accepted_translations(
        self,
        translated: MessageTree,
        source: MessageTree,
        requested: Iterable[str],
    ) -> MessageTree:
        """Requested leaves of ``translated`` that are non-empty and typed like the source.

        A blank answer is only accepted for a blank source value.
        """
        partial: MessageTree = {}
        for path in requested:
            value = get_path(translated, path, _ABSENT)
            original = get_path(source, path, _ABSENT)
            if value is _ABSENT or original is _ABSENT or is_tree(value):
                continue
            if is_blank(original) and is_blank(value):
                value = original
            elif is_blank(value) or type(value) is not type(original):
                continue
            set_path(partial, path, value)
        return partial

    def _load_target(self, locale: Locale) -> MessageTree | LocaleTranslationResult:
        """Existing messages for ``locale``, or a failed result when the file is unreadable."""
        try:
            return self._catalog.load(locale.code)
        except (OSError, ValueError) as exc:
            logger.warning("Skipping %s; could not read its messages", locale.code, exc_info=exc)
            return LocaleTranslationResult(
                locale=locale.code,
                success=False,
                error=f"Could not read messages for {locale.name}: {exc}",
            )

    def _resolve_targets(self, requested: list[str] | None) -> list[Locale]:
        locales = self._registry.targets(requested)
        if not locales:
            raise ValueError("No target locales to translate.")
        return locales

    def _ordered_union(self, canonical: MessageTree, groups: Iterable[Iterable[str]]) -> list[str]:
        wanted: set[str] = set()
        for group in groups:
            wanted.update(group)
        return [path for path in leaf_paths(canonical) if path in wanted]
