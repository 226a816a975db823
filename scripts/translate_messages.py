"""Translate locale message files from the canonical English messages."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from bytespark.core.config import AppSettings, get_settings
from bytespark.i18n.catalog import MessageCatalog
from bytespark.i18n.locales import LocaleRegistry
from bytespark.i18n.reconciler import TextCompleter, TranslationReconciler
from bytespark.integrations.llm import ContentOrchestrator
from bytespark.schemas.translation import (
    LocaleTranslationResult,
    ReconcileOptions,
    ReconciliationSummary,
    TranslationMode,
    TranslationOptions,
)


def _split_csv(value: str | None) -> list[str] | None:
    if value is None:
        return None
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or None


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--locales", help="Comma separated target locales (default: all targets).")
    common.add_argument("--model", help="Override the translation model.")
    common.add_argument(
        "--messages-dir",
        type=Path,
        default=None,
        help="Directory holding <locale>.json message files.",
    )

    parser = argparse.ArgumentParser(
        prog="bytespark-translate",
        description="Translate message files into every supported locale.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "missing",
        parents=[common],
        help="Translate only keys missing from each locale, in one request.",
    )

    keys_parser = subparsers.add_parser(
        "keys",
        parents=[common],
        help="Translate specific dot-notation keys.",
    )
    keys_parser.add_argument("keys", nargs="+", help="Keys such as header.nav.home.")

    full_parser = subparsers.add_parser(
        "full",
        parents=[common],
        help="Translate the whole canonical file.",
    )
    full_parser.add_argument(
        "--force",
        action="store_true",
        help="Replace locale files instead of merging into them.",
    )

    reconcile_parser = subparsers.add_parser(
        "reconcile",
        parents=[common],
        help="Diff every locale and translate missing keys batch by batch.",
    )
    reconcile_parser.add_argument("--batch-size", type=int, default=None, help="Keys per request.")
    reconcile_parser.add_argument(
        "--delay", type=float, default=None, help="Seconds to wait between batches."
    )
    reconcile_parser.add_argument(
        "--no-translate",
        default=None,
        help="Comma separated keys copied verbatim from English.",
    )
    reconcile_parser.add_argument(
        "--all-keys",
        action="store_true",
        help="Re-translate every key, not only missing ones.",
    )
    return parser


def _print_results(results: Sequence[LocaleTranslationResult]) -> None:
    for result in results:
        if result.success:
            print(f"[ok]     {result.locale}: {result.message}")
        else:
            print(f"[failed] {result.locale}: {result.error}")


def render_summary(summary: ReconciliationSummary) -> str:
    lines = [f"[failed] {result.locale}: {result.error} {result.locale}: {result.error}" for result in summary.unreadable]
    for batch in summary.batches:
        lines.append(f"Batch {batch.index + 1}: {', '.join(batch.keys)}")
        for result in batch.results:
            status = "ok" if result.success else "failed"
            detail = result.message if result.success else result.error
            lines.append(f"  [{status}] {result.locale}: {detail}")
    lines.append(
        f"Keys: {summary.total_keys} | translated: {summary.succeeded} | "
        f"failed: {summary.failed} | skipped: {summary.skipped}"
    )
    return "\n".join(lines)


def _build_reconciler(
    args: argparse.Namespace,
    settings: AppSettings,
    completer: TextCompleter | None,
) -> TranslationReconciler:
    registry = LocaleRegistry.from_settings(settings)
    catalog = MessageCatalog(
        args.messages_dir or settings.messages_dir,
        canonical=registry.canonical.code,
    )
    return TranslationReconciler(
        completer or ContentOrchestrator(settings),
        catalog,
        registry,
        settings,
    )


async def dispatch(args: argparse.Namespace, reconciler: TranslationReconciler) -> int:
    locales = _split_csv(args.locales)
    if args.command == "reconcile":
        summary = await reconciler.reconcile(
            ReconcileOptions(
                target_locales=locales,
                model=args.model,
                batch_size=args.batch_size,
                delay=args.delay,
                no_translate_keys=_split_csv(args.no_translate),
                only_missing=not args.all_keys,
            )
        )
        print(render_summary(summary))
        return 1 if summary.has_failures else 0

    options = TranslationOptions(
        mode=TranslationMode(args.command),
        target_locales=locales,
        keys=getattr(args, "keys", None) or [],
        model=args.model,
        force=getattr(args, "force", False),
    )
    results = await reconciler.translate_messages(options)
    _print_results(results)
    return 0 if all(result.success for result in results) else 1


def main(
    argv: Sequence[str] | None = None,
    *,
    settings: AppSettings | None = None,
    completer: TextCompleter | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s - %(message)s")

    settings = settings or get_settings()
    try:
        reconciler = _build_reconciler(args, settings, completer)
        return asyncio.run(dispatch(args, reconciler))
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


def cli() -> int:
    try:
        return main()
    except KeyboardInterrupt:  # pragma: no cover - interactive use
        return 130


if __name__ == "__main__":
    raise SystemExit(cli())
