"""Generate blog articles for a list of keywords, optionally saving them."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from bytespark.core.config import AppSettings, get_settings
from bytespark.core.database import dispose_engine, session_scope
from bytespark.i18n.locales import LocaleRegistry
from bytespark.integrations.llm import ContentOrchestrator
from bytespark.integrations.storage import ObjectStorage
from bytespark.schemas.articles import BatchGenerationResponse, BatchSaveResponse
from bytespark.services.articles import ArticleService
from bytespark.services.content_generation import ArticleGenerator
from bytespark.services.images import ImageService


def read_keywords(path: Path) -> list[str]:
    """One keyword per line; blank lines and ``#`` comments are ignored."""
    keywords = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            keywords.append(line)
    return keywords


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bytespark-generate",
        description="Generate articles from keywords with the configured text model.",
    )
    parser.add_argument("keywords_file", type=Path, help="Text file with one keyword per line.")
    parser.add_argument("--locale", default="en", help="Locale of the generated articles.")
    parser.add_argument("--chunk-size", type=int, default=None, help="Concurrent requests per chunk.")
    parser.add_argument("--save", action="store_true", help="Persist successful articles.")
    parser.add_argument(
        "--publish",
        action="store_true",
        help="Publish saved articles immediately (implies --save).",
    )
    return parser


def render_generation(response: BatchGenerationResponse) -> str:
    lines = []
    for result in response.results:
        if result.status == "success" and result.article is not None:
            lines.append(f"[ok]     {result.keyword} -> {result.article.slug}")
        else:
            lines.append(f"[failed] {result.keyword}: {result.error}")
    lines.append(f"Generated: {response.succeeded} | failed: {response.failed}")
    return "\n".join(lines)


def render_save(response: BatchSaveResponse) -> str:
    lines = [
        f"[saved]  {result.slug}" if result.status == "success" else f"[failed] {result.slug}: {result.error}"
        for result in response.results
    ]
    lines.append(f"Saved: {response.succeeded} | failed: {response.failed}")
    return "\n".join(lines)


async def run(args: argparse.Namespace, generator: ArticleGenerator) -> int:
    keywords = read_keywords(args.keywords_file)
    response = await generator.generate_batch(keywords, args.locale, chunk_size=args.chunk_size)
    print(render_generation(response))

    failed = response.failed
    if args.save or args.publish:
        articles = [result.article for result in response.results if result.article is not None]
        if articles:
            try:
                async with session_scope() as session:
                    saved = await ArticleService(session).save_batch_articles(
                        articles, publish=args.publish
                    )
            finally:
                await dispose_engine()
            print(render_save(saved))
            failed += saved.failed
    return 1 if failed else 0


def _build_generator(settings: AppSettings) -> ArticleGenerator:
    orchestrator = ContentOrchestrator(settings)
    return ArticleGenerator(
        orchestrator,
        LocaleRegistry.from_settings(settings),
        settings,
        image_service=ImageService(orchestrator, ObjectStorage(settings), settings),
    )


def main(
    argv: Sequence[str] | None = None,
    *,
    settings: AppSettings | None = None,
    generator: ArticleGenerator | None = None,
) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s - %(message)s")
    settings = settings or get_settings()
    try:
        return asyncio.run(run(args, generator or _build_generator(settings)))
    except (OSError, ValueError, RuntimeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


def cli() -> int:
    try:
        return main()
    except KeyboardInterrupt:  # pragma: no cover - interactive use
        return 130


if __name__ == "__main__":
    raise SystemExit(cli())
