from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from bytespark.i18n.locales import Locale


def build_translation_prompt(source: dict[str, Any], locales: Sequence[Locale]) -> str:
    """Ask for every target language in one answer keyed by locale code."""
    language_list = ", ".join(f"{locale.code}: {locale.name}" for locale in locales)
    compact_json = json.dumps(source, ensure_ascii=False, separators=(",", ":"))
    example = ",\n".join(f'  "{locale.code}": {{ ... }}' for locale in locales)
    return (
        f"I need to translate a JSON structure from English to multiple languages: {language_list}.\n\n"
        "The JSON structure contains messages for a web application. Translate all text values "
        "(never the keys) into each target language.\n\n"
        "Rules:\n"
        "1. Preserve all placeholders like {name}, {count}, etc.\n"
        "2. Keep exactly the same JSON structure for each language.\n"
        "3. Return a single JSON object with language codes as top-level keys.\n\n"
        f"Source JSON (English):\n{compact_json}\n\n"
        "Respond with a JSON object shaped like:\n"
        f"{{\n{example}\n}}\n\n"
        "Return only the JSON without any additional text or explanations."
    )


def build_article_prompt(keyword: str, locale: Locale) -> str:
    return (
        f"You are an SEO content writer. Write a complete, original blog article about \"{keyword}\".\n"
        f"Write the title, excerpt and content in {locale.name} (locale code {locale.code}).\n\n"
        "Requirements:\n"
        "- content is Markdown with an introduction, several ## sections and a conclusion, "
        "at least 800 words;\n"
        "- excerpt is one or two sentences, under 200 characters;\n"
        "- slug is lowercase, hyphen separated, derived from the English meaning of the title.\n\n"
        "Respond with a single JSON object and nothing else:\n"
        '{"title": "...", "slug": "...", "excerpt": "...", "content": "..."}'
    )
