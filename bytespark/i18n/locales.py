from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from bytespark.core.config import AppSettings

CANONICAL_LOCALE = "en"


@dataclass(frozen=True, slots=True)
class Locale:
    code: str
    name: str
    direction: str = "ltr"


KNOWN_LOCALES: dict[str, Locale] = {
    locale.code: locale
    for locale in (
        Locale("en", "English"),
        Locale("zh", "简体中文"),
        Locale("zh-TW", "繁體中文"),
        Locale("ja", "日本語"),
        Locale("ko", "한국어"),
        Locale("es", "Español"),
        Locale("fr", "Français"),
        Locale("de", "Deutsch"),
        Locale("pt", "Português"),
        Locale("ru", "Русский"),
        Locale("it", "Italiano"),
        Locale("ar", "العربية", "rtl"),
        Locale("he", "עברית", "rtl"),
    )
}


class LocaleRegistry:
    """Supported locales for one process, with English as the canonical source."""

    def __init__(self, locales: Sequence[Locale], *, canonical: str = CANONICAL_LOCALE):
        codes = [locale.code for locale in locales]
        if canonical not in codes:
            raise ValueError(f"Canonical locale '{canonical}' must be part of the supported locales.")
        if len(set(codes)) != len(codes):
            raise ValueError("Supported locales contain duplicate codes.")
        self._locales = tuple(locales)
        self._canonical = canonical

    @classmethod
    def from_codes(cls, codes: Iterable[str]) -> LocaleRegistry:
        locales = []
        for code in codes:
            normalized = code.strip()
            if not normalized:
                continue
            locales.append(KNOWN_LOCALES.get(normalized, Locale(normalized, normalized)))
        return cls(locales)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> LocaleRegistry:
        return cls.from_codes(settings.supported_locales)

    @property
    def canonical(self) -> Locale:
        return self.get(self._canonical)

    @property
    def locales(self) -> tuple[Locale, ...]:
        return self._locales

    @property
    def codes(self) -> list[str]:
        return [locale.code for locale in self._locales]

    def targets(self, requested: Iterable[str] | None = None) -> list[Locale]:
        """Non-canonical locales, optionally restricted to ``requested`` codes."""
        wanted = set(requested) if requested is not None else None
        return [
            locale
            for locale in self._locales
            if locale.code != self._canonical and (wanted is None or locale.code in wanted)
        ]

    def get(self, code: str) -> Locale:
        for locale in self._locales:
            if locale.code == code:
                return locale
        raise LookupError(f"Unsupported locale '{code}'.")

    def is_supported(self, code: str | None) -> bool:
        return bool(code) and code in self.codes
