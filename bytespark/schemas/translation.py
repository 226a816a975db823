from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class TranslationMode(str, Enum):
    FULL = "full"
    MISSING = "missing"
    KEYS = "keys"


class TranslationOptions(BaseModel):
    """Options for a single translation request against the canonical messages."""

    mode: TranslationMode = TranslationMode.FULL
    target_locales: list[str] | None = Field(
        default=None,
        description="Locale codes to translate into; all configured targets when omitted.",
    )
    keys: list[str] = Field(
        default_factory=list,
        description="Dot-notation keys to translate (keys mode only).",
    )
    model: str | None = Field(default=None, description="Override of the translation model.")
    force: bool = Field(
        default=False,
        description="In full mode, replace locale files instead of merging into them.",
    )

    @model_validator(mode="after")
    def _require_keys_in_keys_mode(self) -> "TranslationOptions":
        if self.mode is TranslationMode.KEYS and not self.keys:
            raise ValueError("Keys mode requires at least one key to translate.")
        return self


class ReconcileOptions(BaseModel):
    """Options for the batched, sequential reconciliation run."""

    target_locales: list[str] | None = None
    model: str | None = None
    batch_size: int | None = Field(default=None, ge=1)
    delay: float | None = Field(default=None, ge=0)
    no_translate_keys: list[str] | None = Field(
        default=None,
        description="Keys copied verbatim from English instead of translated.",
    )
    only_missing: bool = Field(
        default=True,
        description="Translate only keys missing per locale; False re-translates every key.",
    )


class LocaleTranslationResult(BaseModel):
    locale: str
    success: bool
    message: str | None = None
    translated_keys: list[str] = Field(default_factory=list)
    untranslated_keys: list[str] = Field(default_factory=list)
    error: str | None = None


class BatchReport(BaseModel):
    index: int
    keys: list[str]
    results: list[LocaleTranslationResult] = Field(default_factory=list)


class ReconciliationSummary(BaseModel):
    total_keys: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    batches: list[BatchReport] = Field(default_factory=list)
    unreadable: list[LocaleTranslationResult] = Field(
        default_factory=list,
        description="Locales left untouched because their message file could not be read.",
    )

    @property
    def has_failures(self) -> bool:
        return self.failed > 0 or bool(self.unreadable)
