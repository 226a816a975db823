from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from bytespark.i18n.locales import CANONICAL_LOCALE
from bytespark.i18n.message_tree import MessageTree

logger = logging.getLogger(__name__)


class MessageCatalog:
    """Locale message files stored as ``<messages_dir>/<code>.json``."""

    def __init__(self, messages_dir: Path, *, canonical: str = CANONICAL_LOCALE):
        self._messages_dir = Path(messages_dir)
        self._canonical = canonical

    @property
    def messages_dir(self) -> Path:
        return self._messages_dir

    def path_for(self, code: str) -> Path:
        return self._messages_dir / f"{code}.json"

    def load_canonical(self) -> MessageTree:
        """Read the source tree; a missing or invalid file aborts the caller."""
        tree = json.loads(self.path_for(self._canonical).read_text(encoding="utf-8"))
        if not isinstance(tree, dict):
            raise ValueError(f"{self.path_for(self._canonical)} must contain a JSON object.")
        return tree

    def load(self, code: str) -> MessageTree:
        """Read a target tree, treating an absent file as empty."""
        path = self.path_for(code)
        if not path.exists():
            logger.info("No existing messages for %s; %s will be created.", code, path)
            return {}
        tree: Any = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(tree, dict):
            raise ValueError(f"{path} must contain a JSON object.")
        return tree

    def save(self, code: str, tree: MessageTree) -> Path:
        path = self.path_for(code)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(tree, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        logger.debug("Wrote %s", path)
        return path
