from __future__ import annotations

import json
from typing import Any


class ResponseFormatError(ValueError):
    """Raised when a model answer does not carry the expected JSON payload."""


def find_json_object(text: str) -> str:
    """Return the first balanced ``{...}`` substring of ``text``.

    Braces inside JSON string literals do not count towards the balance, so
    prose before or after the object (and code fences) are tolerated.
    """
    if not text:
        raise ResponseFormatError("Model response is empty.")

    start = text.find("{")
    if start == -1:
        raise ResponseFormatError("No JSON object found in model response.")

    depth = 0
    in_string = False
    escaped = False
    for position in range(start, len(text)):
        char = text[position]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : position + 1]

    raise ResponseFormatError("Unbalanced JSON object in model response.")


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the first balanced JSON object embedded in a model answer."""
    candidate = find_json_object(text)
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise ResponseFormatError(f"Invalid JSON in model response: {exc.msg}") from exc
    if not isinstance(parsed, dict):
        raise ResponseFormatError("Model response JSON is not an object.")
    return parsed
