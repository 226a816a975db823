"""Utility helpers shared by the blog services and CLIs."""

from .chunking import ChunkedScheduler, ChunkMode, ChunkOutcome, chunked
from .json_extract import ResponseFormatError, extract_json_object, find_json_object
from .text import slugify, strip_or_none

__all__ = [
    "ChunkMode",
    "ChunkOutcome",
    "ChunkedScheduler",
    "ResponseFormatError",
    "chunked",
    "extract_json_object",
    "find_json_object",
    "slugify",
    "strip_or_none",
]
