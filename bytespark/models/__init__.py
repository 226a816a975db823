"""SQLAlchemy models and declarative base."""

from bytespark.models.base import Base  # noqa: F401
from bytespark.models.entities import Article  # noqa: F401

__all__ = ["Base", "Article"]
