from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class ImageRatio(str, Enum):
    SQUARE = "1:1"
    LANDSCAPE = "16:9"
    STANDARD = "4:3"
    PHOTO = "3:2"
    PORTRAIT = "9:16"
    CUSTOM = "custom"


class ImageStyle(str, Enum):
    REALISTIC = "realistic"
    ARTISTIC = "artistic"
    ANIME = "anime"
    CINEMATIC = "cinematic"
    FANTASY = "fantasy"
    ABSTRACT = "abstract"


class ImageGenerationRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=2048)
    negative_prompt: str | None = Field(default=None, max_length=2048)
    ratio: ImageRatio = ImageRatio.LANDSCAPE
    style: ImageStyle = ImageStyle.REALISTIC
    custom_width: int | None = Field(default=None, ge=256, le=2048)
    custom_height: int | None = Field(default=None, ge=256, le=2048)
    steps: int = Field(default=8, ge=1, le=8)
    seed: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _custom_dimensions(self) -> "ImageGenerationRequest":
        if not self.prompt.strip():
            raise ValueError("Prompt is required.")
        if self.ratio is ImageRatio.CUSTOM and (not self.custom_width or not self.custom_height):
            raise ValueError("Custom ratio requires custom_width and custom_height.")
        return self


class ImageGenerationResponse(BaseModel):
    success: bool
    image_data: str | None = None
    image_key: str | None = None
    image_url: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


class ImageUploadResponse(BaseModel):
    key: str
    url: str | None = None
    filename: str
    content_type: str
    size: int
