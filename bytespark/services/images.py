from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
from datetime import datetime, timezone
from pathlib import PurePath
from uuid import uuid4

from bytespark.core.config import AppSettings
from bytespark.integrations.llm import ContentOrchestrator
from bytespark.integrations.storage import ObjectStorage
from bytespark.integrations.workers_ai import AIProviderError
from bytespark.schemas.images import (
    ImageGenerationRequest,
    ImageGenerationResponse,
    ImageRatio,
    ImageStyle,
    ImageUploadResponse,
)

logger = logging.getLogger(__name__)

RATIO_DIMENSIONS: dict[ImageRatio, tuple[int, int]] = {
    ImageRatio.SQUARE: (1024, 1024),
    ImageRatio.LANDSCAPE: (1280, 720),
    ImageRatio.STANDARD: (1024, 768),
    ImageRatio.PHOTO: (1200, 800),
    ImageRatio.PORTRAIT: (720, 1280),
}

STYLE_SUFFIXES: dict[ImageStyle, str] = {
    ImageStyle.REALISTIC: "photorealistic, highly detailed, natural lighting",
    ImageStyle.ARTISTIC: "painterly style, expressive brushstrokes, rich colors",
    ImageStyle.ANIME: "anime style, clean lines, vibrant cel shading",
    ImageStyle.CINEMATIC: "cinematic scene, dramatic lighting, film still",
    ImageStyle.FANTASY: "magical, ethereal fantasy art",
    ImageStyle.ABSTRACT: "abstract art, bold shapes and colors",
}

COVER_PROMPT_SUFFIX = "high quality, professional blog cover image"
MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class ImageService:
    """Generate images with the remote model and keep a durable copy in R2."""

    def __init__(
        self,
        orchestrator: ContentOrchestrator,
        storage: ObjectStorage,
        settings: AppSettings,
    ):
        self._orchestrator = orchestrator
        self._storage = storage
        self._settings = settings

    async def generate_image(self, request: ImageGenerationRequest) -> ImageGenerationResponse:
        width, height = self._dimensions(request)
        params: dict[str, object] = {
            "prompt": f"{request.prompt.strip()}, {STYLE_SUFFIXES[request.style]}",
            "steps": request.steps,
            "width": width,
            "height": height,
        }
        if request.negative_prompt:
            params["negative_prompt"] = request.negative_prompt
        if request.seed is not None:
            params["seed"] = request.seed

        try:
            raw_image = await self._orchestrator.generate_image(params)
            image_data, image_bytes = self._decode_image(raw_image)
        except (AIProviderError, ValueError) as exc:
            logger.warning("Image generation failed: %s", exc)
            return ImageGenerationResponse(success=False, error=str(exc))

        key = await self._storage.put_object(
            key=self._object_key(self._settings.r2_image_prefix, ".png"),
            body=image_bytes,
            content_type="image/png",
        )
        return ImageGenerationResponse(
            success=True,
            image_data=image_data,
            image_key=key,
            image_url=self._storage.public_url(key),
            metadata={
                "width": width,
                "height": height,
                "steps": request.steps,
                "seed": request.seed,
                "style": request.style.value,
                "model": self._orchestrator.image_model,
            },
        )

    async def generate_cover(self, title: str) -> ImageGenerationResponse:
        return await self.generate_image(
            ImageGenerationRequest(
                prompt=f"{title} - {COVER_PROMPT_SUFFIX}",
                ratio=ImageRatio.LANDSCAPE,
                style=ImageStyle.ARTISTIC,
                steps=8,
            )
        )

    async def upload_image(
        self,
        *,
        filename: str,
        content_type: str | None,
        body: bytes,
    ) -> ImageUploadResponse:
        """Store an admin-supplied image; only ``image/*`` payloads are accepted."""
        content_type = content_type or mimetypes.guess_type(filename)[0] or ""
        if not content_type.startswith("image/"):
            raise ValueError("Invalid file type; please upload an image.")
        if not body:
            raise ValueError("Uploaded file is empty.")
        if len(body) > MAX_UPLOAD_BYTES:
            raise ValueError("Uploaded image exceeds the 10 MB limit.")

        extension = PurePath(filename).suffix.lower() or mimetypes.guess_extension(content_type) or ""
        key = await self._storage.put_object(
            key=self._object_key("uploads/", extension),
            body=body,
            content_type=content_type,
        )
        if key is None:
            raise RuntimeError("Image storage is unavailable.")
        return ImageUploadResponse(
            key=key,
            url=self._storage.public_url(key),
            filename=filename,
            content_type=content_type,
            size=len(body),
        )

    def _dimensions(self, request: ImageGenerationRequest) -> tuple[int, int]:
        if request.ratio is ImageRatio.CUSTOM:
            return int(request.custom_width or 1024), int(request.custom_height or 1024)
        return RATIO_DIMENSIONS[request.ratio]

    def _decode_image(self, raw_image: str) -> tuple[str, bytes]:
        """Return the inline data URI and the raw PNG bytes for ``raw_image``."""
        if raw_image.startswith("data:image/"):
            data_uri = raw_image
            encoded = raw_image.split(",", 1)[1] if "," in raw_image else ""
        else:
            data_uri = f"data:image/png;base64,{raw_image}"
            encoded = raw_image
        try:
            return data_uri, base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Model returned image data that is not valid base64.") from exc

    def _object_key(self, prefix: str, extension: str) -> str:
        timestamp = datetime.now(tz=timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        return f"{prefix.rstrip('/')}/{timestamp}-{uuid4().hex[:12]}{extension}"
