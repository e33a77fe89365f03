"""
Handler Options — Pydantic schema for one pipeline invocation.

Options are frozen once built. Both snake_case and the camelCase spellings
used by JavaScript callers are accepted; unknown keys are ignored.
"""

from __future__ import annotations

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ImageFormat(str, Enum):
    """Container formats the transcode step can write."""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    AVIF = "avif"
    TIFF = "tiff"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered == "jpg":
                return cls.JPEG
            for member in cls:
                if member.value == lowered:
                    return member
        return None

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def pillow_name(self) -> str:
        """Format name as Pillow's ``Image.save`` expects it."""
        return self.value.upper()


class HandlerOptions(BaseModel):
    """Resize / quality / format policy for a single call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    max_width: int = Field(
        default=500, gt=0,
        validation_alias=AliasChoices("max_width", "maxWidth"),
    )
    max_height: int = Field(
        default=500, gt=0,
        validation_alias=AliasChoices("max_height", "maxHeight"),
    )
    quality: int = Field(default=90, ge=1, le=100)
    format: ImageFormat = Field(
        default=ImageFormat.JPEG,
        validation_alias=AliasChoices("format", "target_format", "targetFormat"),
    )
    skip_image_optimization: bool = Field(
        default=False,
        validation_alias=AliasChoices("skip_image_optimization", "skipImageOptimization"),
    )

    @property
    def target_mime_type(self) -> str:
        return self.format.mime_type
