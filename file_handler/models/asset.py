"""
Asset Models — The normalized byte record and its companions.

A NormalizedAsset is created once per pipeline call and owned by the
FileHandler returned to the caller. The transcode step replaces its
content at most once; nothing else mutates it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

OCTET_STREAM = "application/octet-stream"


@dataclass(frozen=True)
class Blob:
    """Binary payload tagged with a declared MIME type."""

    data: bytes
    type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ImageMetadata:
    """Container-level facts about an image."""

    width: int
    height: int
    source_format: str

    def exceeds(self, max_width: int, max_height: int) -> bool:
        """True if either dimension is over its bound."""
        return self.width > max_width or self.height > max_height


@dataclass
class NormalizedAsset:
    """Bytes plus the MIME type that describes their encoding."""

    data: bytes
    mime_type: Optional[str] = None

    def is_image(self) -> bool:
        return self.mime_type is not None and self.mime_type.startswith("image/")

    def replace_content(self, data: bytes, mime_type: Optional[str]) -> None:
        """Swap in re-encoded bytes together with their new type."""
        self.data = data
        self.mime_type = mime_type

    @property
    def size_bytes(self) -> int:
        return len(self.data)
