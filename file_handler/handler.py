"""
File Handler — the ingest → normalize → transcode pipeline.

## Usage

    from file_handler.handler import handle

    result = handle("photo.png", {"format": "webp", "maxWidth": 800})
    result.is_image()          # True
    result.mime_type           # "image/webp"
    result.to_base64_url()     # "data:image/webp;base64,..."
    result.to_file("out/photo.webp")

Each call builds its own options and asset; nothing is shared between calls.
"""

from __future__ import annotations

import base64
import io
import logging
from pathlib import Path
from typing import Any, Optional, Union

import httpx

from .config.loader import OptionsLike, build_options
from .content.media_optimize import maybe_optimize
from .content.sources import classify_input, resolve_source
from .models.asset import OCTET_STREAM, Blob, NormalizedAsset
from .models.options import HandlerOptions
from .validation import is_base64, is_base64_data_url

logger = logging.getLogger(__name__)


class FileHandler:
    """
    Result of one pipeline run.

    Wraps the normalized asset and exposes the export conversions. Exports
    trust that the asset's bytes and type agree; they do not re-check.
    """

    is_base64 = staticmethod(is_base64)
    is_base64_data_url = staticmethod(is_base64_data_url)

    def __init__(self, asset: NormalizedAsset, options: HandlerOptions):
        self._asset = asset
        self.options = options

    @classmethod
    def handle(
        cls,
        source: Any,
        options: OptionsLike = None,
        *,
        client: Optional[httpx.Client] = None,
        **overrides: Any,
    ) -> "FileHandler":
        """Run the pipeline on one input. See module-level ``handle``."""
        opts = build_options(options, overrides)
        classified = classify_input(source)

        data, mime_type = resolve_source(classified, client=client)
        asset = NormalizedAsset(data=data, mime_type=mime_type)
        source_kind = type(classified).__name__
        logger.debug(
            f"Resolved {source_kind}: {asset.size_bytes:,} bytes ({asset.mime_type})",
            extra={
                "source": source_kind,
                "mime_type": asset.mime_type,
                "size_bytes": asset.size_bytes,
            },
        )

        asset.replace_content(*maybe_optimize(asset.data, asset.mime_type, opts))

        return cls(asset, opts)

    # ── Inspection ───────────────────────────────────────────────

    @property
    def mime_type(self) -> Optional[str]:
        return self._asset.mime_type

    @property
    def size_bytes(self) -> int:
        return self._asset.size_bytes

    def is_image(self) -> bool:
        return self._asset.is_image()

    # ── Exports ──────────────────────────────────────────────────

    def to_file(
        self,
        path: Union[str, Path],
        is_intermediary: bool = False,
    ) -> Union[Path, "FileHandler"]:
        """
        Write the bytes to disk.

        Returns:
            The written path, or this handler when ``is_intermediary`` is set
            so further exports can be chained.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self._asset.data)
        logger.debug(f"Wrote {self._asset.size_bytes:,} bytes → {target}")
        return self if is_intermediary else target

    def to_base64_url(self) -> str:
        # Header types may carry "; charset=..."; data URLs allow no spaces
        mime_type = ";".join(
            part.strip() for part in (self._asset.mime_type or OCTET_STREAM).split(";")
        )
        return f"data:{mime_type};base64,{self.to_base64()}"

    def to_base64(self) -> str:
        return base64.b64encode(self._asset.data).decode("ascii")

    def to_stream(self) -> io.BytesIO:
        """A fresh readable stream over the bytes (new object per call)."""
        return io.BytesIO(self._asset.data)

    def to_buffer(self) -> bytes:
        return self._asset.data

    def to_base64_buffer(self) -> bytes:
        return base64.b64encode(self._asset.data)

    def to_blob(self) -> Blob:
        return Blob(data=self._asset.data, type=self._asset.mime_type or "")

    def __repr__(self) -> str:
        return f"FileHandler(mime_type={self.mime_type!r}, size_bytes={self.size_bytes})"


def handle(
    source: Any,
    options: OptionsLike = None,
    *,
    client: Optional[httpx.Client] = None,
    **overrides: Any,
) -> FileHandler:
    """
    Ingest a file and return a FileHandler for it.

    Args:
        source: Path string or PathLike, http(s) URL string, bytes-like
            buffer, binary stream (or iterator of byte chunks), or Blob.
        options: HandlerOptions, a mapping of option values, or None for
            defaults. Unknown keys are ignored.
        client: Optional httpx.Client used for URL sources.
        **overrides: Option values applied on top of ``options``.

    Raises:
        UnsupportedInputError: If ``source`` is not a supported shape.
        CodecError: If bytes typed as an image cannot be transcoded.
        ConfigurationError: If the options are invalid.
    """
    return FileHandler.handle(source, options, client=client, **overrides)
