"""
File Handler — ingest files from paths, URLs, buffers, streams and blobs,
optimize images, and export the result in several representations.
"""

from .handler import FileHandler, handle
from .models.asset import Blob
from .models.options import HandlerOptions, ImageFormat
from .validation import (
    CodecError,
    ConfigurationError,
    FileHandlerError,
    UnsupportedInputError,
    ValidationError,
    is_base64,
    is_base64_data_url,
    parse_data_url,
)

__all__ = [
    "Blob",
    "CodecError",
    "ConfigurationError",
    "FileHandler",
    "FileHandlerError",
    "HandlerOptions",
    "ImageFormat",
    "UnsupportedInputError",
    "ValidationError",
    "handle",
    "is_base64",
    "is_base64_data_url",
    "parse_data_url",
]
