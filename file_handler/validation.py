"""
Validation — Error types and text classification utilities.

Provides the error taxonomy shared by the whole pipeline, plus the pure
base64 / data-URL checks that callers use before handing text around.

## Usage

    from file_handler.validation import is_base64, is_base64_data_url

    is_base64("aGVsbG8=")                                  # True
    is_base64_data_url("data:image/png;base64,aGVsbG8=", "image/")  # True

    try:
        mime, data = parse_data_url(text)
    except ValidationError as e:
        print(f"Validation failed: {e}")
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Dict, Optional, Tuple


class FileHandlerError(Exception):
    """Base class for all file handler errors."""
    pass


class UnsupportedInputError(FileHandlerError, TypeError):
    """Raised when an input matches none of the recognized source shapes."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unsupported input format: {type(value).__name__}")


class CodecError(FileHandlerError):
    """Raised when bytes tagged as an image cannot be decoded or re-encoded."""

    def __init__(self, message: str, mime_type: Optional[str] = None):
        self.mime_type = mime_type
        super().__init__(message)


class ValidationError(FileHandlerError):
    """Raised when validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        self.message = message
        self.field = field
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class ConfigurationError(FileHandlerError):
    """Raised when configuration is missing or invalid."""
    pass


# ── Base64 / data URL ────────────────────────────────────────

BASE64_PATTERN = re.compile(
    r"\A(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?\Z"
)

# data:<type>/<subtype>[;param]*;base64,<payload>
DATA_URL_PATTERN = re.compile(
    r"\Adata:([a-zA-Z0-9]+/[a-zA-Z0-9\-.+]+)((?:;[a-zA-Z0-9\-_=.+]+)*);base64,([^\"]*)\Z"
)


def _reencode(text: str) -> Optional[str]:
    """Decode then re-encode base64 text, or None if it does not decode."""
    try:
        decoded = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        return None
    return base64.b64encode(decoded).decode("ascii")


def is_base64(text: object) -> bool:
    """
    Strict base64 check.

    The text must match the base64 alphabet with correct padding and must
    survive a decode → encode round trip (padding differences ignored).
    """
    if not text or not isinstance(text, str):
        return False

    if not BASE64_PATTERN.match(text):
        return False

    encoded = _reencode(text)
    if encoded is None:
        return False
    return encoded.replace("=", "") == text.replace("=", "")


def is_base64_data_url(text: object, mime_type_prefix: Optional[str] = None) -> bool:
    """
    Check that text is a ``data:<type>[;params];base64,<payload>`` URL.

    Args:
        text: Candidate string.
        mime_type_prefix: If given, the declared type must start with it
            (e.g. ``"image/"``).
    """
    if not text or not isinstance(text, str):
        return False

    if not text.startswith("data:"):
        return False

    match = DATA_URL_PATTERN.match(text)
    if not match:
        return False

    mime_type, _params, payload = match.groups()

    if mime_type_prefix and not mime_type.startswith(mime_type_prefix):
        return False

    return _reencode(payload) == payload


def parse_data_url(text: str) -> Tuple[str, bytes]:
    """
    Split a base64 data URL into its MIME type and decoded bytes.

    Parameters stay on the type (``text/html;charset=utf-8``) so a
    ``to_base64_url`` result parses back to the type it was built from.

    Raises:
        ValidationError: If the text is not a valid base64 data URL.
    """
    if not is_base64_data_url(text):
        preview = text[:40] if isinstance(text, str) else repr(text)
        raise ValidationError(
            "Not a base64 data URL",
            field="data_url",
            details={"preview": preview},
        )

    match = DATA_URL_PATTERN.match(text)
    mime_type, params, payload = match.groups()
    return mime_type + params, base64.b64decode(payload)
