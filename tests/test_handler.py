"""
Tests for the pipeline entry point and the FileHandler exports.
"""

from __future__ import annotations

import base64
import io
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import httpx
import pytest

from file_handler import FileHandler, handle
from file_handler.content.media_optimize import maybe_optimize
from file_handler.models.asset import Blob
from file_handler.models.options import HandlerOptions
from file_handler.validation import (
    CodecError,
    ConfigurationError,
    UnsupportedInputError,
    parse_data_url,
)

from imaging import decoded_size


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


# ═══════════════════════════════════════════════════════════════════
# Pipeline behaviour
# ═══════════════════════════════════════════════════════════════════


class TestNonImageIdentity:
    """Outside the image branch the pipeline is an identity transform."""

    def test_buffer(self, non_image):
        result = handle(non_image, {})
        assert result.is_image() is False
        assert result.to_buffer() == non_image
        assert result.mime_type == "application/octet-stream"

    def test_text_file(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_bytes(b"plain text")

        result = handle(str(path))

        assert result.to_buffer() == b"plain text"
        assert result.mime_type == "text/plain"

    def test_blob(self):
        result = handle(Blob(b"%PDF-1.4 stub", "application/pdf"))
        assert result.to_buffer() == b"%PDF-1.4 stub"
        assert result.mime_type == "application/pdf"


class TestImageBranch:
    """Images are resized and converted unless skipped."""

    def test_scenario_webp(self, large_png):
        result = handle(large_png, {"maxWidth": 500, "maxHeight": 500, "format": "webp", "quality": 80})

        width, height, fmt = decoded_size(result.to_buffer())
        assert width <= 500 and height <= 500
        assert fmt == "WEBP"
        assert result.mime_type == "image/webp"
        assert result.is_image() is True

    def test_default_options_convert_to_jpeg(self, small_png):
        result = handle(small_png)

        assert result.mime_type == "image/jpeg"
        assert decoded_size(result.to_buffer()) == (100, 80, "JPEG")

    def test_small_image_not_enlarged(self, png_factory):
        result = handle(png_factory(40, 30), max_width=500, max_height=500, format="png")
        assert decoded_size(result.to_buffer()) == (40, 30, "PNG")
        assert result.mime_type == "image/png"

    def test_skip_optimization_keeps_bytes(self, large_png):
        result = handle(large_png, {"skipImageOptimization": True})

        assert result.to_buffer() == large_png
        assert result.mime_type == "image/png"
        assert result.is_image() is True

    def test_keyword_overrides_beat_mapping(self, small_png):
        result = handle(small_png, {"format": "png"}, format="webp")
        assert result.mime_type == "image/webp"

    def test_options_object(self, small_png):
        opts = HandlerOptions(format="png")
        result = handle(small_png, opts)
        assert result.options == opts
        assert result.mime_type == "image/png"

    def test_image_file_path(self, tmp_path, large_png):
        path = tmp_path / "big.png"
        path.write_bytes(large_png)

        result = handle(path, format="webp")

        width, height, _ = decoded_size(result.to_buffer())
        assert (width, height) == (500, 500)
        assert result.mime_type == "image/webp"

    def test_stream_input(self, large_png):
        result = handle(io.BytesIO(large_png), max_width=100, max_height=100)
        assert decoded_size(result.to_buffer())[:2] == (100, 100)

    def test_mislabelled_path_raises_codec_error(self, tmp_path, non_image):
        """A .png file that is not a PNG is a real error, not a silent fallback."""
        path = tmp_path / "fake.png"
        path.write_bytes(non_image)

        with pytest.raises(CodecError):
            handle(str(path))

    def test_mislabelled_blob_with_skip(self, non_image):
        result = handle(Blob(non_image, "image/png"), skip_image_optimization=True)
        assert result.to_buffer() == non_image


class TestUrlInputs:
    """URL inputs take their type from the response header."""

    def test_image_url_optimized(self, large_png):
        client = _client(
            lambda request: httpx.Response(200, content=large_png, headers={"content-type": "image/png"})
        )
        result = handle("https://example.com/big.png", client=client, format="webp")

        assert result.mime_type == "image/webp"
        assert decoded_size(result.to_buffer())[:2] == (500, 500)

    def test_missing_content_type_is_not_image(self, large_png):
        """Image bytes without a Content-Type header stay untouched."""
        client = _client(lambda request: httpx.Response(200, content=large_png))

        result = handle("https://example.com/big.png", client=client)

        assert result.is_image() is False
        assert result.mime_type is None
        assert result.to_buffer() == large_png


class TestErrors:
    """Error propagation from the entry point."""

    def test_unsupported_input(self):
        with pytest.raises(UnsupportedInputError):
            handle(12345)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            handle(str(tmp_path / "nope.png"))

    def test_invalid_options(self, small_png):
        with pytest.raises(ConfigurationError):
            handle(small_png, {"quality": 0})

    def test_zero_width_rejected(self, small_png):
        with pytest.raises(ConfigurationError):
            handle(small_png, max_width=0)

    def test_unknown_option_ignored(self, small_png):
        result = handle(small_png, {"unknownKey": 1})
        assert result.mime_type == "image/jpeg"


# ═══════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════


class TestExports:
    """Each export reflects the same bytes and type."""

    @pytest.fixture
    def result(self):
        return handle(Blob(b"hello", "text/plain"))

    def test_to_base64(self, result):
        assert result.to_base64() == "aGVsbG8="

    def test_to_base64_buffer(self, result):
        assert result.to_base64_buffer() == b"aGVsbG8="

    def test_to_base64_url(self, result):
        assert result.to_base64_url() == "data:text/plain;base64,aGVsbG8="

    def test_data_url_round_trip(self, small_png):
        result = handle(small_png, format="png")

        mime, data = parse_data_url(result.to_base64_url())

        assert mime == result.mime_type == "image/png"
        assert data == result.to_buffer()
        assert FileHandler.is_base64_data_url(result.to_base64_url(), "image/")

    def test_data_url_from_header_with_parameters(self):
        client = _client(
            lambda request: httpx.Response(
                200, content=b"<p>hi</p>", headers={"content-type": "text/html; charset=utf-8"}
            )
        )
        result = handle("https://example.com/", client=client)

        text = result.to_base64_url()

        assert text == "data:text/html;charset=utf-8;base64,PHA+aGk8L3A+"
        assert FileHandler.is_base64_data_url(text, "text/")
        assert parse_data_url(text) == ("text/html;charset=utf-8", b"<p>hi</p>")

    def test_data_url_without_type(self):
        client = _client(lambda request: httpx.Response(200, content=b"hello"))
        result = handle("https://example.com/x", client=client)
        assert result.to_base64_url() == "data:application/octet-stream;base64,aGVsbG8="

    def test_to_stream_is_fresh_each_call(self, result):
        first = result.to_stream()
        assert first.read() == b"hello"
        assert first.read() == b""
        assert result.to_stream().read() == b"hello"

    def test_to_stream_does_not_alias(self, result):
        stream = result.to_stream()
        stream.write(b"XX")
        assert result.to_buffer() == b"hello"

    def test_to_blob(self, result):
        blob = result.to_blob()
        assert blob == Blob(b"hello", "text/plain")
        assert blob.size == 5

    def test_to_file_returns_path(self, result, tmp_path):
        target = tmp_path / "out" / "hello.txt"
        written = result.to_file(target)

        assert written == target
        assert target.read_bytes() == b"hello"

    def test_to_file_intermediary_chains(self, result, tmp_path):
        target = tmp_path / "hello.txt"
        returned = result.to_file(str(target), is_intermediary=True)

        assert returned is result
        assert returned.to_base64() == base64.b64encode(target.read_bytes()).decode()

    def test_static_classifiers(self):
        assert FileHandler.is_base64("aGVsbG8=") is True
        assert FileHandler.is_base64("not base64!!") is False


class TestIndependence:
    """Concurrent calls share nothing."""

    def test_parallel_calls(self, png_factory):
        inputs = [png_factory(50 + i, 40) for i in range(6)]
        formats = ["png", "webp", "jpeg"] * 2

        with ThreadPoolExecutor(max_workers=3) as pool:
            results = list(pool.map(lambda args: handle(args[0], format=args[1]), zip(inputs, formats)))

        for result, fmt, i in zip(results, formats, range(6)):
            assert result.mime_type == f"image/{fmt}"
            assert decoded_size(result.to_buffer())[:2] == (50 + i, 40)

    def test_routes_through_maybe_optimize(self, small_png):
        with patch("file_handler.handler.maybe_optimize", wraps=maybe_optimize) as spy:
            result = handle(small_png, format="png")

        spy.assert_called_once()
        assert spy.call_args.args[1] == "image/png"
        assert result.mime_type == "image/png"

    def test_no_class_level_state(self, small_png):
        handle(small_png)
        assert not hasattr(FileHandler, "handler")
