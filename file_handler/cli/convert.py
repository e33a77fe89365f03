"""
CLI convert commands — run the pipeline on one input.

Usage:
    python -m file_handler.main convert SOURCE [-o OUT] [--format webp] [--max-width N] ...
    python -m file_handler.main inspect SOURCE
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..models.options import ImageFormat

FORMAT_CHOICES = [f.value for f in ImageFormat] + ["jpg"]


@click.command("convert")
@click.argument("source")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), help="Write result to this file")
@click.option("--max-width", type=int, help="Max width in pixels (default: 500)")
@click.option("--max-height", type=int, help="Max height in pixels (default: 500)")
@click.option("--quality", type=click.IntRange(1, 100), help="Encoder quality 1-100 (default: 90)")
@click.option("--format", "image_format", type=click.Choice(FORMAT_CHOICES, case_sensitive=False),
              help="Target image format (default: jpeg)")
@click.option("--skip-optimization", is_flag=True, help="Never resize or re-encode images")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="YAML file with option values")
@click.option("--data-url", "as_data_url", is_flag=True, help="Print the result as a data URL")
@click.option("--base64", "as_base64", is_flag=True, help="Print the result as base64")
def convert(
    source: str,
    output: Optional[Path],
    max_width: Optional[int],
    max_height: Optional[int],
    quality: Optional[int],
    image_format: Optional[str],
    skip_optimization: bool,
    config_path: Optional[Path],
    as_data_url: bool,
    as_base64: bool,
) -> None:
    """Ingest SOURCE (path or URL), optimize images, and export the result."""
    import httpx

    from ..config.loader import load_options
    from ..handler import handle
    from ..validation import FileHandlerError

    if as_data_url and as_base64:
        click.secho("Error: choose one of --data-url or --base64", fg="red")
        raise SystemExit(1)

    try:
        options = load_options(
            {
                "max_width": max_width,
                "max_height": max_height,
                "quality": quality,
                "format": image_format,
                "skip_image_optimization": True if skip_optimization else None,
            },
            config_path=config_path,
        )
        result = handle(source, options)
    except (FileHandlerError, OSError, httpx.HTTPError) as e:
        raise click.ClickException(str(e))

    if as_data_url:
        click.echo(result.to_base64_url())
    elif as_base64:
        click.echo(result.to_base64())

    if output:
        written = result.to_file(output)
        click.secho(f"✓ Wrote {result.size_bytes:,} bytes ({result.mime_type}) → {written}", fg="green", err=True)
    elif not (as_data_url or as_base64):
        click.echo(f"Type:  {result.mime_type or '(unknown)'}")
        click.echo(f"Size:  {result.size_bytes:,} bytes")
        click.echo(f"Image: {'yes' if result.is_image() else 'no'}")


@click.command("inspect")
@click.argument("source")
def inspect(source: str) -> None:
    """Show the detected type and, for images, the dimensions of SOURCE."""
    import httpx

    from ..content.sniff import read_image_metadata
    from ..handler import handle
    from ..validation import CodecError, FileHandlerError

    try:
        result = handle(source, skip_image_optimization=True)
    except (FileHandlerError, OSError, httpx.HTTPError) as e:
        raise click.ClickException(str(e))

    click.echo(f"Type:  {result.mime_type or '(unknown)'}")
    click.echo(f"Size:  {result.size_bytes:,} bytes")

    if not result.is_image():
        return

    try:
        meta = read_image_metadata(result.to_buffer())
    except CodecError as e:
        click.secho(f"Image: undecodable ({e})", fg="yellow")
        return

    click.echo(f"Image: {meta.width}x{meta.height} ({meta.source_format})")
