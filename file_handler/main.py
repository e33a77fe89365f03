"""
File Handler — CLI Entry Point

Usage:
    python -m file_handler.main convert photo.png -o photo.jpg
    python -m file_handler.main convert https://example.com/a.png --format webp --data-url
    python -m file_handler.main inspect photo.png
    python -m file_handler.main check-base64 aGVsbG8=
"""

from __future__ import annotations

# Load .env file FIRST, before any other imports that might read env vars
from pathlib import Path
from dotenv import load_dotenv

_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

from typing import Optional

import click

from .cli.check import check_base64
from .cli.convert import convert, inspect
from .logging_config import setup_logging


@click.group()
@click.option("--log-level", help="DEBUG, INFO, WARNING, ERROR (default: LOG_LEVEL or INFO)")
@click.option("--log-format", type=click.Choice(["text", "json"]), help="Log output format")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], log_format: Optional[str]) -> None:
    """File Handler — ingest files, optimize images, export bytes."""
    ctx.ensure_object(dict)
    setup_logging(level=log_level, format_type=log_format)


cli.add_command(convert)
cli.add_command(inspect)
cli.add_command(check_base64)


if __name__ == "__main__":
    cli()
