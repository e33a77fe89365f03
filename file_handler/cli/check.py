"""
CLI check commands — classify base64 text.

Usage:
    python -m file_handler.main check-base64 TEXT
    python -m file_handler.main check-base64 --data-url [--prefix image/] TEXT

Exits 0 when the text is valid, 1 otherwise.
"""

from __future__ import annotations

from typing import Optional

import click


@click.command("check-base64")
@click.argument("text")
@click.option("--data-url", "as_data_url", is_flag=True, help="Expect a base64 data URL")
@click.option("--prefix", help="Required MIME type prefix for data URLs (e.g. image/)")
def check_base64(text: str, as_data_url: bool, prefix: Optional[str]) -> None:
    """Check whether TEXT is strict base64 (or a base64 data URL)."""
    from ..validation import is_base64, is_base64_data_url

    if prefix and not as_data_url:
        click.secho("Error: --prefix only applies with --data-url", fg="red")
        raise SystemExit(1)

    if as_data_url:
        valid = is_base64_data_url(text, prefix)
        kind = "data URL" if not prefix else f"data URL ({prefix}*)"
    else:
        valid = is_base64(text)
        kind = "base64"

    if valid:
        click.secho(f"✓ Valid {kind}", fg="green")
    else:
        click.secho(f"✗ Not valid {kind}", fg="red")
        raise SystemExit(1)
