"""
Roast Share — CLI Entry Point

Usage:
    roastshare upload IMAGE_URL [--dry-run]
    roastshare share IMAGE_URL --text TEXT [--url URL]
    roastshare check-config
    roastshare serve
"""

from __future__ import annotations

# Load .env file FIRST, before any other imports that might read env vars
from pathlib import Path
from dotenv import load_dotenv

_project_root = Path(__file__).parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

import click

from .cli.config import check_config, generate_config
from .cli.media import serve, share, upload
from .logging_config import setup_logging


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
@click.option("--log-format", type=click.Choice(["text", "json"]), default=None, help="Override LOG_FORMAT")
@click.pass_context
def cli(ctx: click.Context, log_level: str, log_format: str) -> None:
    """Roast Share — optimize roast memes and post them to X."""
    setup_logging(level=log_level, format_type=log_format)
    ctx.ensure_object(dict)
    ctx.obj["root"] = _project_root


cli.add_command(upload)
cli.add_command(share)
cli.add_command(serve)
cli.add_command(check_config)
cli.add_command(generate_config)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
