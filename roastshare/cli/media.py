"""
CLI media commands — run the upload pipeline and share roasts.

Usage:
    roastshare upload IMAGE_URL [--dry-run]
    roastshare share IMAGE_URL --text TEXT [--url URL] [--dry-run]
    roastshare serve [--host HOST] [--port PORT] [--dry-run]
"""

from __future__ import annotations

import json

import click

from ..media.errors import MediaErrorKind, MediaPipelineError

# Exit codes
EXIT_FAILED = 1
EXIT_TIMEOUT = 2


def build_share_service(dry_run: bool = False):
    """
    Wire the pipeline and platform client from the environment.

    ``dry_run`` swaps Cloudinary and X for the in-memory mocks.
    """
    from ..config.loader import PipelineSettings, load_config
    from ..media.pipeline import MediaPipeline
    from ..share import ShareService

    settings = PipelineSettings.from_env()

    if dry_run:
        from ..providers.mock import MockOptimizationProvider, MockPlatformClient

        provider = MockOptimizationProvider()
        client = MockPlatformClient()
    else:
        from ..providers.cloudinary import CloudinaryProvider
        from ..providers.x_media import XMediaClient

        creds = load_config()
        provider = CloudinaryProvider.from_credentials(creds)
        client = XMediaClient.from_credentials(creds)

    pipeline = MediaPipeline(provider=provider, settings=settings)
    return ShareService(pipeline, client)


@click.command("upload")
@click.argument("image_url")
@click.option("--dry-run", is_flag=True, help="Use mock providers, no network calls")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def upload(ctx: click.Context, image_url: str, dry_run: bool, as_json: bool) -> None:
    """Optimize IMAGE_URL and upload it to X; print the media id."""
    service = build_share_service(dry_run=dry_run)

    try:
        media_id = service.upload(image_url)
    except MediaPipelineError as e:
        if as_json:
            click.echo(json.dumps({"success": False, **e.to_dict()}, indent=2))
        else:
            click.secho(f"❌ Upload failed [{e.kind.value}]", fg="red", bold=True)
            click.echo(f"   {e}")
            if e.retryable:
                click.echo("   The media may still finish processing; try again later.")
        ctx.exit(EXIT_TIMEOUT if e.kind == MediaErrorKind.TIMEOUT else EXIT_FAILED)
    finally:
        service.close()

    if as_json:
        click.echo(json.dumps({"success": True, "media_id": media_id}, indent=2))
    else:
        click.secho(f"✓ Media ready: {media_id}", fg="green")
        if dry_run:
            click.secho("(Dry run — mock providers, nothing uploaded)", fg="cyan")


@click.command("share")
@click.argument("image_url")
@click.option("--text", "-t", required=True, help="Roast text for the tweet")
@click.option("--url", "share_url", help="Link appended to the tweet")
@click.option("--dry-run", is_flag=True, help="Use mock providers, no network calls")
@click.pass_context
def share(ctx: click.Context, image_url: str, text: str, share_url: str, dry_run: bool) -> None:
    """Upload IMAGE_URL and post it to X with TEXT."""
    service = build_share_service(dry_run=dry_run)

    try:
        if not service.is_configured():
            click.secho(f"❌ {service.platform} credentials are not configured", fg="red")
            click.echo("   Run: roastshare check-config")
            ctx.exit(EXIT_FAILED)

        receipt = service.share_with_media(text=text, image_url=image_url, share_url=share_url)
    finally:
        service.close()

    if receipt.ok:
        click.secho("✓ Tweet posted", fg="green")
        click.echo(f"  Media ID: {receipt.media_id}")
        click.echo(f"  URL:      {receipt.tweet_url}")
        if dry_run:
            click.secho("(Dry run — mock providers, nothing posted)", fg="cyan")
        return

    error = receipt.error
    click.secho(f"❌ Share failed [{error.code}]", fg="red", bold=True)
    click.echo(f"   {error.message}")
    if error.detail:
        click.echo(f"   {error.detail}")
    ctx.exit(EXIT_TIMEOUT if error.code == MediaErrorKind.TIMEOUT.value else EXIT_FAILED)


@click.command("serve")
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=5060, type=int, help="Port to run on")
@click.option("--debug", is_flag=True, help="Enable Flask debug mode")
@click.option("--dry-run", is_flag=True, help="Use mock providers, no network calls")
def serve(host: str, port: int, debug: bool, dry_run: bool) -> None:
    """Run the HTTP API."""
    from ..api.server import run_server
    from ..config.validator import check_config_on_startup

    service = build_share_service(dry_run=dry_run)
    if not dry_run:
        check_config_on_startup()

    click.echo(f"Serving roastshare API on http://{host}:{port}")
    try:
        run_server(service, host=host, port=port, debug=debug)
    finally:
        service.close()
