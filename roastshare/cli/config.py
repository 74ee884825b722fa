"""
CLI config commands — credential checking and template generation.

Usage:
    roastshare check-config [--json]
    roastshare generate-config [--output FILE]
"""

from __future__ import annotations

import json

import click


@click.command("check-config")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def check_config(ctx: click.Context, as_json: bool) -> None:
    """Check provider credential status."""
    from ..config.validator import ConfigValidator

    results = ConfigValidator().validate_all()

    if as_json:
        click.echo(json.dumps({name: s.to_dict() for name, s in results.items()}, indent=2))
        return

    click.echo("\n📋 Provider Configuration Status\n")

    not_configured = []
    for name, status in sorted(results.items()):
        if status.configured:
            click.secho(f"  ✓ {name}", fg="green")
        else:
            not_configured.append((name, status))
            click.secho(f"  ✗ {name}", fg="red", nl=False)
            click.echo(f" — missing: {', '.join(status.missing)}")

    click.echo()
    configured = len(results) - len(not_configured)
    click.secho(
        f"Summary: {configured} configured, {len(not_configured)} not configured",
        bold=True,
    )

    if not_configured:
        click.echo("\n📖 Setup Guide:\n")
        for name, status in not_configured:
            click.echo(f"  {name}:")
            click.echo(f"    → {status.guidance}")


@click.command("generate-config")
@click.option("--output", "-o", help="Output file (default: stdout)")
def generate_config(output: str) -> None:
    """Generate a ROASTSHARE_CONFIG template."""
    from ..config.loader import MASTER_CONFIG_VAR, generate_master_config_template

    template = generate_master_config_template()

    if output:
        with open(output, "w") as f:
            f.write(template)
        click.secho(f"✅ Template written to {output}", fg="green")
        click.echo(f"Edit it, then export its contents as {MASTER_CONFIG_VAR}.")
    else:
        click.echo(template)
