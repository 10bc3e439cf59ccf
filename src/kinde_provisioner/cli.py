"""Kinde provisioner CLI.

Usage:
    kinde-provisioner apply                    # Provision using CONFIG_PATH
    kinde-provisioner apply -c config/dev.json # Provision a specific document
    kinde-provisioner apply --strict           # Exit 2 if any resource failed
    kinde-provisioner plan -c config/dev.json  # Show what would be applied

Credentials come from KINDE_DOMAIN, KINDE_CLIENT_ID, KINDE_CLIENT_SECRET,
KINDE_AUDIENCE and KINDE_SCOPES (environment or .env).
"""

from __future__ import annotations

import asyncio
import logging

import click
from pydantic import ValidationError

from . import __version__
from .compatibility import get_adapter
from .config_loader import check_config, load_config
from .constants import EXIT_RESOURCE_FAILURES
from .errors import ProvisionerError
from .models.outcome import OutcomeStatus, ReconciliationReport
from .observability.logging import setup_structured_logging
from .services.driver import run
from .services.sequencer import plan as build_plan
from .settings import Settings, load_settings

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    OutcomeStatus.SUCCESS: "green",
    OutcomeStatus.PARTIAL_FAILURE: "yellow",
    OutcomeStatus.FAILURE: "red",
}


def _load_settings(**overrides) -> Settings:
    try:
        return load_settings(**overrides)
    except ValidationError as e:
        raise click.ClickException(f"Invalid settings: {e}") from e


def configure_logging(
    settings: Settings, log_level: str | None, json_logs: bool | None
) -> None:
    """Configure structured logging from settings, with CLI overrides."""
    setup_structured_logging(
        log_level=(log_level or settings.log_level).upper(),
        enable_json_formatting=settings.json_logs if json_logs is None else json_logs,
        correlation_id_enabled=settings.correlation_ids,
    )


def print_report(report: ReconciliationReport) -> None:
    """Print one line per outcome followed by the totals."""
    for outcome in sorted(report.outcomes, key=lambda o: o.label):
        click.secho(
            f"{outcome.status.value:<16} {outcome.label}",
            fg=STATUS_COLORS[outcome.status],
        )
        for error in outcome.errors:
            click.echo(f"    - {error}")
    click.echo(
        f"\n{report.succeeded} succeeded, {report.partial} partially applied, "
        f"{report.failed} failed"
    )


@click.group()
@click.version_option(version=__version__, prog_name="kinde-provisioner")
def main() -> None:
    """Provision a Kinde environment from a declarative JSON document."""


@main.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Provisioning document (defaults to CONFIG_PATH)",
)
@click.option(
    "--api-generation",
    type=click.Choice(["key", "id"]),
    default=None,
    help="Management API generation (defaults to KINDE_API_GENERATION)",
)
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
@click.option(
    "--json-logs/--text-logs", default=None, help="Override JSON_LOGS"
)
@click.option(
    "--strict",
    is_flag=True,
    help=f"Exit with code {EXIT_RESOURCE_FAILURES} when any resource was not fully applied",
)
@click.pass_context
def apply(
    ctx: click.Context,
    config_path: str | None,
    api_generation: str | None,
    log_level: str | None,
    json_logs: bool | None,
    strict: bool,
) -> None:
    """Create every resource declared in the provisioning document."""
    overrides = {"KINDE_API_GENERATION": api_generation} if api_generation else {}
    settings = _load_settings(**overrides)
    configure_logging(settings, log_level, json_logs)

    try:
        settings.require_credentials()
        config = load_config(config_path or settings.config_path)
        report = asyncio.run(run(settings, config))
    except ProvisionerError as e:
        logger.error(f"Provisioning aborted: {e}")
        raise click.ClickException(str(e)) from e

    print_report(report)
    if strict and report.has_failures:
        ctx.exit(EXIT_RESOURCE_FAILURES)


@main.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Provisioning document (defaults to CONFIG_PATH)",
)
@click.option(
    "--api-generation",
    type=click.Choice(["key", "id"]),
    default=None,
    help="Management API generation (defaults to KINDE_API_GENERATION)",
)
def plan(config_path: str | None, api_generation: str | None) -> None:
    """Show the resources that would be applied, without calling Kinde."""
    overrides = {"KINDE_API_GENERATION": api_generation} if api_generation else {}
    settings = _load_settings(**overrides)
    adapter = get_adapter(settings.api_generation)

    try:
        config = load_config(config_path or settings.config_path)
        check_config(config, adapter)
    except ProvisionerError as e:
        raise click.ClickException(str(e)) from e

    reconciliation_plan = build_plan(config, adapter)
    if reconciliation_plan.is_empty:
        click.echo("Nothing to apply")
        return

    for number, wave in enumerate(reconciliation_plan.waves, start=1):
        click.echo(f"Wave {number} ({len(wave)} concurrent):")
        for item in wave:
            click.echo(f"  {item.label}")


if __name__ == "__main__":
    main()
