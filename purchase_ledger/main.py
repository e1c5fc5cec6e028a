from __future__ import annotations

import asyncio
import json
import sys
from typing import Optional

import typer

from purchase_ledger.config import Settings, load_settings
from purchase_ledger.errors import ConfigurationError, PurchaseLedgerError
from purchase_ledger.queries import fetch_identity_records
from purchase_ledger.reporter import print_records, print_report
from purchase_ledger.simulation import SimulationConfig, run_demo
from purchase_ledger.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Record purchase events on HCS and read them back from the mirror node.")
log = get_logger(__name__)


def _mask(value: Optional[str]) -> str:
    if not value:
        return "<unset>"
    return f"{value[:4]}…{value[-4:]}" if len(value) > 12 else "****"


def _settings() -> Settings:
    try:
        return load_settings()
    except ConfigurationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = _settings()
    typer.echo(
        f"operator={settings.operator_id or '<unset>'} key={_mask(settings.operator_key)} "
        f"({settings.operator_key_type}) | network={settings.hedera_network} "
        f"mirror={settings.mirror_node_url} | topic={settings.configured_topic_id or '<new>'}"
    )
    typer.echo(
        f"users={settings.simulation_users} records={settings.simulation_records_per_user} "
        f"sync={settings.mirror_sync_policy} wait={settings.mirror_sync_wait_seconds:g}s "
        f"identity={settings.identity_provider}"
    )


@app.command()
def run(
    users: Optional[int] = typer.Option(None, "--users", "-u", min=1, help="Number of ephemeral accounts."),
    records: Optional[int] = typer.Option(
        None, "--records", "-r", min=1, help="Records submitted per account."
    ),
    topic_id: Optional[str] = typer.Option(None, "--topic-id", "-t", help="Existing topic to reuse."),
    sync_policy: Optional[str] = typer.Option(
        None, "--sync-policy", help="Mirror synchronization policy: fixed or poll."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """
    Run the full simulation: topic, accounts, submissions, mirror read-back.
    """
    settings = _settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    if sync_policy is not None and sync_policy not in ("fixed", "poll"):
        raise typer.BadParameter("must be 'fixed' or 'poll'", param_hint="--sync-policy")

    config = SimulationConfig.from_settings(
        settings,
        users=users,
        records_per_user=records,
        topic_id=topic_id,
        sync_policy=sync_policy,
    )
    try:
        report = asyncio.run(run_demo(config, settings))
    except PurchaseLedgerError as exc:
        log.error(f"An error occurred in main execution: {exc}")
        raise typer.Exit(code=1) from exc
    except Exception as exc:  # noqa: BLE001 - unexpected SDK or network failure
        log.exception(f"An error occurred in main execution: {exc}")
        raise typer.Exit(code=1) from exc

    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        print_report(report)


@app.command()
def fetch(
    topic_id: str = typer.Argument(..., help="Topic to scan, e.g. 0.0.4567."),
    identity: str = typer.Argument(..., help="Identity (DID or account id) to filter on."),
    as_json: bool = typer.Option(False, "--json", help="Print matching records as JSON."),
) -> None:
    """
    Read every message of a topic from the mirror node and show one identity's records.
    """
    settings = _settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    records = asyncio.run(fetch_identity_records(topic_id, identity, settings))
    if records is None:
        print_records(records, identity)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps([record.model_dump(mode="json", by_alias=True) for record in records], indent=2))
    else:
        print_records(records, identity)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
