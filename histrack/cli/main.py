"""histrack command-line interface.

Commands:
    process  -- snapshot an entity payload and log its changes.
    changes  -- query an entity's changelog.
    latest   -- print an entity's latest snapshot.

Storage defaults come from HISTRACK_* environment variables and can be
overridden per command.
"""

from __future__ import annotations

import asyncio
import json
import os
from typing import Any

import click

from histrack.config import load_change_config, load_config
from histrack.errors import HistrackError
from histrack.history.paths import CHANGELOG_FILENAME, resolve_entity_path
from histrack.history.service import HistoryService
from histrack.models.changes import ChangeQuery, ChangeType
from histrack.models.config import HistoryOptions, HistrackConfig
from histrack.observability.logging import setup_logging
from histrack.storage.changelog import ChangeLogStore
from histrack.storage.snapshot import SnapshotStore


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def _entity_dir(config: HistrackConfig, identifier: str, base_path: str | None, entity_folder: bool | None) -> str:
    return resolve_entity_path(
        base_path or config.storage.base_path,
        identifier,
        config.storage.use_entity_folder if entity_folder is None else entity_folder,
    )


def _storage_options(func: Any) -> Any:
    func = click.option(
        "--entity-folder/--no-entity-folder",
        default=None,
        help="Shard entity directories by first character.",
    )(func)
    func = click.option("--base-path", default=None, help="Root directory for entity history.")(func)
    return func


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="Override HISTRACK_LOG_LEVEL.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Dated entity snapshots and classified change logs."""
    config = load_config()
    setup_logging(log_level or config.log.level, json_output=config.log.json_output)
    ctx.obj = config


@cli.command()
@click.argument("identifier")
@click.argument("entity_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--entity-type", required=True, help="Entity type stamped on change records.")
@click.option(
    "--config",
    "config_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with idField/trackedFields/updateFields/softUpdateFields.",
)
@click.option("--retention", type=int, default=None, help="Snapshots kept per entity (0 keeps all).")
@_storage_options
@click.pass_obj
def process(
    config: HistrackConfig,
    identifier: str,
    entity_file: str,
    entity_type: str,
    config_file: str,
    retention: int | None,
    base_path: str | None,
    entity_folder: bool | None,
) -> None:
    """Snapshot ENTITY_FILE for IDENTIFIER and record its changes."""
    try:
        with open(entity_file, encoding="utf-8") as fh:
            entity = json.load(fh)
        options = HistoryOptions(
            base_path=base_path or config.storage.base_path,
            entity_type=entity_type,
            change_config=load_change_config(config_file),
            use_entity_folder=config.storage.use_entity_folder if entity_folder is None else entity_folder,
            snapshot_retention=config.storage.snapshot_retention if retention is None else retention,
        )
        service = HistoryService(options)
        result = asyncio.run(service.process_changes(identifier, entity))
    except (HistrackError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json(result.to_dict())


@cli.command()
@click.argument("identifier")
@click.option("--entity-type", default=None, help="Only records of this entity type.")
@click.option(
    "--type",
    "change_types",
    multiple=True,
    type=click.Choice([t.value for t in ChangeType]),
    help="Allowed change types (repeatable).",
)
@click.option("--since", default=None, help="Inclusive lower ISO-8601 bound.")
@click.option("--until", default=None, help="Inclusive upper ISO-8601 bound.")
@click.option("--limit", type=int, default=None, help="Maximum records returned.")
@_storage_options
@click.pass_obj
def changes(
    config: HistrackConfig,
    identifier: str,
    entity_type: str | None,
    change_types: tuple[str, ...],
    since: str | None,
    until: str | None,
    limit: int | None,
    base_path: str | None,
    entity_folder: bool | None,
) -> None:
    """Print IDENTIFIER's change records as JSON."""
    filters = ChangeQuery(
        entity_type=entity_type,
        from_date=since,
        to_date=until,
        change_types=[ChangeType(t) for t in change_types] or None,
        limit=limit,
    )
    try:
        path = os.path.join(_entity_dir(config, identifier, base_path, entity_folder), CHANGELOG_FILENAME)
        records = asyncio.run(ChangeLogStore().query(filters, path))
    except HistrackError as exc:
        raise click.ClickException(str(exc)) from exc
    _echo_json([record.to_dict() for record in records])


@cli.command()
@click.argument("identifier")
@_storage_options
@click.pass_obj
def latest(config: HistrackConfig, identifier: str, base_path: str | None, entity_folder: bool | None) -> None:
    """Print IDENTIFIER's most recent snapshot."""
    try:
        entity_dir = _entity_dir(config, identifier, base_path, entity_folder)
        snapshot = asyncio.run(SnapshotStore().get_latest_snapshot(entity_dir))
    except HistrackError as exc:
        raise click.ClickException(str(exc)) from exc
    if snapshot is None:
        raise click.ClickException(f"No snapshot for {identifier}")
    _echo_json(snapshot)
