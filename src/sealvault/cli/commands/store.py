#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

import json
from pathlib import Path

import typer

from ...formats.container import create_backup, restore_backup
from ...storage import BackupStore
from ..common import (
    _ctx_config,
    _ctx_value,
    _read_json_value,
    _read_passphrase,
    _run_cli,
    _warn_if_weak,
    _write_output,
)
from ..ui import build_kv_table, build_records_table, console, format_epoch, format_size

store_app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Keep sealed backups in a local directory with retention.",
)

_DIR_HELP = "Store directory (overrides storage.directory from the config)."


def register(app: typer.Typer) -> None:
    app.add_typer(store_app, name="store")


def _open_store(ctx: typer.Context, directory: str | None) -> BackupStore:
    config = _ctx_config(ctx)
    storage = config.storage
    return BackupStore(
        Path(directory).expanduser() if directory else storage.directory,
        retention_days=storage.retention_days,
        max_total_bytes=storage.max_total_bytes,
    )


@store_app.command("save", help="Seal a JSON document and add it to the store.")
def save(
    ctx: typer.Context,
    input_path: str = typer.Argument(..., metavar="INPUT", help="JSON file to seal ('-' = stdin)."),
    name: str = typer.Option("backup", "--name", "-n", help="Backup name."),
    directory: str | None = typer.Option(None, "--dir", help=_DIR_HELP),
    passphrase_env: str | None = typer.Option(None, "--passphrase-env"),
) -> None:
    debug = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        config = _ctx_config(ctx)
        quiet = bool(_ctx_value(ctx, "quiet"))
        store = _open_store(ctx, directory)
        value = _read_json_value(input_path)
        passphrase = _read_passphrase(passphrase_env, confirm=True)
        _warn_if_weak(passphrase, quiet=quiet)
        container = create_backup(
            value,
            passphrase,
            kdf=config.kdf,
            compression=config.compression,
            max_bytes=config.limits.max_backup_bytes,
        )
        record = store.save(container, name=name)
        if quiet:
            typer.echo(record.id)
            return
        console.print(f"[success]Saved[/success] {record.name} as [accent]{record.id}[/accent]")

    _run_cli(_run, debug=debug)


@store_app.command("list", help="List backups that have not expired.")
def list_(
    ctx: typer.Context,
    directory: str | None = typer.Option(None, "--dir", help=_DIR_HELP),
    as_json: bool = typer.Option(False, "--json", help="Print records as JSON."),
) -> None:
    debug = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        records = _open_store(ctx, directory).list_backups()
        if as_json:
            typer.echo(json.dumps([record.to_dict() for record in records], indent=2))
            return
        if not records:
            console.print("[muted]No backups.[/muted]")
            return
        console.print(build_records_table(records))

    _run_cli(_run, debug=debug)


@store_app.command("restore", help="Verify, decrypt and print a stored backup.")
def restore(
    ctx: typer.Context,
    backup_id: str = typer.Argument(..., metavar="ID"),
    output: str | None = typer.Option(None, "--output", "-o", help="Write the JSON here."),
    directory: str | None = typer.Option(None, "--dir", help=_DIR_HELP),
    passphrase_env: str | None = typer.Option(None, "--passphrase-env"),
) -> None:
    debug = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        store = _open_store(ctx, directory)
        container = store.load(backup_id)
        passphrase = _read_passphrase(passphrase_env, confirm=False)
        value = restore_backup(container, passphrase)
        _write_output(json.dumps(value, ensure_ascii=False, indent=2), output)

    _run_cli(_run, debug=debug)


@store_app.command("prune", help="Delete expired backups and trim the store to its size cap.")
def prune(
    ctx: typer.Context,
    directory: str | None = typer.Option(None, "--dir", help=_DIR_HELP),
) -> None:
    debug = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        store = _open_store(ctx, directory)
        quiet = bool(_ctx_value(ctx, "quiet"))
        expired = store.delete_expired()
        report = store.manage_space()
        if quiet:
            return
        rows = [
            ("Expired removed", str(expired)),
            ("Trimmed for space", str(report.deleted_count)),
            ("Backups", str(report.backup_count)),
            ("Total size", format_size(report.total_size)),
            ("Remaining space", format_size(report.remaining_space)),
        ]
        console.print(build_kv_table(rows, title="Prune"))

    _run_cli(_run, debug=debug)


@store_app.command("stats", help="Show store statistics.")
def stats(
    ctx: typer.Context,
    directory: str | None = typer.Option(None, "--dir", help=_DIR_HELP),
) -> None:
    debug = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        result = _open_store(ctx, directory).stats()
        rows = [
            ("Backups", str(result.total_backups)),
            ("Total size", format_size(result.total_size)),
            ("Average size", format_size(result.average_size)),
            ("Oldest", format_epoch(result.oldest)),
            ("Newest", format_epoch(result.newest)),
        ]
        console.print(build_kv_table(rows, title="Store"))

    _run_cli(_run, debug=debug)
