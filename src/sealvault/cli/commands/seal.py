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

import typer

from ...crypto import read_header
from ...errors import IntegrityError
from ...formats import codec
from ...formats.container import create_backup, decrypt_backup, restore_backup, verify_backup
from ..common import (
    _ctx_config,
    _ctx_value,
    _read_container,
    _read_json_value,
    _read_passphrase,
    _run_cli,
    _warn_if_weak,
    _write_output,
)
from ..ui import build_kv_table, console

_PASSPHRASE_ENV_HELP = "Read the passphrase from this environment variable."


def register(app: typer.Typer) -> None:
    app.command(
        "seal",
        help=(
            "Encrypt a JSON document into a sealed backup container.\n\n"
            "Examples:\n"
            "  sealvault seal declarations.json -o declarations.sealed.json\n"
            "  cat data.json | sealvault seal - --passphrase-env BACKUP_KEY\n"
        ),
    )(seal)
    app.command("open", help="Verify and decrypt a sealed backup back to JSON.")(open_)
    app.command("verify", help="Check a sealed backup's hash without decrypting it.")(verify)
    app.command("inspect", help="Show container details (requires the passphrase).")(inspect)


def seal(
    ctx: typer.Context,
    input_path: str = typer.Argument(..., metavar="INPUT", help="JSON file to seal ('-' = stdin)."),
    output: str | None = typer.Option(None, "--output", "-o", help="Write the container here."),
    passphrase_env: str | None = typer.Option(None, "--passphrase-env", help=_PASSPHRASE_ENV_HELP),
) -> None:
    debug = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        config = _ctx_config(ctx)
        quiet = bool(_ctx_value(ctx, "quiet"))
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
        _write_output(container.to_json(), output)
        if output and not quiet:
            console.print(f"[success]Sealed[/success] {input_path} -> {output}")

    _run_cli(_run, debug=debug)


def open_(
    ctx: typer.Context,
    container_path: str = typer.Argument(..., metavar="CONTAINER", help="Sealed backup file."),
    output: str | None = typer.Option(None, "--output", "-o", help="Write the JSON here."),
    passphrase_env: str | None = typer.Option(None, "--passphrase-env", help=_PASSPHRASE_ENV_HELP),
) -> None:
    debug = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        _ctx_config(ctx)
        container = _read_container(container_path)
        if not verify_backup(container):
            # fail before prompting for a passphrase
            raise IntegrityError(stage="verify", detail="ciphertext does not match its hash")
        passphrase = _read_passphrase(passphrase_env, confirm=False)
        value = restore_backup(container, passphrase)
        _write_output(json.dumps(value, ensure_ascii=False, indent=2), output)

    _run_cli(_run, debug=debug)


def verify(
    ctx: typer.Context,
    container_path: str = typer.Argument(..., metavar="CONTAINER", help="Sealed backup file."),
) -> None:
    debug = bool(_ctx_value(ctx, "debug"))

    def _run() -> int:
        _ctx_config(ctx)
        quiet = bool(_ctx_value(ctx, "quiet"))
        container = _read_container(container_path)
        if verify_backup(container):
            if not quiet:
                console.print(f"[success]OK[/success] {container_path} hash matches")
            return 0
        console.print(f"[error]FAILED[/error] {container_path} hash does not match")
        return 1

    _run_cli(_run, debug=debug)


def inspect(
    ctx: typer.Context,
    container_path: str = typer.Argument(..., metavar="CONTAINER", help="Sealed backup file."),
    passphrase_env: str | None = typer.Option(None, "--passphrase-env", help=_PASSPHRASE_ENV_HELP),
) -> None:
    debug = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        _ctx_config(ctx)
        container = _read_container(container_path)
        if not verify_backup(container):
            raise IntegrityError(stage="verify", detail="ciphertext does not match its hash")
        header = read_header(container.ciphertext)
        passphrase = _read_passphrase(passphrase_env, confirm=False)
        info = codec.describe(decrypt_backup(container, passphrase))
        rows = [
            ("Created", container.created_at),
            ("Hash", container.digest),
            ("Ciphertext", f"{len(container.ciphertext)} chars"),
            ("KDF", f"PBKDF2-SHA256, {header.iterations} iterations"),
            ("Compression", info.algorithm),
            ("Plaintext", f"{info.raw_len} bytes"),
            ("Compressed", f"{info.wrapped_len} bytes"),
        ]
        console.print(build_kv_table(rows, title="Backup container"))

    _run_cli(_run, debug=debug)
