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

import importlib.metadata
import json
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import typer
from rich.traceback import install as install_rich_traceback

from ..config import AppConfig, load_app_config
from ..errors import CorruptionError, IntegrityError, SealVaultError
from ..formats.container import BackupContainer
from .ui import configure_ui, console_err

PASSPHRASE_ENV_DEFAULT = "SEALVAULT_PASSPHRASE"
SHORT_PASSPHRASE_CHARS = 12


def _run_cli(func: Callable[[], Any], *, debug: bool) -> None:
    if debug:
        install_rich_traceback(show_locals=False)
    try:
        result = func()
    except IntegrityError as exc:
        if debug:
            raise
        console_err.print(f"[red]Error:[/red] {exc}")
        console_err.print("[muted]The backup was modified after it was sealed; refusing to open it.[/muted]")
        raise typer.Exit(code=2)
    except CorruptionError as exc:
        if debug:
            raise
        console_err.print(f"[red]Error:[/red] {exc}")
        console_err.print("[muted]Check the passphrase; the backup itself is intact.[/muted]")
        raise typer.Exit(code=2)
    except (SealVaultError, OSError, RuntimeError, ValueError, TypeError, LookupError) as exc:
        if debug:
            raise
        console_err.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=2)
    if isinstance(result, int) and result != 0:
        raise typer.Exit(code=result)


def _ctx_value(ctx: typer.Context, key: str) -> Any:
    if ctx.obj is None:
        return None
    return ctx.obj.get(key)


def _ctx_config(ctx: typer.Context) -> AppConfig:
    config = load_app_config(_ctx_value(ctx, "config"))
    if config.ui.no_color:
        configure_ui(no_color=True)
    if config.ui.quiet and ctx.obj is not None:
        ctx.obj["quiet"] = True
    return config


def _warn(message: str, *, quiet: bool) -> None:
    if quiet:
        return
    console_err.print(f"[yellow]Warning:[/yellow] {message}")


def _read_passphrase(passphrase_env: str | None, *, confirm: bool) -> str:
    env_name = passphrase_env or PASSPHRASE_ENV_DEFAULT
    value = os.environ.get(env_name)
    if value:
        return value
    if passphrase_env:
        raise ValueError(f"environment variable {passphrase_env} is not set or empty")
    if not sys.stdin.isatty():
        raise ValueError(
            f"no passphrase available; set {PASSPHRASE_ENV_DEFAULT} or use --passphrase-env"
        )
    passphrase = typer.prompt("Passphrase", hide_input=True, confirmation_prompt=confirm)
    if not passphrase:
        raise ValueError("passphrase cannot be empty")
    return passphrase


def _warn_if_weak(passphrase: str, *, quiet: bool) -> None:
    if len(passphrase) < SHORT_PASSPHRASE_CHARS:
        _warn(f"passphrase is shorter than {SHORT_PASSPHRASE_CHARS} characters", quiet=quiet)


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).expanduser().read_text(encoding="utf-8")


def _read_json_value(path: str) -> object:
    text = _read_text(path)
    try:
        return json.loads(text)
    except ValueError as exc:
        raise ValueError(f"input is not valid JSON: {exc}") from exc


def _read_container(path: str) -> BackupContainer:
    return BackupContainer.from_json(_read_text(path))


def _write_output(text: str, output: str | None) -> None:
    if output is None or output == "-":
        typer.echo(text)
        return
    target = Path(output).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text + "\n", encoding="utf-8")


def _get_version() -> str:
    try:
        return importlib.metadata.version("sealvault")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0"
