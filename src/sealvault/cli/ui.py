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

import datetime as _dt
import sys
from collections.abc import Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from ..storage import BackupRecord

THEME = Theme(
    {
        "title": "bold cyan",
        "accent": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red",
        "muted": "dim",
    }
)


def isatty(stream: object, fallback: object) -> bool:
    for candidate in (stream, fallback):
        if candidate is None:
            continue
        try:
            return bool(candidate.isatty())  # type: ignore[attr-defined]
        except (OSError, ValueError, AttributeError):
            continue
    return False


def _build_console(*, stderr: bool) -> Console:
    raw = sys.__stderr__ if stderr else sys.__stdout__
    fallback = sys.stderr if stderr else sys.stdout
    return Console(stderr=stderr, theme=THEME, force_terminal=isatty(raw, fallback) or None)


console = _build_console(stderr=False)
console_err = _build_console(stderr=True)


def configure_ui(*, no_color: bool) -> None:
    console.no_color = no_color
    console_err.no_color = no_color


def build_kv_table(rows: Sequence[tuple[str, str]], *, title: str | None = None) -> Table:
    table = Table(title=title, show_header=False, box=box.SIMPLE, show_lines=False)
    table.add_column("Field", style="bold", no_wrap=True)
    table.add_column("Value")
    for key, value in rows:
        table.add_row(str(key), str(value))
    return table


def build_records_table(records: Sequence[BackupRecord]) -> Table:
    table = Table(title="Backups", box=box.SIMPLE_HEAD)
    table.add_column("ID", style="accent", no_wrap=True)
    table.add_column("Name")
    table.add_column("Size", justify="right")
    table.add_column("Created", no_wrap=True)
    table.add_column("Expires", no_wrap=True)
    for record in records:
        table.add_row(
            record.id,
            record.name,
            format_size(record.size),
            format_epoch(record.created_at),
            format_epoch(record.expires_at),
        )
    return table


def format_size(size: float) -> str:
    if size < 1024:
        return f"{size:.0f} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KiB"
    return f"{size / (1024 * 1024):.1f} MiB"


def format_epoch(value: float | None) -> str:
    if value is None:
        return "-"
    moment = _dt.datetime.fromtimestamp(value, tz=_dt.timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M UTC")
