"""Rendering of service replies as tables, JSON or YAML."""

from __future__ import annotations

import json
import sys
from typing import Any, Dict, Iterable, List, Optional, Sequence, TextIO

import yaml
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

# Columns shown first when present; anything else follows in reply order.
_PREFERRED_COLUMNS = ("name", "uuid", "home", "room", "zone", "type", "enabled")


def print_output(data: Any, output: str, stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stdout
    if output == "yaml":
        yaml.safe_dump(data, stream, sort_keys=False)
    else:
        json.dump(data, stream, indent=2)
        stream.write("\n")


def print_records(
    title: str,
    records: Sequence[Dict[str, Any]],
    output: str,
    stream: Optional[TextIO] = None,
) -> None:
    """Print a listing reply in the configured output format."""

    if output != "table":
        print_output(list(records), output, stream)
        return

    console = Console(file=stream) if stream is not None else Console()
    if not records:
        console.print(f"[yellow]No {title.lower()} matched.[/yellow]")
        return
    console.print(build_table(title, records))


def build_table(title: str, records: Sequence[Dict[str, Any]]) -> Table:
    table = Table(title=f"{title} ({len(records)})", box=box.SIMPLE_HEAVY)
    columns = _columns(records)
    for column in columns:
        table.add_column(Text(column.replace("_", " ").title()))
    for record in records:
        table.add_row(*(Text(_cell(record.get(column))) for column in columns))
    return table


def _columns(records: Iterable[Dict[str, Any]]) -> List[str]:
    seen: List[str] = []
    for record in records:
        for key in record:
            if key not in seen:
                seen.append(key)
    preferred = [column for column in _PREFERRED_COLUMNS if column in seen]
    return preferred + [column for column in seen if column not in preferred]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, (list, tuple)):
        return ", ".join(_cell(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True)
    return str(value)
