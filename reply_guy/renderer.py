"""
Output rendering for batch results.

- render_json: write the ordered result list to a JSON file
- render_table: print results and a summary line to a Rich console
"""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .core.types import BatchSession


def render_json(session: BatchSession, output_path: Path) -> Path:
    """Write ``[{url, id, tweet, reply, status}, ...]`` in input order.

    ``status`` names the stage that failed for the item, or "ok".
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = [result.to_dict() for result in session.completed()]
    output_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return output_path


def render_table(session: BatchSession, console: Console) -> None:
    table = Table(show_lines=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID")
    table.add_column("Post", overflow="fold")
    table.add_column("Reply", overflow="fold")
    for index, result in enumerate(session.completed(), start=1):
        style = None if result.status == "ok" else "yellow"
        table.add_row(str(index), result.id, result.tweet, result.reply, style=style)
    console.print(table)

    stats = session.stats
    console.print(
        "[bold]Batch summary[/bold]: "
        f"total={stats.total}, replies={stats.generated}, fetch_failed={stats.fetch_failed}, "
        f"extract_failed={stats.extract_failed}, generation_failed={stats.generation_failed}, "
        f"cancelled={stats.cancelled}"
    )
