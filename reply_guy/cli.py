"""
Command-line interface for reply-guy.

Uses Typer to provide a CLI with options for the main configuration
settings. Supports loading .env files for API key configuration.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
import typer
from rich.console import Console

from .config import load_config
from .core.errors import NoValidReferences
from .core.identifiers import extract_identifiers
from .renderer import render_json, render_table
from .runner import run_batch
from .utils.logging import setup_llm_logger, setup_logging

app = typer.Typer(add_completion=False)
console = Console()


def _read_links(input: Path | None, url: list[str] | None) -> str:
    chunks: list[str] = []
    if input is not None:
        chunks.append(input.read_text(encoding="utf-8"))
    chunks.extend(url or [])
    return "\n".join(chunks)


@app.command()
def run(
    input: Path | None = typer.Option(None, "--input", "-i", exists=True, readable=True),
    url: list[str] | None = typer.Option(None, "--url", "-u", help="Post URL (repeatable)."),
    output: Path = typer.Option(Path("out/replies.json"), "--output", "-o"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    delay: float | None = typer.Option(None, "--delay", help="Seconds to wait between posts."),
    concurrency: int | None = typer.Option(
        None, "--concurrency", help="Posts in flight at once (1 = sequential)."
    ),
    provider: str | None = typer.Option(
        None, "--provider", help="Reply provider: openai, gemini, template."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
    api_key: str | None = typer.Option(
        None, "--api-key", help="Override provider API key (or set it in the environment / .env)."
    ),
):
    """Scrape each linked post and draft a reply for it.

    Reads links from a file and/or --url options, fetches each post through
    the configured mirrors, and writes the results as JSON.
    """
    load_dotenv()

    cfg = load_config(str(config) if config else None)

    if api_key:
        cfg.provider.api_key = api_key
    if provider:
        cfg.provider.name = provider
    if delay is not None:
        cfg.pipeline.delay_seconds = delay
    if concurrency is not None:
        cfg.pipeline.max_concurrency = concurrency
    if log_level:
        cfg.logging.level = log_level
    if log_file is not None:
        cfg.logging.file = log_file

    log_dir = output.parent
    logger = setup_logging(cfg.logging, log_dir)

    try:
        llm_logger = setup_llm_logger(cfg.logging, log_dir)
        session = run_batch(
            _read_links(input, url),
            cfg,
            show_progress=progress,
            console=console,
            logger=logger,
            llm_logger=llm_logger,
        )
    except NoValidReferences as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    except ValueError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=2)

    render_table(session, console)
    path = render_json(session, output)
    console.print(f"Results written: {path}")


@app.command()
def ids(
    input: Path | None = typer.Option(None, "--input", "-i", exists=True, readable=True),
    url: list[str] | None = typer.Option(None, "--url", "-u", help="Post URL (repeatable)."),
):
    """Print the unique post ids found in the input, one per line."""
    references = extract_identifiers(_read_links(input, url))
    if not references:
        console.print(f"[red]{NoValidReferences()}[/red]")
        raise typer.Exit(code=1)
    for ref in references:
        typer.echo(f"{ref.id}\t{ref.source_url}")


if __name__ == "__main__":
    app()
