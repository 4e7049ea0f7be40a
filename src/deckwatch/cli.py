"""CLI entrypoint — deckwatch status, summary, counts, attention, serve."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
import yaml

from deckwatch.aggregator import aggregate_attention, attention_sessions
from deckwatch.classifier import STRATEGIES
from deckwatch.config import load_config
from deckwatch.pane import PaneProbe
from deckwatch.sessions import SessionFileError, load_session_records
from deckwatch.summary import build_session_summary, compute_attention
from deckwatch.transcript import TranscriptStore

COARSE_CHOICES = ["running", "waiting", "error", "idle"]


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.config/deckwatch/config.yaml).",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None):
    """deckwatch — which coding-agent sessions need a human right now."""
    try:
        config = load_config(config_path)
    except (ValueError, yaml.YAMLError) as e:
        raise click.UsageError(f"invalid config: {e}") from e
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = config


def _probe(pane: str | None, config) -> PaneProbe | None:
    if not pane:
        return None
    return PaneProbe.from_config(pane, config)


def _records(sessions_file: Path):
    try:
        return load_session_records(sessions_file)
    except SessionFileError as e:
        raise click.BadParameter(str(e), param_hint="SESSIONS_FILE") from e


@cli.command()
@click.argument("project_path")
@click.option("--conversation", default=None, help="Conversation (Claude session) id.")
@click.option(
    "--coarse",
    required=True,
    help=f"Coarse status from the session store ({', '.join(COARSE_CHOICES)}).",
)
@click.option("--pane", default=None, help="tmux pane to check for a permission prompt.")
@click.option(
    "--strategy",
    type=click.Choice(sorted(STRATEGIES)),
    default=None,
    help="Transcript rule set (default from config).",
)
@click.pass_obj
def status(config, project_path: str, conversation: str | None, coarse: str,
           pane: str | None, strategy: str | None):
    """Print the attention status of one session."""
    if strategy:
        config.strategy = strategy
    store = TranscriptStore.from_config(config)
    attention = compute_attention(
        store, project_path, conversation, coarse, _probe(pane, config), config=config,
    )
    click.echo(attention.value)


@cli.command()
@click.argument("project_path")
@click.argument("conversation_id")
@click.option("--coarse", required=True, help="Coarse status from the session store.")
@click.option("--pane", default=None, help="tmux pane to check for a permission prompt.")
@click.pass_obj
def summary(config, project_path: str, conversation_id: str, coarse: str, pane: str | None):
    """Print a session summary as JSON."""
    store = TranscriptStore.from_config(config)
    result = build_session_summary(
        store, project_path, conversation_id, coarse, _probe(pane, config), config=config,
    )
    click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


@cli.command()
@click.argument("sessions_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def counts(config, sessions_file: Path):
    """Print attention badge counts for a sessions file (YAML or JSON list)."""
    records = _records(sessions_file)
    store = TranscriptStore.from_config(config)
    result = aggregate_attention(records, store, config=config)
    click.echo(json.dumps(result.to_dict(), indent=2))


@cli.command()
@click.argument("sessions_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def attention(config, sessions_file: Path):
    """List sessions that need attention."""
    records = _records(sessions_file)
    store = TranscriptStore.from_config(config)
    flagged = attention_sessions(records, store, config=config)
    if not flagged:
        click.echo("No sessions need attention.")
        return
    for record in flagged:
        label = record.title or record.id
        group = record.group_path or "-"
        click.echo(f"{group}\t{label}\t{record.status}")


@cli.command()
@click.option("--port", default=None, type=int, help="Port to serve on (default: 8788).")
@click.pass_obj
def serve(config, port: int | None):
    """Start the JSON API for dashboards."""
    serve_port = port or config.port

    click.echo(f"Serving attention API at http://localhost:{serve_port}")
    click.echo("Press Ctrl+C to stop.")

    from deckwatch.web.app import create_app

    app = create_app(config)
    app.run(host="localhost", port=serve_port)
