"""Command line interface for planning and running index syncs."""

from __future__ import annotations

import json
from typing import Any

import typer as t
import yaml

from maven_index_sync.config import SyncConfig
from maven_index_sync.exceptions import IndexSyncError
from maven_index_sync.log import configure_logging


CONFIG_HELP = "Path to a YAML sync config file"
LOCAL_HELP = "Path or URL of the local index copy"
OUTPUT_FORMAT_HELP = "Output format. One of: text, json, yaml"
VERBOSE_HELP = "Enable debug logging"
JSON_LOGS_HELP = "Write log records as JSON lines"
OUTPUT_FORMAT_CMDS = "-o", "--output-format"
VERBOSE_CMDS = "-v", "--verbose"

app = t.Typer(
    name="maven-index-sync",
    help="Incrementally sync a published Maven repository index.",
    no_args_is_help=True,
)


def complete_output_formats() -> list[str]:
    return ["text", "json", "yaml"]


remote_arg = t.Argument(None, help="URL or path of the published index")
local_opt = t.Option(None, "-l", "--local", help=LOCAL_HELP)
config_opt = t.Option(None, "-c", "--config", help=CONFIG_HELP)
output_format_opt = t.Option(
    "text",
    *OUTPUT_FORMAT_CMDS,
    help=OUTPUT_FORMAT_HELP,
    autocompletion=complete_output_formats,
)


@app.callback()
def main(
    verbose: bool = t.Option(False, *VERBOSE_CMDS, help=VERBOSE_HELP),
    json_logs: bool = t.Option(False, "--json-logs", help=JSON_LOGS_HELP),
) -> None:
    configure_logging("DEBUG" if verbose else "WARNING", json_logs=json_logs)


def resolve_config(
    remote: str | None,
    local: str | None,
    config: str | None,
) -> SyncConfig:
    """Build the config from a file, overridden by explicit arguments."""
    if config:
        settings = SyncConfig.from_file(config)
        updates = {k: v for k, v in {"remote": remote, "local": local}.items() if v}
        return settings.model_copy(update=updates)
    if not remote:
        msg = "Either a remote location or --config is required"
        raise t.BadParameter(msg)
    return SyncConfig(remote=remote, local=local)


def format_output(data: dict[str, Any], output_format: str) -> str:
    match output_format:
        case "json":
            return json.dumps(data, indent=2)
        case "yaml":
            return yaml.dump(data, default_flow_style=False, sort_keys=False)
        case "text":
            return "\n".join(f"{key}: {_text_value(value)}" for key, value in data.items())
        case _:
            msg = f"Unknown output format: {output_format}"
            raise t.BadParameter(msg)


def _text_value(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) or "(none)"
    return str(value)


@app.command()
def plan(
    remote: str | None = remote_arg,
    local: str | None = local_opt,
    config: str | None = config_opt,
    output_format: str = output_format_opt,
) -> None:
    """Show which chunks a sync would fetch, without fetching them."""
    settings = resolve_config(remote, local, config)
    try:
        reader = settings.open_reader()
    except (IndexSyncError, OSError) as e:
        t.echo(f"Error: {e}", err=True)
        raise t.Exit(1) from e
    try:
        data = {
            "index_id": reader.index_id,
            "published": reader.published_timestamp.isoformat(),
            "mode": reader.decision.mode.value,
            "reason": reader.decision.reason.value if reader.decision.reason else None,
            "chunks": list(reader.chunk_names),
        }
    finally:
        reader.close()
    t.echo(format_output(data, output_format))


@app.command()
def sync(
    remote: str | None = remote_arg,
    local: str | None = local_opt,
    config: str | None = config_opt,
) -> None:
    """Copy the planned chunks into the local copy and record the update."""
    settings = resolve_config(remote, local, config)
    target = settings.create_local_handler()
    if target is None:
        msg = "A local location is required to sync"
        raise t.BadParameter(msg)
    try:
        reader = settings.open_reader()
    except (IndexSyncError, OSError) as e:
        target.close()
        t.echo(f"Error: {e}", err=True)
        raise t.Exit(1) from e
    try:
        with reader:
            for chunk in reader:
                target.save(chunk.name, chunk.stream)
                t.echo(f"Fetched {chunk.name}")
    except IndexSyncError as e:
        t.echo(f"Error: {e}", err=True)
        raise t.Exit(1) from e
    finally:
        target.close()
    mode = "incremental" if reader.is_incremental else "full"
    t.echo(f"Synced {reader.index_id} ({mode}, {len(reader.chunk_names)} chunks)")


if __name__ == "__main__":
    app()
