"""CLI commands for sst-introspect."""

import asyncio
import sys
from typing import Any

import click
import httpx

from sst_introspect.config import IntrospectConfig
from sst_introspect.exceptions import IntrospectError
from sst_introspect.tools import IntrospectTools
from sst_introspect.utils import setup_logging, to_text


def _echo_result(call) -> None:
    """Print a tool result as JSON, or its error on stderr with exit code 1."""
    try:
        result: Any = call()
        if asyncio.iscoroutine(result):
            result = asyncio.run(result)
    except IntrospectError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    except httpx.HTTPError as e:
        click.echo(f"Failed to connect to SST dev server: {e}", err=True)
        sys.exit(1)
    click.echo(to_text(result))


@click.group()
@click.option(
    "--cwd",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Directory to start project discovery from (default: current directory)",
)
@click.option("--log-level", default=None, help="Logging level (default: INFO)")
@click.pass_context
def main(ctx, cwd: str | None, log_level: str | None):
    """Inspect a running SST dev server: logs, status, invocations and events."""
    config = IntrospectConfig().with_working_dir(cwd)
    setup_logging(log_level or config.log_level)
    ctx.obj = config


@main.command()
@click.argument(
    "working_dir",
    required=False,
    type=click.Path(exists=True, file_okay=False),
)
@click.pass_obj
def serve(config: IntrospectConfig, working_dir: str | None):
    """Run the MCP server over stdio."""
    from sst_introspect.server import run

    run(config.with_working_dir(working_dir))


@main.command()
@click.argument("directory", required=False)
@click.pass_obj
def discover(config: IntrospectConfig, directory: str | None):
    """Discover SST dev servers and available stages."""
    tools = IntrospectTools(config)
    _echo_result(lambda: tools.discover(directory))


@main.command()
@click.option("--stage", "-s", default=None, help="Stage name")
@click.pass_obj
def tabs(config: IntrospectConfig, stage: str | None):
    """List log tabs."""
    tools = IntrospectTools(config)
    _echo_result(lambda: tools.list_tabs(stage))


@main.command()
@click.argument("tab")
@click.option("--lines", "-n", type=int, default=None, help="Number of lines to show")
@click.option("--offset", type=int, default=0, help="Lines to skip from the end")
@click.pass_obj
def logs(config: IntrospectConfig, tab: str, lines: int | None, offset: int):
    """Page through a log tab, newest line first."""
    tools = IntrospectTools(config)
    _echo_result(lambda: tools.read_logs(tab, lines=lines, offset=offset))


@main.command()
@click.argument("tab")
@click.option("--lines", "-n", type=int, default=None, help="Number of lines to show")
@click.pass_obj
def tail(config: IntrospectConfig, tab: str, lines: int | None):
    """Print the last lines of a log tab in the order they were written."""
    tools = IntrospectTools(config)
    try:
        log_lines = tools.tail_logs(tab, lines=lines)
    except IntrospectError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    for line in log_lines:
        click.echo(line)


@main.command()
@click.option("--stage", "-s", default=None, help="Stage name")
@click.pass_obj
def status(config: IntrospectConfig, stage: str | None):
    """Show deployment status and resources."""
    tools = IntrospectTools(config)
    _echo_result(lambda: tools.get_status(stage))


@main.command()
@click.option("--timeout-ms", type=int, default=None, help="Listen time in ms")
@click.pass_obj
def invocations(config: IntrospectConfig, timeout_ms: int | None):
    """Show function invocations seen on the event stream."""
    tools = IntrospectTools(config)
    _echo_result(lambda: tools.get_invocations(timeout_ms=timeout_ms))


@main.command()
@click.option("--timeout-ms", type=int, default=None, help="Listen time in ms")
@click.option("--type", "event_type", default=None, help="Only this event type")
@click.pass_obj
def events(config: IntrospectConfig, timeout_ms: int | None, event_type: str | None):
    """Summarize recent events by type."""
    tools = IntrospectTools(config)
    _echo_result(lambda: tools.get_events(timeout_ms=timeout_ms, event_type=event_type))
