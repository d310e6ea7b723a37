"""Typer application and CLI entry point for tumblrkit.

The ``tumblrkit`` command exposes the client for shell use:

* ``tumblrkit call SEGMENT... ACTION -p key=value`` -- run one API call.
* ``tumblrkit config ...`` -- view and edit stored credentials.
* ``tumblrkit cache ...`` -- inspect and clean the response cache.

:func:`main` is the console-script entry point declared in
``pyproject.toml``. :class:`~tumblrkit.exceptions.TumblrError` exits with
its ``exit_code``; anything else writes a crash log under the data
directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

import typer

from tumblrkit import __version__
from tumblrkit.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="tumblrkit",
    help="Call the Tumblr API from the command line.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

from tumblrkit.commands.cache import cache_app  # noqa: E402
from tumblrkit.commands.config import config_app  # noqa: E402

app.add_typer(config_app, name="config", help="Credential configuration.")
app.add_typer(cache_app, name="cache", help="Response cache maintenance.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"tumblrkit {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Install the global output manager from the CLI flags."""
    from tumblrkit.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    configure_logging(output)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


def parse_params(pairs: List[str]) -> dict[str, Any]:
    """Turn ``key=value`` strings into an argument dict.

    Repeated keys collect into a list, in the order given.

    Raises:
        InvalidUsageError: If a pair has no ``=`` or an empty key.
    """
    from tumblrkit.exceptions import InvalidUsageError

    params: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise InvalidUsageError(f"Expected key=value, got: {pair!r}")
        if key in params:
            existing = params[key]
            params[key] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            params[key] = value
    return params


@app.command("call")
def call_command(
    path: List[str] = typer.Argument(
        ..., help="Resource segments followed by the action, e.g. 'posts read'."
    ),
    param: List[str] = typer.Option(
        [], "--param", "-p", help="API argument as key=value (repeatable)."
    ),
    hostname: Optional[str] = typer.Option(
        None, "--hostname", "-H", help="Blog hostname (overrides config)."
    ),
    login: bool = typer.Option(False, "--login", help="Send credentials as a POST."),
    fmt: str = typer.Option("xml", "--format", help="Response format: xml or json."),
    api_version: str = typer.Option(
        "v2", "--api-version", help="API version segment, or 'none' to omit it."
    ),
    cache: bool = typer.Option(False, "--cache/--no-cache", help="Use the response cache."),
    ttl: Optional[int] = typer.Option(None, "--ttl", help="Cache TTL in seconds."),
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Cache directory."),
    headers: bool = typer.Option(False, "--headers", help="Include response headers."),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print the composed request without sending it."
    ),
) -> None:
    """Run one API call and print the result.

    Example::

        tumblrkit call posts read -p tag=cats -H example.tumblr.com
        tumblrkit --json call posts read --format json --dry-run
    """
    from tumblrkit.client import Tumblr
    from tumblrkit.models import RequestDescriptor
    from tumblrkit.output import debug, format_response, info, warning

    *segments, action = path
    params = parse_params(param)

    client = Tumblr(hostname=hostname)
    client = client.output(fmt).api_version(None if api_version.lower() == "none" else api_version)
    if cache:
        client = client.cache_mode(True, ttl=ttl, path=cache_dir)
    if headers:
        client = client.header_mode()
    if login:
        client = client.auth_mode()
    if dry_run:
        client = client.test_mode()

    for name in segments:
        client = client.segment(name)

    debug(f"Calling {'/'.join(client.segments + (action.lower(),))}")
    try:
        result = client.call(action, params)
    finally:
        client.close()

    if isinstance(result, RequestDescriptor):
        format_response(result.model_dump(mode="json"))
        return

    status = f"HTTP {result.status_code}" + (" (cached)" if result.cached else "")
    if result.status_code >= 400:
        warning(status)
    else:
        info(status)
    if result.headers is not None:
        format_response({"headers": result.headers, "body": result.body})
    else:
        format_response(result.body)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    from tumblrkit.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(exc)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``tumblrkit`` console script."""
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from tumblrkit.exceptions import TumblrError
        from tumblrkit.output import error

        if isinstance(exc, TumblrError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
