"""Config commands -- view and modify stored credentials.

Provides the ``tumblrkit config`` group. Credentials live in the JSON file
returned by :func:`~tumblrkit.config.config_path` and are used whenever
the client is not given explicit values and the ``TUMBLR_*`` environment
variables are unset.
"""

from __future__ import annotations

import typer

from tumblrkit.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)

_KEYS = ("hostname", "email", "password", "auth_hostname")


@config_app.command("show")
def config_show() -> None:
    """Show the stored configuration with the password masked.

    Example::

        tumblrkit config show
        tumblrkit --json config show
    """
    from tumblrkit.config import config_path, load_config

    credentials = load_config()
    data = credentials.model_dump(mode="json")
    if data.get("password"):
        data["password"] = "********"
    info(f"Config file: {config_path()}")
    format_response(data)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="One of: hostname, email, password, auth_hostname."),
    value: str = typer.Argument(help="Value to store."),
) -> None:
    """Store one configuration value.

    Example::

        tumblrkit config set hostname example.tumblr.com
        tumblrkit config set email me@example.com
    """
    from tumblrkit.config import load_config, save_config

    if key not in _KEYS:
        error(f"Unknown config key: {key} (expected one of {', '.join(_KEYS)})")
        raise typer.Exit(code=2)

    credentials = load_config().model_copy(update={key: value or None})
    save_config(credentials)
    shown = "********" if key == "password" else value
    success(f"Set {key} = {shown}")


@config_app.command("unset")
def config_unset(
    key: str = typer.Argument(help="One of: hostname, email, password, auth_hostname."),
) -> None:
    """Remove one configuration value."""
    from tumblrkit.config import load_config, save_config

    if key not in _KEYS:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    save_config(load_config().model_copy(update={key: None}))
    success(f"Unset {key}")


@config_app.command("path")
def config_path_command() -> None:
    """Print the path of the config file."""
    from tumblrkit.config import config_path

    typer.echo(str(config_path()))
