"""Built-in CLI sub-command groups for tumblrkit.

* :mod:`~tumblrkit.commands.config` -- view and edit stored credentials.
* :mod:`~tumblrkit.commands.cache` -- inspect and clean the response cache.

Each module exports a :class:`typer.Typer` sub-application that
:mod:`tumblrkit.app` mounts on the root command.
"""
