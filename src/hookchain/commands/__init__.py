"""Built-in CLI sub-commands for hookchain.

* :mod:`~hookchain.commands.plugins` -- list the plugins the engine sees.
* :mod:`~hookchain.commands.hooks` -- inspect handler order and run the
  config hooks against a user config file.
* :mod:`~hookchain.commands.config` -- view and modify global settings.

Each module exports a :class:`typer.Typer` sub-application.
"""
