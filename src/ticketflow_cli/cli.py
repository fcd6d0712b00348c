from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from .util import configure_logging, configure_stdio, load_config, set_global_config_file, set_verbose

app = typer.Typer(help="ticketflow: Markdown backlog parser and editor")


@app.callback()
def _init(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config-file",
        help="Path to config file (.ticketflow/config.toml)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging to stderr"),
):
    configure_stdio()
    set_global_config_file(config_file)
    set_verbose(verbose)
    configure_logging(load_config())


from .commands import read as read_cmd  # noqa: E402
from .commands import edit as edit_cmd  # noqa: E402
from .commands import init as init_cmd  # noqa: E402

app.command(name="parse")(read_cmd.parse)
app.command(name="items")(read_cmd.items)
app.command(name="types")(read_cmd.types)
app.command(name="export")(read_cmd.export)
app.command(name="toggle")(edit_cmd.toggle)
app.command(name="set")(edit_cmd.set_fields)
app.command(name="add")(edit_cmd.add)
app.command(name="remove-type")(edit_cmd.remove_type)
app.command(name="init")(init_cmd.init)


def main():
    app()
