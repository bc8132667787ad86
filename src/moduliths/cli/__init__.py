"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__

app = typer.Typer(
    name="moduliths",
    help=f"Moduliths {__version__} - Module Boundary Verification",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .verify import verify as _verify  # noqa: F401, E402
from .modules import modules as _modules  # noqa: F401, E402
from .dependencies import dependencies as _dependencies  # noqa: F401, E402
