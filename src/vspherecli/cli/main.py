"""Main CLI application."""

import typer
from rich.console import Console

from .. import __version__
from . import config, vm

console = Console()

app = typer.Typer(
    name="vspherecli",
    help="CLI for vSphere guest customization",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(config.app, name="config")
app.add_typer(vm.app, name="vm")


def version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: Whether version flag was set
    """
    if value:
        console.print(f"vspherecli version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """vspherecli - apply guest customization specs to vSphere VMs.

    Get started:
        vspherecli config add                       # Set up your first profile
        vspherecli vm customize --vm VM NAME        # Apply a stored spec
        vspherecli --help                           # Show all available commands
    """
    pass


if __name__ == "__main__":
    app()
