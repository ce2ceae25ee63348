"""Main CLI application for varevo."""

import typer

from .commands import reference as reference_cmd
from .commands import simulate as simulate_cmd

app = typer.Typer(
    name="varevo",
    help="Simulate molecular evolution of variant sequences",
    no_args_is_help=True,
)

app.command(name="simulate")(simulate_cmd.simulate_variants)
app.command(name="reference")(reference_cmd.create_reference)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
