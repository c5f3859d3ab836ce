"""Main CLI application module.

This module provides the main entry point for the deployment log CLI.

Commands:
- logs: Stream the log of a deployment config's deployment
"""

import typer

from .commands import logs

# Create the main CLI application
app = typer.Typer(
    help="Deployment log CLI - stream logs of deployment configs",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("logs")(logs)


@app.callback()
def _root() -> None:
    """Deployment log CLI."""


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
