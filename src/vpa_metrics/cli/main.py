# src/vpa_metrics/cli/main.py
"""
This module is the main entry point for the vpa-metrics CLI.

It aggregates the commands from the submodules (snapshot, serve).
"""

import logging

import typer

from ..core.config import config
from . import serve, snapshot

# --- Setup Logger ---
logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


app = typer.Typer(
    name="vpa-metrics",
    help="Export VPA Recommender recommendations, object counts and latencies as Prometheus metrics.",
    add_completion=False,
)


def version_callback(value: bool):
    """
    Prints the version of vpa-metrics.
    """
    if value:
        from .. import __version__

        typer.echo(f"vpa-metrics version: {__version__}")
        raise typer.Exit()


@app.command()
def version():
    """
    Show the version of vpa-metrics.
    """
    from .. import __version__

    typer.echo(f"vpa-metrics version: {__version__}")


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    """
    vpa-metrics CLI main entry point.
    """
    pass


app.command(name="snapshot")(snapshot.snapshot)
app.command(name="serve")(serve.serve)


if __name__ == "__main__":
    app()
