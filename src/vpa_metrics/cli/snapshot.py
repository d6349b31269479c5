# src/vpa_metrics/cli/snapshot.py
"""
Snapshot command: runs a single reporting cycle over VPA manifests read
from a file and prints the resulting Prometheus exposition.
"""

import logging
from pathlib import Path

import typer
from typing_extensions import Annotated

from ..core.exceptions import InvalidVpaObjectError
from ..core.registry import MetricsRegistry
from ..core.reporter import MetricsReporter, load_vpas

logger = logging.getLogger(__name__)


def snapshot(
    file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, help="JSON file with VerticalPodAutoscaler manifests."),
    ],
) -> None:
    """
    Report metrics for the VPA objects in FILE once and print them.
    """
    try:
        vpas = load_vpas(file)
    except InvalidVpaObjectError as e:
        raise typer.BadParameter(str(e), param_hint="FILE")

    registry = MetricsRegistry()
    MetricsReporter(registry).report(vpas)
    typer.echo(registry.expose().decode("utf-8"), nl=False)
