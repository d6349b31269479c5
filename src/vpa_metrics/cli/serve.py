# src/vpa_metrics/cli/serve.py
"""
Serve command: exposes the recommender metrics over HTTP and refreshes them
from a file of VPA manifests on a fixed interval.
"""

import asyncio
import logging
from pathlib import Path

import typer
from typing_extensions import Annotated

from ..core.config import config
from ..core.registry import MetricsRegistry
from ..core.reporter import MetricsReporter, load_vpas
from ..core.scheduler import Scheduler, parse_interval
from ..core.telemetry import initialize_telemetry

logger = logging.getLogger(__name__)


def _report_from_file(reporter: MetricsReporter, file: Path) -> None:
    reporter.report(load_vpas(file))


async def _async_serve(reporter: MetricsReporter, file: Path, interval: str) -> None:
    async def report_cycle():
        # One cycle at a time, in a worker thread.
        await asyncio.to_thread(_report_from_file, reporter, file)

    scheduler = Scheduler()
    scheduler.add_job_from_string(report_cycle, interval)
    try:
        await asyncio.gather(*scheduler.tasks)
    finally:
        await scheduler.stop()


def serve(
    file: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, help="JSON file with VerticalPodAutoscaler manifests."),
    ],
    address: Annotated[str, typer.Option("--address", help="Address to serve /metrics on.")] = config.METRICS_ADDRESS,
    port: Annotated[int, typer.Option("--port", help="Port to serve /metrics on.")] = config.METRICS_PORT,
    interval: Annotated[
        str, typer.Option("--interval", help="Reporting interval (e.g., '30s', '1m', '1h').")
    ] = config.RECOMMENDER_INTERVAL,
) -> None:
    """
    Serve recommender metrics and refresh them from FILE every interval.
    """
    try:
        parse_interval(interval)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--interval")

    initialize_telemetry()
    registry = MetricsRegistry()
    reporter = MetricsReporter(registry)
    registry.start_http_server(address, port)

    logger.info("vpa-metrics is running. Press CTRL+C to exit.")
    try:
        asyncio.run(_async_serve(reporter, file, interval))
    except KeyboardInterrupt:
        logger.info("Shutting down vpa-metrics.")
        raise typer.Exit()
