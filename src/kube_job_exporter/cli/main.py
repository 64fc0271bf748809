"""Command line entry point for the Kubernetes job exporter.

Usage:
    kube-job-exporter serve --port 9102
    kube-job-exporter snapshot --namespace batch
    kube-job-exporter version

Environment Variables:
    KUBE_JOB_EXPORTER_CONFIG_PATH: Path to a YAML or JSON configuration file
    KUBE_JOB_EXPORTER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
    KUBE_JOB_EXPORTER_<FIELD>: Any other configuration field
"""

from __future__ import annotations

import json
import logging
import signal
import sys
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from kube_job_exporter import __version__
from kube_job_exporter.config import ExporterConfig, RefreshMode, load_config
from kube_job_exporter.errors import ConfigurationError, ExportError, SourceUnavailableError
from kube_job_exporter.jobs import AggregationStore
from kube_job_exporter.metrics import MetricSample, render
from kube_job_exporter.service import ExporterService, build_source

console = Console()
logger = logging.getLogger(__name__)

app = typer.Typer(
    name="kube-job-exporter",
    help="Export Kubernetes Job status as Prometheus gauges.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

state: dict[str, Any] = {"config_path": None, "verbose": False}


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=Console(stderr=True))],
        force=True,
    )


def _load(overrides: dict[str, Any]) -> ExporterConfig:
    if state["verbose"]:
        overrides = {**overrides, "log_level": "DEBUG"}
    try:
        config = load_config(state["config_path"], overrides)
    except ConfigurationError as exc:
        _setup_logging("INFO")
        logger.error("Configuration error: %s", exc)
        raise typer.Exit(code=1)

    _setup_logging(config.log_level)
    return config


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
    config_path: Annotated[Optional[str], typer.Option("--config", "-c", help="Path to configuration file.")] = None,
) -> None:
    """Kubernetes Job status exporter."""
    state["verbose"] = verbose
    state["config_path"] = config_path


@app.command()
def serve(
    host: Annotated[Optional[str], typer.Option("--host", help="Address to bind the metrics endpoint to.")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Port of the metrics endpoint.")] = None,
    endpoint: Annotated[Optional[str], typer.Option("--endpoint", help="Scrape path.")] = None,
    mode: Annotated[Optional[RefreshMode], typer.Option("--mode", help="Refresh in the background or on every scrape.")] = None,
    resync_interval: Annotated[Optional[float], typer.Option("--resync-interval", help="Seconds between background lists.")] = None,
    namespace: Annotated[Optional[str], typer.Option("--namespace", "-n", help="Only watch one namespace.")] = None,
    context: Annotated[Optional[str], typer.Option("--context", help="kubectl context to use.")] = None,
    kubeconfig: Annotated[Optional[str], typer.Option("--kubeconfig", help="kubeconfig file to use.")] = None,
    evict_missing: Annotated[Optional[bool], typer.Option("--evict-missing/--keep-missing", help="Drop jobs no longer listed.")] = None,
) -> None:
    """Serve job metrics until interrupted."""
    config = _load(
        {
            "host": host,
            "port": port,
            "endpoint": endpoint,
            "mode": mode,
            "resync_interval": resync_interval,
            "namespace": namespace,
            "context": context,
            "kubeconfig": kubeconfig,
            "evict_missing": evict_missing,
        }
    )

    service = ExporterService(config)
    try:
        service.start()
    except ExportError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1)

    def _shutdown(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, shutting down", signum)
        service.stop()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    console.print(f"Serving job metrics at [bold cyan]{service.server.url}[/bold cyan]")
    service.wait()


def _samples_table(samples: list[MetricSample]) -> Table:
    table = Table(title="Kubernetes job metrics")
    table.add_column("Metric", style="cyan")
    table.add_column("Namespace")
    table.add_column("Name")
    table.add_column("Value", justify="right")
    for sample in samples:
        table.add_row(sample.name, sample.labels["namespace"], sample.labels["name"], f"{sample.value:g}")
    return table


@app.command()
def snapshot(
    namespace: Annotated[Optional[str], typer.Option("--namespace", "-n", help="Only list one namespace.")] = None,
    context: Annotated[Optional[str], typer.Option("--context", help="kubectl context to use.")] = None,
    kubeconfig: Annotated[Optional[str], typer.Option("--kubeconfig", help="kubeconfig file to use.")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print samples as JSON.")] = False,
) -> None:
    """List jobs once and print the metrics that would be exported."""
    config = _load({"namespace": namespace, "context": context, "kubeconfig": kubeconfig})

    store = AggregationStore(annotation=config.created_by_annotation)
    try:
        snapshots = build_source(config).list()
    except SourceUnavailableError as exc:
        logger.error("listing jobs failed: %s", exc)
        raise typer.Exit(code=1)

    report = store.refresh(snapshots)
    samples = render(store)
    logger.info(
        "Aggregated %s jobs from %s listed (%s skipped, %s malformed)",
        len(store),
        len(snapshots),
        report.skipped,
        report.errors,
    )

    if as_json:
        payload = [{"name": s.name, "labels": s.labels, "value": s.value} for s in samples]
        typer.echo(json.dumps(payload, indent=2))
    else:
        console.print(_samples_table(samples))


@app.command()
def version() -> None:
    """Display the exporter version."""
    console.print(f"kube-job-exporter v[bold cyan]{__version__}[/bold cyan]")


def main() -> None:
    """Main entry point for the CLI."""
    try:
        app()
    except Exception as exc:  # noqa: BLE001 - last-resort report before exiting
        logger.error("Unhandled exception: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
