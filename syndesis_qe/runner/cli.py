"""CLI for the syndesis QE toolkit."""

import asyncio
import json
import os
from pathlib import Path
from typing import List, Optional

import pytest
import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..cluster.client import OpenShiftClient
from ..config import ClusterSettings, RunnerSettings
from ..core.exceptions import ClusterUnreachableError, QeError, ReadinessError
from ..lifecycle import ProductLifecycle
from ..observability.logging import setup_logging
from ..readiness.coordinator import ReadinessCoordinator
from ..readiness.loader import ProfileLoader
from ..readiness.models import AggregateResult, OutcomeStatus
from . import plugin

app = typer.Typer(
    name="syndesis-qe",
    help="Syndesis QE - run end-to-end suites and wait for cluster readiness",
    add_completion=False,
)
console = Console()

STATUS_STYLES = {
    OutcomeStatus.SUCCEEDED: "green",
    OutcomeStatus.TIMED_OUT: "yellow",
    OutcomeStatus.ERRORED: "red",
    OutcomeStatus.CANCELLED: "magenta",
}


def _configure_logging() -> None:
    runner_settings = RunnerSettings()
    setup_logging(
        level=runner_settings.log_level,
        json_format=runner_settings.log_json,
        log_file=Path(runner_settings.log_file) if runner_settings.log_file else None,
    )


def print_result(result: AggregateResult, output_format: str = "table") -> None:
    """Render an aggregate result as a table or JSON."""
    if output_format == "json":
        console.print_json(json.dumps(result.to_dict()))
        return

    table = Table(title="Readiness")
    table.add_column("Workload", style="cyan")
    table.add_column("Target", style="blue")
    table.add_column("Status")
    table.add_column("Ticks", style="yellow")
    table.add_column("Elapsed", style="yellow")
    table.add_column("Reason", style="dim")

    for outcome in result.outcomes:
        style = STATUS_STYLES[outcome.status]
        table.add_row(
            outcome.workload.selector,
            str(outcome.workload.target),
            f"[{style}]{outcome.status.value}[/{style}]",
            str(outcome.ticks),
            f"{outcome.elapsed:.1f}s",
            escape(outcome.reason or ""),
        )

    console.print(table)
    if result.succeeded:
        console.print(f"[green]✓ {escape(result.summary())}[/green]")
    else:
        console.print(f"[red]✗ {escape(result.summary())}[/red]")


def build_pytest_args(
    paths: list[str] | None,
    tags: str | None,
    extra: list[str] | None = None,
) -> list[str]:
    """Translate CLI options into a pytest argument list."""
    args = list(paths or ["tests"])
    if tags:
        args.extend(["-m", tags])
    args.extend(extra or [])
    return args


# ============================================================================
# Run Command
# ============================================================================


@app.command()
def run(
    paths: Optional[List[str]] = typer.Argument(None, help="Test files or directories"),
    tags: Optional[str] = typer.Option(
        None, "--tags", "-t", help="Marker expression, e.g. 'upgrade and not slow'"
    ),
    cluster_url: Optional[str] = typer.Option(None, "--cluster-url", help="Cluster API URL"),
    namespace: Optional[str] = typer.Option(None, "--namespace", "-n", help="Target namespace"),
    version: Optional[str] = typer.Option(None, "--version", help="Product version under test"),
    pytest_arg: Optional[List[str]] = typer.Option(
        None, "--pytest-arg", help="Extra argument passed to pytest (repeatable)"
    ),
):
    """Run test scenarios against a cluster; exit code mirrors pytest's."""
    overrides = {
        "SYNDESIS_OPENSHIFT_URL": cluster_url,
        "SYNDESIS_NAMESPACE": namespace,
        "SYNDESIS_VERSION": version,
    }
    for key, value in overrides.items():
        if value is not None:
            os.environ[key] = value

    args = build_pytest_args(paths, tags, pytest_arg)
    console.print(f"[bold]Running:[/bold] pytest {' '.join(args)}")

    exit_code = pytest.main(args, plugins=[plugin])
    raise typer.Exit(code=int(exit_code))


# ============================================================================
# Wait Commands
# ============================================================================


@app.command("wait-ready")
def wait_ready(
    component: Optional[List[str]] = typer.Option(
        None, "--component", "-c", help="Component to wait for (repeatable)"
    ),
    profile: Optional[Path] = typer.Option(
        None, "--profile", "-p", help="Readiness profile YAML file"
    ),
    global_timeout: Optional[float] = typer.Option(
        None, "--global-timeout", help="Overall timeout in seconds (profiles only)"
    ),
    output_format: str = typer.Option(
        "table", "--format", "-f", help="Output format: table, json"
    ),
):
    """Wait for the product components (or a profile) to become ready."""
    _configure_logging()

    async def _wait() -> AggregateResult:
        settings = ClusterSettings()
        async with OpenShiftClient(settings) as client:
            if profile is not None:
                loaded = ProfileLoader().load(profile)
                coordinator = ReadinessCoordinator(client)
                return await coordinator.wait(
                    loaded.to_workloads(),
                    global_timeout or loaded.effective_global_timeout(),
                )
            lifecycle = ProductLifecycle(client, settings)
            try:
                return await lifecycle.wait_for_deployment(component or None)
            except ReadinessError as e:
                return e.result

    try:
        result = asyncio.run(_wait())
    except QeError as e:
        console.print(f"[red]✗ Wait failed:[/red]\n{escape(str(e))}")
        raise typer.Exit(code=1)

    print_result(result, output_format)
    if not result.succeeded:
        raise typer.Exit(code=1)


@app.command("wait-undeployed")
def wait_undeployed(
    output_format: str = typer.Option(
        "table", "--format", "-f", help="Output format: table, json"
    ),
):
    """Wait until no product component has a running pod."""
    _configure_logging()

    async def _wait() -> AggregateResult:
        settings = ClusterSettings()
        async with OpenShiftClient(settings) as client:
            try:
                return await ProductLifecycle(client, settings).wait_for_undeployment()
            except ReadinessError as e:
                return e.result

    try:
        result = asyncio.run(_wait())
    except QeError as e:
        console.print(f"[red]✗ Wait failed:[/red]\n{escape(str(e))}")
        raise typer.Exit(code=1)

    print_result(result, output_format)
    if not result.succeeded:
        raise typer.Exit(code=1)


# ============================================================================
# Cluster Commands
# ============================================================================


@app.command("check-reachable")
def check_reachable():
    """Check that the cluster API answers."""
    _configure_logging()
    settings = ClusterSettings()

    async def _check() -> None:
        async with OpenShiftClient(settings) as client:
            await ProductLifecycle(client, settings).ensure_reachable()

    try:
        asyncio.run(_check())
    except ClusterUnreachableError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Cluster at {settings.openshift_url} is reachable[/green]")


@app.command("clean-namespace")
def clean_namespace():
    """Undeploy the product and remove its resources from the namespace."""
    _configure_logging()
    settings = ClusterSettings()

    async def _clean() -> None:
        async with OpenShiftClient(settings) as client:
            await ProductLifecycle(client, settings).clean_namespace()

    try:
        asyncio.run(_clean())
    except QeError as e:
        console.print(f"[red]✗ Cleanup failed:[/red]\n{escape(str(e))}")
        raise typer.Exit(code=1)

    console.print(
        Panel(
            f"[green]✓ Namespace {settings.namespace} is clean[/green]",
            title="Cleanup Complete",
        )
    )


# ============================================================================
# Main
# ============================================================================


def main():
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
