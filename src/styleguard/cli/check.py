"""CLI command: styleguard check <paths> - run the rule set over source files."""

from __future__ import annotations

import dataclasses
import signal
import sys
import threading

import click
from rich.console import Console
from rich.table import Table

from styleguard.config import StyleGuardConfig
from styleguard.engine.report import Report, RunStatus
from styleguard.engine.runner import CheckEngine
from styleguard.errors import ConfigError
from styleguard.rules.models import Severity
from styleguard.ruleset.loader import load_config
from styleguard.ruleset.models import Configuration
from styleguard.ruleset.resolver import resolve_config

console = Console(stderr=True)

_SEVERITY_COLORS = {
    Severity.ADVISORY: "blue",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}


@click.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "text", "json"]),
    default="table",
    show_default=True,
    help="Report format.",
)
@click.option(
    "--fail-on",
    type=click.Choice([s.value for s in Severity]),
    help="Lowest severity that fails the run.",
)
@click.option("--jobs", "-j", type=click.IntRange(min=1), help="Worker threads.")
@click.option("--timeout", type=click.FloatRange(min=0), help="Cancel after N seconds.")
@click.option(
    "--exclude",
    "-e",
    multiple=True,
    help="Glob patterns to exclude from the check.",
)
@click.pass_context
def check(
    ctx: click.Context,
    paths: tuple[str, ...],
    output_format: str,
    fail_on: str | None,
    jobs: int | None,
    timeout: float | None,
    exclude: tuple[str, ...],
) -> None:
    """Check source files against the configured style rules."""
    app = StyleGuardConfig.load()
    config_path = app.find_rule_config(ctx.obj.get("config_path"))

    try:
        config = load_config(config_path) if config_path else Configuration()
        config = dataclasses.replace(
            config,
            exclude=config.exclude + exclude,
            fail_on=Severity(fail_on) if fail_on else config.fail_on,
        )
        rules = resolve_config(config)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(RunStatus.CONFIGURATION_INVALID.exit_code)

    if output_format != "json":
        source = str(config_path) if config_path else "built-in defaults"
        console.print(
            f"[bold]StyleGuard[/bold] checking {len(paths)} path(s) "
            f"with [cyan]{source}[/cyan]\n"
        )

    cancel = threading.Event()

    def _signal_handler(signum: int, frame: object) -> None:
        console.print("\n[dim]Cancelling...[/dim]")
        cancel.set()

    previous = signal.signal(signal.SIGINT, _signal_handler)
    try:
        engine = CheckEngine(rules, jobs=jobs or app.jobs)
        report = engine.check(
            paths, cancel=cancel, timeout=timeout if timeout is not None else app.timeout
        )
    finally:
        signal.signal(signal.SIGINT, previous)

    if output_format == "json":
        click.echo(report.to_json())
    elif output_format == "text":
        text = report.to_text()
        if text:
            click.echo(text)
        _print_summary(report)
    else:
        _print_table(report)
        _print_summary(report)

    status = report.status
    if status is not RunStatus.SUCCESS:
        sys.exit(status.exit_code)


def _print_table(report: Report) -> None:
    violations = report.violations()
    if not violations and not report.diagnostics:
        console.print("[green]No violations.[/green]")
        return

    table = Table(title="Violations", show_lines=False)
    table.add_column("Severity", style="bold", width=10)
    table.add_column("Location", style="cyan")
    table.add_column("Rule")
    table.add_column("Message")

    for v in violations:
        color = _SEVERITY_COLORS.get(v.severity, "white")
        label = f"{v.severity.value}*" if v.advisory else v.severity.value
        table.add_row(
            f"[{color}]{label}[/{color}]",
            f"{v.path}:{v.line}:{v.column}",
            v.rule_id,
            v.message,
        )
    console.print(table)

    for d in report.diagnostics:
        console.print(f"[magenta]rule failure[/magenta] {d.path} [{d.rule_id}]: {d.message}")


def _print_summary(report: Report) -> None:
    counts = report.counts()
    console.print(
        f"\nChecked {report.files_scanned} files "
        f"({report.files_skipped} skipped): "
        f"{counts['error']} error(s), {counts['warning']} warning(s), "
        f"{counts['advisory']} advisory"
    )
    if any(v.advisory for v in report.violations()):
        console.print("[dim]* advisory: never fails the run[/dim]")
    if report.cancelled:
        console.print("[yellow]Run cancelled; results are partial.[/yellow]")
    elif report.failing():
        console.print(
            f"[red]{len(report.failing())} violation(s) at or above "
            f"{report.fail_on.value}[/red]"
        )
