"""CLI entry point for repo-transfer."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.logging import RichHandler

from repo_transfer.config import Settings, get_settings
from repo_transfer.models.report import RepositoryReport

app = typer.Typer(
    name="repo-transfer",
    help="Check whether repositories can move to another GitHub organization.",
    no_args_is_help=True,
)
console = Console(stderr=True)

FORMATS = ("json", "yaml")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _load_settings(verbose: bool) -> Settings:
    settings = get_settings()
    _configure_logging(verbose or settings.verbose)
    if settings.token is None:
        logging.getLogger(__name__).warning(
            "No token found in GITHUB_TOKEN, GH_TOKEN or REPO_TRANSFER_TOKEN; "
            "requests are unauthenticated"
        )
    return settings


def _emit(data: BaseModel | list[BaseModel], fmt: str, output: Path | None) -> None:
    if fmt == "yaml":
        from repo_transfer.export.yaml import export_yaml, render_yaml

        if output:
            export_yaml(data, output)
        else:
            typer.echo(render_yaml(data), nl=False)
    else:
        from repo_transfer.export.json import export_json, render_json

        if output:
            export_json(data, output)
        else:
            typer.echo(render_json(data))
    if output:
        console.print(f"[green]Wrote report to {output}[/green]")


def _check_format(fmt: str) -> None:
    if fmt not in FORMATS:
        console.print(f"[red]Unknown format '{fmt}', expected one of: {', '.join(FORMATS)}[/red]")
        raise typer.Exit(2)


@app.command()
def deps(
    repositories: list[str] = typer.Argument(..., help="Repositories as owner/name"),
    target_org: str | None = typer.Option(
        None, "--target-org", help="Validate readiness against this organization"
    ),
    assign_teams: bool = typer.Option(
        False, help="Team assignment is planned during transfer (no effect on validation)"
    ),
    fmt: str = typer.Option("json", "--format", help="Output format: json or yaml"),
    output: Path | None = typer.Option(None, help="Output file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug diagnostics"),
) -> None:
    """Discover organizational dependencies of repositories and validate them."""
    _check_format(fmt)
    settings = _load_settings(verbose)

    from repo_transfer.batch import BatchAnalyzer, BatchResult, group_by_owner
    from repo_transfer.client import GitHubClient
    from repo_transfer.validation import scan_target_capabilities, validate

    async def _deps() -> list[RepositoryReport]:
        async with GitHubClient(settings) as client:
            capabilities = None
            if target_org:
                console.print(f"[dim]Scanning target organization {target_org}...[/dim]")
                capabilities = await scan_target_capabilities(client, target_org)
                for warning in capabilities.warnings:
                    console.print(f"[yellow]{warning}[/yellow]")

            by_identifier: dict[str, list[BatchResult]] = {}
            for owner, group in group_by_owner(repositories).items():
                if owner:
                    console.print(f"[dim]Analyzing {len(group)} repositories in {owner}...[/dim]")
                for result in await BatchAnalyzer(client).analyze_many(group):
                    by_identifier.setdefault(result.repository, []).append(result)

            reports = []
            for identifier in repositories:
                result = by_identifier[identifier].pop(0)
                validation = None
                if capabilities is not None and result.facts is not None:
                    validation = validate(result.facts, capabilities, assign_teams)
                reports.append(
                    RepositoryReport(
                        repository=result.repository,
                        facts=result.facts,
                        validation=validation,
                        error=result.error,
                    )
                )
            return reports

    reports = asyncio.run(_deps())
    _emit(reports, fmt, output)

    failed = [report for report in reports if report.error]
    for report in failed:
        console.print(f"[red]{report.repository}: {report.error}[/red]")
    for report in reports:
        if report.facts and report.facts.degraded:
            names = ", ".join(d.category for d in report.facts.degraded)
            console.print(f"[yellow]{report.repository}: incomplete analysis for {names}[/yellow]")
    if failed:
        raise typer.Exit(1)


@app.command()
def scan(
    organization: str = typer.Argument(help="Target organization to scan"),
    fmt: str = typer.Option("json", "--format", help="Output format: json or yaml"),
    output: Path | None = typer.Option(None, help="Output file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug diagnostics"),
) -> None:
    """Show what already exists in a target organization."""
    _check_format(fmt)
    settings = _load_settings(verbose)

    from repo_transfer.client import GitHubClient
    from repo_transfer.validation import scan_target_capabilities

    async def _scan() -> BaseModel:
        async with GitHubClient(settings) as client:
            return await scan_target_capabilities(client, organization)

    capabilities = asyncio.run(_scan())
    _emit(capabilities, fmt, output)


if __name__ == "__main__":
    app()
