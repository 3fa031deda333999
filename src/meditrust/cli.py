"""Command line interface for the MediTrust verification toolkit."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .client import RemoteVerifier, ReportSubmissionError
from .config import ProjectConfig, load_config
from .models import UNKNOWN, CounterfeitReport, ScanRecord, VerificationResult, should_offer_report
from .parser import MalformedPayloadError, parse
from .pipeline import VerificationPipeline
from .session import ScanSession, SessionStatus

app = typer.Typer(add_completion=False)
console = Console()

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    exists=True,
    readable=True,
    resolve_path=True,
    help="Path to the project configuration file.",
)
LogLevelOption = typer.Option("WARNING", "--log-level", help="Logging level.")


@app.command()
def verify(
    payload: str = typer.Argument(..., help="Decoded scan payload, e.g. 'pharmacorp|B123|03/2030'."),
    config_path: Optional[Path] = ConfigOption,
    offline: bool = typer.Option(False, "--offline", help="Skip the remote service."),
    log_level: str = LogLevelOption,
) -> None:
    """Verify one scanned payload and print the verdict."""

    _configure_logging(log_level)
    config = _load_configuration(config_path)
    if offline:
        config = _offline_copy(config)
    try:
        record = parse(payload)
    except MalformedPayloadError as exc:
        console.print(f"[red]Invalid code:[/red] {exc.reason}. Please scan a valid medicine code.")
        raise typer.Exit(code=2) from exc

    async def _runner() -> VerificationResult:
        async with _build_verifier(config) as verifier:
            pipeline = VerificationPipeline.from_config(verifier, config)
            return await pipeline.run(record)

    _render_result(record, asyncio.run(_runner()))


@app.command()
def scan(
    config_path: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
) -> None:
    """Read payloads from standard input, one scan per line."""

    _configure_logging(log_level)
    config = _load_configuration(config_path)

    async def _runner() -> None:
        async with _build_verifier(config) as verifier:
            pipeline = VerificationPipeline.from_config(verifier, config)
            for line in sys.stdin:
                payload = line.rstrip("\n")
                if not payload.strip():
                    continue
                session = ScanSession(pipeline, on_result=_render_result)
                state = await session.submit(payload)
                if state.status is SessionStatus.IDLE and state.error:
                    console.print(f"[red]Invalid code:[/red] {state.error}. Please rescan.")
                elif state.status is SessionStatus.FAILED:
                    console.print(f"[red]Verification failed:[/red] {state.error}")

    asyncio.run(_runner())


@app.command()
def report(
    payload: str = typer.Argument(..., help="Decoded scan payload of the product to report."),
    location: str = typer.Option(..., "--location", "-l", help="Where the product was found."),
    notes: str = typer.Option("", "--notes", "-n", help="Additional notes for the authorities."),
    config_path: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
) -> None:
    """Report a product as counterfeit or unsafe."""

    _configure_logging(log_level)
    config = _load_configuration(config_path)
    try:
        record = parse(payload)
    except MalformedPayloadError as exc:
        console.print(f"[red]Invalid code:[/red] {exc.reason}.")
        raise typer.Exit(code=2) from exc

    async def _runner() -> None:
        async with _build_verifier(config) as verifier:
            await verifier.submit_report(CounterfeitReport.from_record(record, location, notes))

    try:
        asyncio.run(_runner())
    except ReportSubmissionError as exc:
        console.print(f"[red]Report could not be submitted:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    console.print("[green]Thanks - reported.[/green] The report was submitted to the authorities.")


def _build_verifier(config: ProjectConfig) -> RemoteVerifier:
    return RemoteVerifier(
        base_url=str(config.service.base_url),
        api_key=config.service.api_key,
        timeout_seconds=config.service.timeout_seconds,
    )


def _offline_copy(config: ProjectConfig) -> ProjectConfig:
    service = config.service.model_copy(update={"enabled": False})
    return config.model_copy(update={"service": service})


def _load_configuration(path: Optional[Path]) -> ProjectConfig:
    if path is None:
        return ProjectConfig()
    try:
        return load_config(path)
    except Exception as exc:  # noqa: BLE001
        raise typer.BadParameter(str(exc)) from exc


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _render_result(record: ScanRecord, result: VerificationResult) -> None:
    headline = result.headline
    console.print(
        Panel(
            f"{headline.symbol}  {headline.label}",
            title="MediTrust",
            border_style=headline.colour,
            style=f"bold {headline.colour}",
        )
    )

    table = Table(title="Details", show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")
    table.add_row("Product", record.product_name or UNKNOWN)
    table.add_row("Manufacturer", result.manufacturer or UNKNOWN)
    table.add_row("Batch number", result.batch_number or UNKNOWN)
    table.add_row("Expiry date", result.expiry_date or UNKNOWN)
    table.add_row("Verified", "remotely" if result.verified_remotely else "locally")
    console.print(table)

    if result.message:
        console.print(f"[yellow]{result.message}[/yellow]")
    if should_offer_report(result):
        console.print("Report this product with: [bold]meditrust report[/bold]")


if __name__ == "__main__":
    app()
