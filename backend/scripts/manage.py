from __future__ import annotations

import asyncio
import json
from typing import Annotated, Any

import typer

from career_search.core.config import settings
from career_search.core.logging import configure_logging
from career_search.schemas import SearchEnvelope
from career_search.services.health import build_diagnostics_report
from career_search.services.orchestrator import (
    SearchValidationError,
    build_search_orchestrator,
    parse_search_request,
)
from career_search.services.search import (
    SearchConfigurationError,
    SearchExecutionError,
)

app = typer.Typer(add_completion=False)


def _dump(payload: dict[str, Any], *, pretty: bool) -> str:
    if pretty:
        return json.dumps(payload, indent=2, ensure_ascii=False)
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


@app.callback()
def main() -> None:
    """Operator commands for the career search service."""
    configure_logging(settings)


@app.command()
def search(
    query: str = typer.Argument(..., help="Career question to search for"),
    location: Annotated[
        str | None,
        typer.Option("--location", help="Optional location filter", show_default=False),
    ] = None,
    pretty: bool = typer.Option(
        True,
        "--pretty/--compact",
        help="Indent the JSON output",
    ),
) -> None:
    """Run one search through the full pipeline and print the response envelope."""

    body: dict[str, Any] = {"query": query}
    if location:
        body["filters"] = {"location": location}

    try:
        request = parse_search_request(body)
    except SearchValidationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc

    orchestrator = build_search_orchestrator(settings)
    try:
        outcome = asyncio.run(orchestrator.search(request))
    except (SearchConfigurationError, SearchExecutionError) as exc:
        typer.echo(f"Search failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    envelope = SearchEnvelope(
        data=outcome.response, cached=outcome.cached, warnings=outcome.warnings
    )
    typer.echo(_dump(envelope.to_wire(), pretty=pretty))


@app.command()
def diagnostics(
    query: str = typer.Option(
        "test query", "--query", help="Query used for the provider probe"
    ),
) -> None:
    """Report credential presence and probe the search provider."""

    orchestrator = build_search_orchestrator(settings)
    report = asyncio.run(build_diagnostics_report(orchestrator, settings, query=query))
    typer.echo(_dump(report, pretty=True))
    if report["status"] == "error":
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
