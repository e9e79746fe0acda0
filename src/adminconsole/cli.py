"""Typer-based CLI entry point."""

from __future__ import annotations

import dataclasses
import functools
import os
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from adminconsole.application.presets import PRESETS, ResourceDefinition, get_preset
from adminconsole.application.services.csv_exporter import resolve_path
from adminconsole.config import API_TOKEN_ENV, API_URL_ENV, DEFAULT_API_URL, HTTP_TIMEOUT_SEC
from adminconsole.domain.models import Page
from adminconsole.errors import (
    AdminConsoleError,
    ExportError,
    FilterValidationError,
    SettingsError,
    TransportError,
    UnknownResourceError,
)
from adminconsole.gui.viewmodels.resource_list_viewmodel import ResourceListViewModel
from adminconsole.infrastructure.services.admin_api_client import AdminApiClient
from adminconsole.settings.manager import ListSettings, SettingsManager

app = typer.Typer(help="Browse and export admin console resource lists")
console = Console()


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (FilterValidationError, TransportError, ExportError, UnknownResourceError, SettingsError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except AdminConsoleError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


def _parse_filters(values: Optional[List[str]]) -> Dict[str, str]:
    filters: Dict[str, str] = {}
    for raw in values or []:
        key, sep, value = raw.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"expected KEY=VALUE, got {raw!r}", param_hint="--filter")
        filters[key.strip()] = value.strip()
    return filters


def _load_settings(path: Optional[Path]) -> Optional[SettingsManager]:
    if path is None:
        return None
    manager = SettingsManager(path)
    manager.load()
    return manager


def _make_client(base_url: str, token: Optional[str], timeout: float) -> AdminApiClient:
    return AdminApiClient(base_url, token=token, timeout=timeout)


def _open(
    resource: str,
    *,
    filters: Dict[str, str],
    base_url: Optional[str],
    token: Optional[str],
    settings_path: Optional[Path],
    page_size: Optional[int] = None,
) -> tuple[AdminApiClient, ResourceListViewModel]:
    definition = get_preset(resource)
    manager = _load_settings(settings_path)
    list_settings = manager.list_settings(resource) if manager else ListSettings()
    if page_size:
        list_settings = dataclasses.replace(list_settings, page_size=page_size)
    url = base_url or os.environ.get(API_URL_ENV) or (manager.get("api.base_url") if manager else DEFAULT_API_URL)
    timeout = float(manager.get("api.timeout_sec", HTTP_TIMEOUT_SEC)) if manager else HTTP_TIMEOUT_SEC
    client = _make_client(url, token or os.environ.get(API_TOKEN_ENV), timeout)
    view_model = ResourceListViewModel.for_resource(
        definition,
        client.resource(definition),
        settings=list_settings,
        initial_filters=filters,
    )
    return client, view_model


def _render_page(definition: ResourceDefinition, page: Page, placeholder: str) -> Table:
    columns = definition.table_columns or tuple(page.items[0].keys() if page.items else ())
    table = Table(title=definition.display_title)
    for column in columns:
        table.add_column(column)
    for item in page.items:
        cells = []
        for column in columns:
            value = resolve_path(item, column)
            if isinstance(value, (str, int, float, bool)) and value != "":
                cells.append(str(value))
            else:
                cells.append(placeholder)
        table.add_row(*cells)
    return table


@app.command("resources")
def list_resources() -> None:
    """Show the resource lists this console knows about."""

    table = Table(title="Resources")
    table.add_column("Name")
    table.add_column("Endpoint")
    table.add_column("Filters")
    for definition in PRESETS.values():
        names = ", ".join(
            f"{field.name}*" if field.live else field.name for field in definition.filter_fields
        )
        table.add_row(definition.name, definition.endpoint, names)
    console.print(table)
    print("[dim]* applied while typing")


@app.command("list")
@_handle_errors
def list_page(
    resource: str = typer.Argument(..., help="Resource name, see `resources`"),
    page: int = typer.Option(1, "--page", "-p", min=1),
    page_size: Optional[int] = typer.Option(None, "--page-size", "-n", min=1),
    filter_: Optional[List[str]] = typer.Option(None, "--filter", "-f", help="KEY=VALUE, repeatable"),
    base_url: Optional[str] = typer.Option(None, "--base-url"),
    token: Optional[str] = typer.Option(None, "--token"),
    settings_path: Optional[Path] = typer.Option(None, "--settings", dir_okay=False),
) -> None:
    """Fetch one page of RESOURCE and print it as a table."""

    client, view_model = _open(
        resource,
        filters=_parse_filters(filter_),
        base_url=base_url,
        token=token,
        settings_path=settings_path,
        page_size=page_size,
    )
    try:
        view_model.go_to_page(page).result()
        current = view_model.current_page
        definition = get_preset(resource)
        console.print(_render_page(definition, current, "-"))
        print(
            f"[green]Page {current.page_number} of {current.last_page}"
            f" ({current.total_items} {definition.name})"
        )
        if view_model.has_stats:
            stats = view_model.refresh_stats().result()
            if stats:
                print("[dim]" + ", ".join(f"{key}: {value}" for key, value in stats.items()))
    finally:
        view_model.dispose()
        client.close()


@app.command("export")
@_handle_errors
def export(
    resource: str = typer.Argument(..., help="Resource name, see `resources`"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", dir_okay=False),
    filter_: Optional[List[str]] = typer.Option(None, "--filter", "-f", help="KEY=VALUE, repeatable"),
    base_url: Optional[str] = typer.Option(None, "--base-url"),
    token: Optional[str] = typer.Option(None, "--token"),
    settings_path: Optional[Path] = typer.Option(None, "--settings", dir_okay=False),
) -> None:
    """Export every RESOURCE row matching the filters to CSV."""

    client, view_model = _open(
        resource,
        filters=_parse_filters(filter_),
        base_url=base_url,
        token=token,
        settings_path=settings_path,
    )
    try:
        result = view_model.export_all("csv").result()
    finally:
        view_model.dispose()
        client.close()
    if result.empty:
        print(f"[yellow]No {resource} to export")
        return
    target = out or Path.cwd() / result.filename
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(result.content)
    print(f"[green]Exported {result.row_count} rows to {target}")


def main() -> None:  # pragma: no cover - console script shim
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
