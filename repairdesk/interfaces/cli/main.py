"""
CLI Main - Typer-based command-line interface.

Usage:
    repairdesk stats
    repairdesk parts list --search "iPhone 11"
    repairdesk parts add "Дисплей iPhone 11 оригінал, 2 штуки"
    repairdesk parts edit <id> --quantity 3 --location A-02
    repairdesk parts import "акумулятор S21 новий, далі камера XR бу"
    repairdesk parts normalize --apply
    repairdesk repairs status <id> READY
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from repairdesk.config import RepairDeskError, get_settings
from repairdesk.domains.extraction import PartExtractor
from repairdesk.domains.inventory import (
    BulkImport,
    Category,
    Part,
    PartForm,
    PartStore,
    candidate_to_part,
)
from repairdesk.domains.repairs import RepairDraft, RepairStatus, RepairStore

app = typer.Typer(
    name="repairdesk",
    help="RepairDesk - Phone repair shop inventory and repair orders",
    add_completion=False,
)
parts_app = typer.Typer(help="Spare parts inventory")
repairs_app = typer.Typer(help="Repair orders")
app.add_typer(parts_app, name="parts")
app.add_typer(repairs_app, name="repairs")

console = Console()


@dataclass
class Services:
    """Wired-up stores and extractor for one command."""

    parts: PartStore
    repairs: RepairStore
    extractor: PartExtractor


@asynccontextmanager
async def _services() -> AsyncIterator[Services]:
    """Build the backend client, model client and stores."""
    from repairdesk.adapters.gemini import GeminiClient, GeminiConfig
    from repairdesk.adapters.rest import ShopAPIClient
    from repairdesk.domains.extraction import GeminiPartExtractor

    settings = get_settings()
    api = ShopAPIClient(settings.api_base_url, timeout=settings.api_timeout_seconds)
    gemini = GeminiClient(
        GeminiConfig(
            model=settings.gemini_model,
            api_key=settings.gemini_api_key,
            temperature=settings.gemini_temperature,
            rate_limit_rpm=settings.gemini_rate_limit_rpm,
        )
    )
    try:
        yield Services(
            parts=PartStore(api, low_stock_threshold=settings.low_stock_threshold),
            repairs=RepairStore(api),
            extractor=GeminiPartExtractor(gemini),
        )
    finally:
        await api.close()


def _run(coro) -> None:
    """Run a command coroutine, turning domain errors into exit code 1."""
    try:
        asyncio.run(coro)
    except RepairDeskError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Configure logging for every command."""
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


# --- Rendering ---


def _parts_table(parts: list[Part], title: str) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim", overflow="fold")
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Condition")
    table.add_column("Models")
    table.add_column("Qty", justify="right")
    table.add_column("Buy", justify="right")
    table.add_column("Sell", justify="right")
    table.add_column("Location")
    for p in parts:
        table.add_row(
            p.id[:8],
            p.name,
            p.category.value,
            p.condition.label,
            ", ".join(p.compatibility),
            str(p.quantity),
            f"{p.price_buy:g}",
            f"{p.price_sell:g}",
            p.location,
        )
    return table


# --- Commands ---


@app.command()
def stats() -> None:
    """Show inventory and repair totals."""
    _run(_stats_async())


async def _stats_async() -> None:
    async with _services() as services:
        await services.parts.load()
        await services.repairs.load()
        summary = services.parts.stats()
        counts = services.repairs.counts_by_status()

    table = Table(title="Inventory")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Units in stock", str(summary.total_items))
    table.add_row("Stock value (buy)", f"{summary.total_value_buy:,.2f} ₴")
    table.add_row("Stock value (sell)", f"{summary.total_value_sell:,.2f} ₴")
    table.add_row("Potential margin", f"{summary.potential_margin:,.2f} ₴")
    table.add_row("Used parts", str(summary.used_count))
    table.add_row("Low stock", str(summary.low_stock_count))
    console.print(table)

    repairs = Table(title="Repairs")
    repairs.add_column("Status", style="cyan")
    repairs.add_column("Orders", justify="right")
    for status, count in counts.items():
        repairs.add_row(status.label, str(count))
    console.print(repairs)


@parts_app.command("list")
def parts_list(
    search: str = typer.Option("", "--search", "-s", help="Name, model or source"),
    category: str = typer.Option("ALL", "--category", "-c", help="Category or ALL"),
) -> None:
    """List parts."""
    if category != "ALL" and category not in Category.__members__:
        console.print(f"[red]Error:[/red] Unknown category: {category}")
        raise typer.Exit(1)
    _run(_parts_list_async(search, category))


async def _parts_list_async(search: str, category: str) -> None:
    async with _services() as services:
        await services.parts.load()
        parts = services.parts.filter(search, category)
    console.print(_parts_table(parts, f"Parts ({len(parts)})"))


@parts_app.command("add")
def parts_add(
    text: str = typer.Argument(..., help="Free-text part description"),
    location: str = typer.Option("", "--location", "-l", help="Shelf or box"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Save without asking"),
) -> None:
    """Add a part from a free-text description."""
    _run(_parts_add_async(text, location, yes))


async def _parts_add_async(text: str, location: str, yes: bool) -> None:
    async with _services() as services:
        form = PartForm(services.extractor)
        with console.status("Parsing description..."):
            filled = await form.autofill(text)
        if not filled:
            console.print(f"[yellow]{form.notice}[/yellow]")
            form.draft = form.draft.model_copy(update={"name": text, "description": text})
        if location:
            form.draft = form.draft.model_copy(update={"location": location})

        preview = form.draft.to_part()
        console.print(_parts_table([preview], "New part"))
        if not yes and not typer.confirm("Save this part?"):
            raise typer.Exit(0)

        await services.parts.load()
        saved = await form.submit(services.parts)
    console.print(f"[green]Saved:[/green] {saved.name} ({saved.id})")


@parts_app.command("edit")
def parts_edit(
    part_id: str = typer.Argument(..., help="Part ID"),
    text: str = typer.Option("", "--text", "-t", help="Free-text description to merge in"),
    name: str | None = typer.Option(None, "--name", help="New name"),
    quantity: int | None = typer.Option(None, "--quantity", "-q", min=0, help="Units in stock"),
    price_buy: float | None = typer.Option(None, "--price-buy", min=0, help="Purchase price"),
    price_sell: float | None = typer.Option(None, "--price-sell", min=0, help="Sale price"),
    location: str | None = typer.Option(None, "--location", "-l", help="Shelf or box"),
    models: str | None = typer.Option(None, "--models", "-m", help="Compatible models, comma-separated"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Save without asking"),
) -> None:
    """Edit a stored part, optionally re-filling it from a description."""
    updates = {
        key: value
        for key, value in {
            "name": name,
            "quantity": quantity,
            "price_buy": price_buy,
            "price_sell": price_sell,
            "location": location,
        }.items()
        if value is not None
    }
    _run(_parts_edit_async(part_id, text, updates, models, yes))


async def _parts_edit_async(
    part_id: str, text: str, updates: dict, models: str | None, yes: bool
) -> None:
    async with _services() as services:
        await services.parts.load()
        form = PartForm(services.extractor, initial=services.parts.get(part_id))
        if text:
            with console.status("Parsing description..."):
                if not await form.autofill(text):
                    console.print(f"[yellow]{form.notice}[/yellow]")
        if updates:
            form.draft = form.draft.model_copy(update=updates)
        if models is not None:
            form.set_models_input(models)

        console.print(_parts_table([form.draft.to_part()], "Edited part"))
        if not yes and not typer.confirm("Save changes?"):
            raise typer.Exit(0)

        saved = await form.submit(services.parts)
    console.print(f"[green]Updated:[/green] {saved.name} ({saved.id})")


@parts_app.command("import")
def parts_import(
    text: str = typer.Argument(..., help="Dictated list of parts"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Save without asking"),
) -> None:
    """Import several parts from one dictated list."""
    _run(_parts_import_async(text, yes))


async def _parts_import_async(text: str, yes: bool) -> None:
    async with _services() as services:
        bulk = BulkImport(services.extractor)
        bulk.text = text
        with console.status("Parsing list..."):
            candidates = await bulk.process()
        if not candidates:
            console.print(f"[yellow]{bulk.notice}[/yellow]")
            raise typer.Exit(1)

        previews = [candidate_to_part(c) for c in candidates]
        console.print(_parts_table(previews, f"Recognized ({len(previews)})"))
        if not yes and not typer.confirm(f"Save {len(previews)} parts?"):
            raise typer.Exit(0)

        result = await bulk.save_all(services.parts)

    if result.ok:
        console.print(f"[green]{result.summary()}[/green]")
        return
    for failure in result.failures:
        console.print(f"[red]✗[/red] {failure.part.name}: {failure.error}")
    console.print(
        Panel(result.summary(), title="Import incomplete", style="yellow" if result.partial else "red")
    )
    raise typer.Exit(1)


@parts_app.command("normalize")
def parts_normalize(
    apply: bool = typer.Option(False, "--apply", help="Write changes to the backend"),
) -> None:
    """Suggest standardized names and categories for stored parts."""
    _run(_parts_normalize_async(apply))


async def _parts_normalize_async(apply: bool) -> None:
    async with _services() as services:
        await services.parts.load()
        with console.status("Asking the model..."):
            suggestions = await services.extractor.reconcile(services.parts.parts)
        if not suggestions:
            console.print("[yellow]No suggestions.[/yellow]")
            return

        table = Table(title="Suggestions")
        table.add_column("Current", style="dim")
        table.add_column("Suggested", style="cyan")
        table.add_column("Category")
        for s in suggestions:
            current = services.parts.get(s.id)
            changed = s.corrected_name != current.name or s.corrected_category is not current.category
            table.add_row(
                current.name,
                s.corrected_name if changed else "[dim]unchanged[/dim]",
                f"{current.category.value} → {s.corrected_category.value}",
            )
        console.print(table)

        if not apply:
            console.print("[dim]Run with --apply to save.[/dim]")
            return
        report = await services.parts.apply_suggestions(suggestions)

    console.print(
        f"[green]Updated {report.updated_count}[/green], "
        f"unchanged {len(report.unchanged)}, failed {len(report.failures)}"
    )
    if not report.ok:
        raise typer.Exit(1)


@parts_app.command("delete")
def parts_delete(part_id: str = typer.Argument(..., help="Part ID")) -> None:
    """Delete a part."""
    _run(_parts_delete_async(part_id))


async def _parts_delete_async(part_id: str) -> None:
    async with _services() as services:
        await services.parts.load()
        await services.parts.delete(part_id)
    console.print(f"[green]Deleted[/green] {part_id}")


@repairs_app.command("list")
def repairs_list(
    search: str = typer.Option("", "--search", "-s", help="Client, phone, model or IMEI"),
    status: str = typer.Option("ALL", "--status", help="Status or ALL"),
) -> None:
    """List repair orders."""
    if status != "ALL" and status not in RepairStatus.__members__:
        console.print(f"[red]Error:[/red] Unknown status: {status}")
        raise typer.Exit(1)
    _run(_repairs_list_async(search, status))


async def _repairs_list_async(search: str, status: str) -> None:
    async with _services() as services:
        await services.repairs.load()
        orders = services.repairs.filter(search, status)

    table = Table(title=f"Repairs ({len(orders)})")
    table.add_column("ID", style="dim", overflow="fold")
    table.add_column("Client", style="cyan")
    table.add_column("Device")
    table.add_column("Services")
    table.add_column("Status")
    table.add_column("Total", justify="right")
    for o in orders:
        table.add_row(
            o.id[:8],
            f"{o.client_name}\n{o.client_phone}",
            f"{o.device_brand} {o.device_model}".strip(),
            ", ".join(s.name for s in o.services) or "-",
            o.status.label,
            f"{o.total_price:g} ₴",
        )
    console.print(table)


@repairs_app.command("add")
def repairs_add(
    client: str = typer.Option(..., "--client", help="Client name"),
    phone: str = typer.Option("", "--phone", help="Client phone"),
    brand: str = typer.Option("", "--brand", help="Device brand"),
    model: str = typer.Option("", "--model", help="Device model"),
    imei: str = typer.Option("", "--imei", help="Serial number or IMEI"),
    problem: str = typer.Option("", "--problem", help="Problem description"),
    service: list[str] = typer.Option(
        [], "--service", help="Service line as name:price[:cost], repeatable"
    ),
) -> None:
    """Register a new repair order."""
    draft = RepairDraft(
        client_name=client,
        client_phone=phone,
        device_brand=brand,
        device_model=model,
        device_sn_imei=imei,
        problem_description=problem,
    )
    for line in service:
        name, _, rest = line.partition(":")
        price, _, cost = rest.partition(":")
        try:
            draft.add_service(name, float(price or 0), float(cost or 0))
        except ValueError:
            console.print(f"[red]Error:[/red] Bad service line: {line}")
            raise typer.Exit(1)
    _run(_repairs_add_async(draft))


async def _repairs_add_async(draft: RepairDraft) -> None:
    async with _services() as services:
        order = await services.repairs.create(draft)
    console.print(
        f"[green]Created repair[/green] {order.id}, total {order.total_price:g} ₴"
    )


@repairs_app.command("status")
def repairs_status(
    repair_id: str = typer.Argument(..., help="Repair ID"),
    status: RepairStatus = typer.Argument(..., help="New status"),
) -> None:
    """Change the status of a repair order."""
    _run(_repairs_status_async(repair_id, status))


async def _repairs_status_async(repair_id: str, status: RepairStatus) -> None:
    async with _services() as services:
        await services.repairs.load()
        order = await services.repairs.change_status(repair_id, status)
    console.print(f"[green]{order.id}[/green] → {order.status.label}")


@app.command()
def version() -> None:
    """Show version information."""
    from repairdesk import __version__

    console.print(f"RepairDesk v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
