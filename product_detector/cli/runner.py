# product_detector/cli/runner.py

"""Headless CLI runner for one-shot and watched detection."""

import asyncio
import json
import logging
import sys
import time
from decimal import Decimal
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from product_detector.config.settings import Settings
from product_detector.document.accessor import DocumentAccessor
from product_detector.document.page import Page
from product_detector.fetch.page_fetcher import FetchedPage, PageFetcher
from product_detector.models.product import ProductRecord
from product_detector.normalizers.price_normalizer import format_price
from product_detector.services.detection_engine import DetectionEngine
from product_detector.services.injector import inject_detector
from product_detector.services.reporting_sink import (
    CallbackSink,
    JsonLinesSink,
    ReportingSink,
)

logger = logging.getLogger("product_detector.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def load_page(url: str, file: str | None) -> FetchedPage | None:
    """Markup from a saved file, or fetched from *url*."""
    if file is not None:
        path = Path(file)
        if not path.is_file():
            _err.print(f"[red]File not found: {file}[/red]")
            return None
        return FetchedPage(url=url, html=path.read_text(encoding="utf-8"))
    return PageFetcher().fetch(url)


def _variant_summary(record: dict[str, Any], key: str) -> str:
    options = record.get("variants", {}).get(key, [])
    return ", ".join(
        f"[bold]{o['text']}[/bold]" if o.get("selected") else o["text"]
        for o in options
    ) or "—"


def _print_table(record: dict[str, Any]) -> None:
    """Render a Rich table of one record dict to stdout."""
    title = "Product" if record.get("success") else "No product detected"
    table = Table(title=title, show_lines=True, title_style="bold cyan")
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")

    price = record.get("price")
    original = record.get("originalPrice")
    rows = [
        ("Title", record.get("title")),
        ("Price", format_price(Decimal(str(price)), record.get("currency"))
            if price is not None else None),
        ("Original price", format_price(Decimal(str(original)), record.get("currency"))
            if original is not None else None),
        ("Currency", record.get("currency")),
        ("Brand", record.get("brand")),
        ("SKU", record.get("sku")),
        ("Availability", record.get("availability")),
        ("Image", record.get("imageUrl")),
        ("Method", record.get("extractionMethod")),
        ("URL", record.get("url")),
    ]
    if record.get("error"):
        rows.append(("Error", f"[red]{record['error']}[/red]"))
    if record.get("navigated"):
        rows.append(("Navigated", "yes"))
    for label, value in rows:
        table.add_row(label, str(value) if value is not None else "—")
    for label, key in (
        ("Colours", "colors"),
        ("Sizes", "sizes"),
        ("Other options", "otherOptions"),
    ):
        table.add_row(label, _variant_summary(record, key))

    Console().print(table)


def _emit(record: dict[str, Any], output_format: str) -> None:
    if output_format == "table":
        _print_table(record)
    else:
        json.dump(record, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")


def detect_once(url: str, file: str | None, output_format: str) -> int:
    """Run one detection pass and print it (0=product found, 1=not)."""
    fetched = load_page(url, file)
    if fetched is None:
        _err.print(f"[red]Could not load {url}[/red]")
        return 1

    record: ProductRecord = DetectionEngine().run(
        fetched.url, DocumentAccessor(fetched.html, fetched.url)
    )
    if record.success:
        _err.print(
            f"[green]✓ {record.title} via {record.extraction_method}[/green]"
        )
    elif not record.is_product_page:
        _err.print("[yellow]Not a product page.[/yellow]")
    else:
        _err.print("[yellow]Product page, but extraction incomplete.[/yellow]")
    _emit(record.to_dict(), output_format)
    return 0 if record.success else 1


async def watch(
    url: str,
    seconds: float,
    file: str | None = None,
    output_format: str = "json",
) -> int:
    """Run the scheduler for *seconds*, refetching the page periodically.

    Every refetch that changes the markup is delivered as a mutation
    burst; a changed final URL is delivered as a navigation.
    """
    fetched = await asyncio.to_thread(load_page, url, file)
    if fetched is None:
        _err.print(f"[red]Could not load {url}[/red]")
        return 1

    sink: ReportingSink
    if output_format == "table":
        sink = CallbackSink(_print_table)
    else:
        sink = JsonLinesSink(sys.stdout)

    page = Page(fetched.url, fetched.html)
    scheduler = inject_detector(page, sink)
    _err.print(f"[bold]Watching[/bold] {page.url} [dim]for {seconds:.0f}s[/dim]")

    deadline = time.monotonic() + seconds
    refresh = Settings.STEADY_STATE_INTERVAL
    try:
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            await asyncio.sleep(min(refresh, remaining))
            if file is not None or time.monotonic() >= deadline:
                continue
            latest = await asyncio.to_thread(load_page, page.url, None)
            if latest is None:
                logger.warning("Refetch of %s failed", page.url)
                continue
            if latest.url != page.url:
                page.navigate(latest.url, latest.html)
            elif latest.html != page.html:
                page.mutate(
                    latest.html,
                    mutations=Settings.SIGNIFICANT_MUTATION_COUNT + 1,
                )
    finally:
        scheduler.stop()

    return 0 if scheduler.last_reported is not None else 1
