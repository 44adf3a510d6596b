# src/cli/runner.py

"""Headless CLI commands: daemon, one-off pass, watch management."""

import logging
import threading

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.models.errors import StorageFailure
from src.models.price_snapshot import PriceStatistics
from src.scrapers.registry import ScraperRegistry
from src.services.emailer import build_sink
from src.services.notifier import DropNotifier
from src.services.price_monitor import CheckStatus, PassSummary, PriceMonitor
from src.storage.price_history import PriceHistory
from src.storage.watch_db import WatchDB

logger = logging.getLogger("price_watch.cli")

# Stderr console for status messages so stdout stays clean
_err = Console(stderr=True)


def _money(value: float | None) -> str:
    if value is None:
        return "—"
    return f"{Settings.CURRENCY_SYMBOL}{value:,.2f}"


def _stats_line(stats: PriceStatistics) -> str:
    return (
        f"min {_money(stats.minimum)}  max {_money(stats.maximum)}  "
        f"mean {_money(stats.mean)}"
    )


def build_monitor(db: WatchDB, registry: ScraperRegistry) -> PriceMonitor:
    """Wire the monitor from explicitly constructed collaborators."""
    return PriceMonitor(
        store=db,
        registry=registry,
        notifier=DropNotifier(build_sink()),
        history=PriceHistory(db),
    )


def _print_summary(summary: PassSummary) -> None:
    """Render a Rich table of pass outcomes to stdout."""
    table = Table(
        title="Price Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Watch", style="dim", width=6)
    table.add_column("Status", justify="center")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Alert", justify="center")
    table.add_column("Notes", overflow="fold", style="dim")

    for o in summary.outcomes:
        status = (
            "[green]OK[/green]"
            if o.status is CheckStatus.OK
            else "[red]FAILED[/red]"
        )
        table.add_row(
            str(o.watch_id),
            status,
            _money(o.price),
            "sent" if o.notified else "",
            o.error,
        )
    Console().print(table)


def run_check() -> int:
    """Run one monitoring pass now and print the outcome."""
    registry = ScraperRegistry.default()
    db = WatchDB()
    try:
        monitor = build_monitor(db, registry)
        _err.print("[bold]Checking all active watches...[/bold]")
        summary = monitor.run_pass()
    finally:
        db.close()

    if summary is None or summary.aborted:
        _err.print("[red]Pass aborted, see log for details.[/red]")
        return 1
    _print_summary(summary)
    _err.print(
        f"[green]✓ {summary.succeeded} ok[/green], "
        f"[red]{summary.failed} failed[/red], "
        f"{summary.drops} alerts sent"
    )
    return 0 if summary.failed == 0 else 1


def run_daemon() -> int:
    """Run the periodic monitor until interrupted."""
    registry = ScraperRegistry.default()
    db = WatchDB()
    monitor = build_monitor(db, registry)
    monitor.start()
    _err.print(
        "[bold]Monitoring prices every "
        f"{Settings.CHECK_INTERVAL / 3600:g}h.[/bold] "
        "[dim]Ctrl-C to stop.[/dim]"
    )
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        _err.print("[dim]Stopping...[/dim]")
    finally:
        monitor.stop()
        db.close()
    return 0


def add_watch(url: str, target_price: float, email: str) -> int:
    """Create a watch after checking the URL is supported."""
    if target_price <= 0:
        _err.print("[red]Target price must be positive.[/red]")
        return 1
    registry = ScraperRegistry.default()
    platform = registry.detect_platform(url)
    if platform is None:
        valid = ", ".join(registry.platforms())
        _err.print(f"[red]Unsupported platform for {url}[/red]")
        _err.print(f"[dim]Supported: {valid}[/dim]")
        return 1

    db = WatchDB()
    try:
        watch = db.add_watch(url, target_price, email, platform)
    except StorageFailure as exc:
        _err.print(f"[red]Could not save watch: {exc}[/red]")
        return 1
    finally:
        db.close()
    _err.print(
        f"[green]✓ Watch {watch.id} created[/green] "
        f"[dim]{platform}, target {_money(target_price)}[/dim]"
    )
    return 0


def list_watches() -> int:
    """Print all active watches."""
    db = WatchDB()
    try:
        watches = db.list_watches()
    finally:
        db.close()
    if not watches:
        _err.print("[yellow]No active watches.[/yellow]")
        return 0

    table = Table(title="Watches", show_lines=True, title_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Platform", style="magenta")
    table.add_column("Target", justify="right")
    table.add_column("Last", justify="right", style="green")
    table.add_column("Checked", style="dim")
    table.add_column("Email")
    table.add_column("URL", overflow="fold", style="dim")
    for w in watches:
        table.add_row(
            str(w.id),
            w.platform,
            _money(w.target_price),
            _money(w.last_price),
            w.last_checked.strftime("%Y-%m-%d %H:%M")
            if w.last_checked
            else "never",
            w.email,
            w.url,
        )
    Console().print(table)
    return 0


def remove_watch(watch_id: int) -> int:
    """Deactivate a watch; its history stays queryable."""
    db = WatchDB()
    try:
        removed = db.deactivate_watch(watch_id)
    finally:
        db.close()
    if not removed:
        _err.print(f"[red]No watch with id {watch_id}.[/red]")
        return 1
    _err.print(f"[green]✓ Watch {watch_id} deactivated[/green]")
    return 0


def purge_watch(watch_id: int) -> int:
    """Delete a watch and its whole price history."""
    db = WatchDB()
    try:
        purged = db.purge_watch(watch_id)
    finally:
        db.close()
    if not purged:
        _err.print(f"[red]No watch with id {watch_id}.[/red]")
        return 1
    _err.print(f"[green]✓ Watch {watch_id} and its history deleted[/green]")
    return 0


def show_history(watch_id: int) -> int:
    """Print the recent snapshots with window and full-history statistics."""
    db = WatchDB()
    try:
        watch = db.get_watch(watch_id)
        if watch is None:
            _err.print(f"[red]No watch with id {watch_id}.[/red]")
            return 1
        history = PriceHistory(db)
        snapshots = history.recent(watch_id)
        stats = history.statistics(watch_id)
        window = history.window_statistics(watch_id)
    finally:
        db.close()

    table = Table(
        title=f"Price history: watch {watch_id}",
        title_style="bold cyan",
    )
    table.add_column("Observed", style="dim")
    table.add_column("Price", justify="right", style="green")
    for snap in snapshots:
        table.add_row(
            snap.observed_at.strftime("%Y-%m-%d %H:%M"),
            _money(snap.price),
        )
    Console().print(table)

    if stats.empty:
        _err.print("[yellow]No observations yet.[/yellow]")
    else:
        _err.print(f"Last {window.count}: {_stats_line(window)}")
        _err.print(f"All {stats.count}: {_stats_line(stats)}")
    return 0


async def run_health_check() -> int:
    """Run connectivity health check on all platforms."""
    from src.services.health_checker import HealthChecker

    _err.print("[bold]Running platform health check...[/bold]")
    checker = HealthChecker(ScraperRegistry.default())
    results = await checker.check_all()

    table = Table(
        title="Platform Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Platform", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = f"{r.latency_ms:.0f}ms" if r.latency_ms > 0 else "—"
        table.add_row(r.platform, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0
