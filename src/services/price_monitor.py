# src/services/price_monitor.py

"""Periodic monitoring passes over every active watch."""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.config.settings import Settings
from src.models.errors import MonitorError
from src.models.watch import Watch
from src.scrapers.registry import ScraperRegistry
from src.services.notifier import DropNotifier
from src.storage.price_history import PriceHistory
from src.storage.watch_store import WatchStore

logger = logging.getLogger("price_watch.monitor")


class MonitorState(Enum):
    """Whether a pass is currently in flight."""

    IDLE = "idle"
    RUNNING = "running"


class CheckStatus(Enum):
    """Result tag for a single watch check."""

    OK = "ok"
    FAILED = "failed"


@dataclass(frozen=True)
class CheckOutcome:
    """Tagged result of checking one watch during a pass."""

    watch_id: int
    status: CheckStatus
    price: float | None = None
    notified: bool = False
    error: str = ""


@dataclass
class PassSummary:
    """What happened during one pass."""

    started_at: datetime
    finished_at: datetime | None = None
    aborted: bool = False
    outcomes: list[CheckOutcome] = field(
        default_factory=lambda: list[CheckOutcome]()
    )

    @property
    def checked(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(
            1 for o in self.outcomes if o.status is CheckStatus.OK
        )

    @property
    def failed(self) -> int:
        return sum(
            1 for o in self.outcomes if o.status is CheckStatus.FAILED
        )

    @property
    def drops(self) -> int:
        return sum(1 for o in self.outcomes if o.notified)


class PriceMonitor:
    """Runs monitoring passes on a timer or on demand.

    Only one pass is ever in flight.  A manual trigger arriving while a
    pass runs is dropped rather than queued, and triggers arriving while
    idle coalesce into a single pass.
    """

    def __init__(
        self,
        store: WatchStore,
        registry: ScraperRegistry,
        notifier: DropNotifier,
        history: PriceHistory | None = None,
        interval: float | None = None,
        request_delay: float | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._registry = registry
        self._notifier = notifier
        self._history = history or PriceHistory(store)
        self._interval = (
            interval if interval is not None else Settings.CHECK_INTERVAL
        )
        self._request_delay = (
            request_delay
            if request_delay is not None
            else Settings.REQUEST_DELAY
        )
        self._clock = clock

        self._pass_lock = threading.Lock()
        self._fetched_this_pass = False
        self._wake = threading.Event()
        self._stop = threading.Event()
        self._worker: threading.Thread | None = None

    @property
    def state(self) -> MonitorState:
        if self._pass_lock.locked():
            return MonitorState.RUNNING
        return MonitorState.IDLE

    # ── One pass ─────────────────────────────────────────

    def run_pass(self) -> PassSummary | None:
        """Check every active watch once, sequentially.

        Returns None without doing anything when another pass is
        already running.
        """
        if not self._pass_lock.acquire(blocking=False):
            logger.info("Pass already running, request dropped")
            return None
        try:
            return self._run_pass_locked()
        finally:
            self._pass_lock.release()

    def _run_pass_locked(self) -> PassSummary:
        summary = PassSummary(started_at=self._clock())
        self._fetched_this_pass = False

        try:
            watches = self._store.load_active_watches()
        except MonitorError as exc:
            logger.error(
                "Could not load active watches, pass aborted: %s",
                exc,
                exc_info=True,
            )
            summary.aborted = True
            summary.finished_at = self._clock()
            return summary

        logger.info("Pass started: %d active watches", len(watches))
        for watch in watches:
            if not watch.active:
                logger.debug("Watch %d inactive, skipped", watch.id)
                continue
            summary.outcomes.append(self._check_watch(watch))

        summary.finished_at = self._clock()
        logger.info(
            "Pass complete. Checked: %d, ok: %d, failed: %d, drops: %d",
            summary.checked,
            summary.succeeded,
            summary.failed,
            summary.drops,
        )
        return summary

    def _throttle(self) -> None:
        """Sleep between successive fetches within a pass."""
        if self._fetched_this_pass:
            time.sleep(self._request_delay)
        self._fetched_this_pass = True

    def _check_watch(self, watch: Watch) -> CheckOutcome:
        """Resolve, fetch, extract, record and notify for one watch."""
        try:
            scraper = self._registry.resolve(watch.url)
            self._throttle()
            price = scraper.get_price(watch.url)
            self._history.record(watch.id, price, self._clock())
        except MonitorError as exc:
            logger.error(
                "Watch %d (%s) failed: %s: %s",
                watch.id,
                watch.url,
                type(exc).__name__,
                exc,
            )
            return CheckOutcome(
                watch_id=watch.id,
                status=CheckStatus.FAILED,
                error=f"{type(exc).__name__}: {exc}",
            )
        except Exception as exc:
            logger.error(
                "Watch %d (%s) failed unexpectedly: %s",
                watch.id,
                watch.url,
                exc,
                exc_info=True,
            )
            return CheckOutcome(
                watch_id=watch.id,
                status=CheckStatus.FAILED,
                error=f"{type(exc).__name__}: {exc}",
            )

        logger.info(
            "Watch %d: current=%.2f target=%.2f last=%s",
            watch.id,
            price,
            watch.target_price,
            watch.last_price,
        )
        notified = self._notifier.notify(watch, price)
        return CheckOutcome(
            watch_id=watch.id,
            status=CheckStatus.OK,
            price=price,
            notified=notified,
        )

    # ── Background worker ────────────────────────────────

    def start_pass(self) -> bool:
        """Request a pass now ("check now").

        Wakes the worker when it is started; otherwise the pass runs on
        a one-shot thread so the caller is never blocked.  Returns False
        only when the request is dropped because a pass is running.
        """
        if self.state is MonitorState.RUNNING:
            logger.info("Manual trigger dropped: pass in progress")
            return False
        if self._worker is None or not self._worker.is_alive():
            logger.info("Manual trigger with no worker, running one pass")
            threading.Thread(
                target=self._run_guarded,
                name="price-monitor-manual",
                daemon=True,
            ).start()
            return True
        self._wake.set()
        return True

    def start(self, run_immediately: bool = True) -> None:
        """Start the worker thread that runs a pass every interval."""
        if self._worker is not None and self._worker.is_alive():
            return
        self._stop.clear()
        if run_immediately:
            self._wake.set()
        else:
            self._wake.clear()
        self._worker = threading.Thread(
            target=self._worker_loop,
            name="price-monitor",
            daemon=True,
        )
        self._worker.start()
        logger.info(
            "Price monitor started (interval %.0fs)", self._interval,
        )

    def stop(self, timeout: float | None = None) -> None:
        """Stop the worker once any running pass has finished."""
        self._stop.set()
        self._wake.set()
        if self._worker is not None:
            self._worker.join(timeout)
        logger.info("Price monitor stopped")

    def _worker_loop(self) -> None:
        while not self._stop.is_set():
            self._wake.wait(timeout=self._interval)
            if self._stop.is_set():
                break
            self._wake.clear()
            self._run_guarded()

    def _run_guarded(self) -> None:
        """Run a pass; a crash is logged and never kills the thread."""
        try:
            self.run_pass()
        except Exception:
            logger.critical("Monitoring pass crashed", exc_info=True)
