# src/services/notifier.py

"""Decides when an observed price is a drop event and sends the alert."""

import html
import logging
from dataclasses import dataclass
from typing import Protocol

from src.config.settings import Settings
from src.models.errors import NotifyFailure
from src.models.watch import Watch

logger = logging.getLogger("price_watch.notifier")


class NotificationSink(Protocol):
    """Outbound message transport; raises on delivery failure.

    *html_body*, when given, is an HTML rendering of *body*.
    """

    def send(
        self,
        recipient: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> None:
        ...


@dataclass(frozen=True)
class DropAlert:
    """Everything the outbound message needs to say about a drop."""

    url: str
    platform: str
    target_price: float
    observed_price: float

    @property
    def savings(self) -> float:
        return round(self.target_price - self.observed_price, 2)

    @property
    def discount_percent(self) -> int:
        return round(self.savings / self.target_price * 100)


def build_subject(alert: DropAlert) -> str:
    """Subject line for a drop alert."""
    symbol = Settings.CURRENCY_SYMBOL
    return (
        f"Price Drop Alert! Save {symbol}{alert.savings:,.0f} "
        f"on {alert.platform.upper()}"
    )


def build_body(alert: DropAlert) -> str:
    """Plain-text body with URL, target, observed price and savings."""
    symbol = Settings.CURRENCY_SYMBOL
    lines = [
        "Your target price has been reached.",
        "",
        f"Platform: {alert.platform.upper()}",
        f"Target price: {symbol}{alert.target_price:,.2f}",
        f"Current price: {symbol}{alert.observed_price:,.2f}",
        f"You save: {symbol}{alert.savings:,.2f} "
        f"({alert.discount_percent}% below target)",
        "",
        f"Product: {alert.url}",
        "",
        "Prices can change at any time.",
    ]
    return "\n".join(lines) + "\n"


def build_html_body(alert: DropAlert) -> str:
    """HTML alternative of :func:`build_body` for mail clients."""
    symbol = Settings.CURRENCY_SYMBOL
    url = html.escape(alert.url, quote=True)
    return f"""\
<!DOCTYPE html>
<html>
<body style="font-family: Arial, sans-serif; color: #333;">
  <h1 style="color: #6366f1;">Price Drop Alert!</h1>
  <p>Your target price has been reached on
     <strong>{html.escape(alert.platform.upper())}</strong>.</p>
  <p>Target: {symbol}{alert.target_price:,.2f}<br>
     <span style="font-size: 24px; color: #10b981;">
       Now: {symbol}{alert.observed_price:,.2f}</span><br>
     Save {symbol}{alert.savings:,.2f} ({alert.discount_percent}% below target)</p>
  <p><a href="{url}">{url}</a></p>
  <p style="font-size: 12px; color: #9ca3af;">
     Prices can change at any time.</p>
</body>
</html>
"""


class DropNotifier:
    """Dispatches a message whenever a price is at or below target.

    There is no cooldown: a watch that stays below its target is
    notified again on every pass.
    """

    def __init__(self, sink: NotificationSink) -> None:
        self._sink = sink

    @staticmethod
    def is_drop(watch: Watch, observed_price: float) -> bool:
        """True iff *observed_price* is at or below the watch's target."""
        return observed_price <= watch.target_price

    def notify(self, watch: Watch, observed_price: float) -> bool:
        """Send an alert if this observation is a drop event.

        Returns True only when a message was handed to the sink
        successfully.  Sink errors are logged, never raised.
        """
        if not self.is_drop(watch, observed_price):
            logger.debug(
                "Watch %d: %.2f above target %.2f, no alert",
                watch.id,
                observed_price,
                watch.target_price,
            )
            return False

        alert = DropAlert(
            url=watch.url,
            platform=watch.platform,
            target_price=watch.target_price,
            observed_price=observed_price,
        )
        logger.warning(
            "Price drop for watch %d: %.2f <= %.2f (target)",
            watch.id,
            observed_price,
            watch.target_price,
        )
        try:
            self._dispatch(watch.email, alert)
        except NotifyFailure as exc:
            logger.error(
                "Watch %d: notification to %s failed: %s",
                watch.id,
                watch.email,
                exc,
                exc_info=True,
            )
            return False
        return True

    def _dispatch(self, recipient: str, alert: DropAlert) -> None:
        """Send through the sink; any sink error surfaces as NotifyFailure."""
        try:
            self._sink.send(
                recipient,
                build_subject(alert),
                build_body(alert),
                html_body=build_html_body(alert),
            )
        except NotifyFailure:
            raise
        except Exception as exc:
            raise NotifyFailure(str(exc)) from exc
