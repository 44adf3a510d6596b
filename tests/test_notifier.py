# tests/test_notifier.py

"""Tests for drop-event evaluation and dispatch."""

import unittest
from unittest.mock import MagicMock

from src.models.errors import NotifyFailure
from src.models.watch import Watch
from src.services.notifier import (
    DropAlert,
    DropNotifier,
    build_body,
    build_html_body,
    build_subject,
)


class _RecordingSink:
    """Sink that records every message it is handed."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.html: list[str | None] = []

    def send(
        self,
        recipient: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> None:
        self.sent.append((recipient, subject, body))
        self.html.append(html_body)


def _make_watch(target: float = 500.0) -> Watch:
    return Watch(
        id=7,
        url="https://www.flipkart.com/shirt/p/itm123",
        target_price=target,
        email="buyer@example.com",
        platform="flipkart",
    )


class TestDropNotifier(unittest.TestCase):
    """Dispatch iff observed <= target, every time."""

    def setUp(self) -> None:
        self.sink = _RecordingSink()
        self.notifier = DropNotifier(self.sink)

    def test_below_target_dispatches_once(self) -> None:
        self.assertTrue(self.notifier.notify(_make_watch(500), 499))
        self.assertEqual(len(self.sink.sent), 1)
        recipient, subject, body = self.sink.sent[0]
        self.assertEqual(recipient, "buyer@example.com")
        self.assertIn("₹1", subject)
        self.assertIn("You save: ₹1.00", body)

    def test_above_target_dispatches_nothing(self) -> None:
        self.assertFalse(self.notifier.notify(_make_watch(500), 501))
        self.assertEqual(self.sink.sent, [])

    def test_equal_to_target_is_a_drop(self) -> None:
        self.assertTrue(self.notifier.notify(_make_watch(500), 500))
        self.assertEqual(len(self.sink.sent), 1)

    def test_no_cooldown_between_passes(self) -> None:
        """A watch that stays below target is notified every time."""
        watch = _make_watch(500)
        for _ in range(3):
            self.notifier.notify(watch, 450)
        self.assertEqual(len(self.sink.sent), 3)

    def test_body_contains_required_fields(self) -> None:
        self.notifier.notify(_make_watch(999), 799)
        _, _, body = self.sink.sent[0]
        self.assertIn("https://www.flipkart.com/shirt/p/itm123", body)
        self.assertIn("₹999.00", body)
        self.assertIn("₹799.00", body)
        self.assertIn("₹200.00", body)

    def test_html_alternative_sent_with_alert(self) -> None:
        self.notifier.notify(_make_watch(999), 799)
        html_body = self.sink.html[0]
        assert html_body is not None
        self.assertIn(
            'href="https://www.flipkart.com/shirt/p/itm123"', html_body,
        )
        self.assertIn("₹200.00", html_body)

    def test_sink_error_is_caught(self) -> None:
        sink = MagicMock()
        sink.send.side_effect = ConnectionError("SMTP down")
        notifier = DropNotifier(sink)
        self.assertFalse(notifier.notify(_make_watch(500), 100))
        sink.send.assert_called_once()

    def test_notify_failure_is_caught(self) -> None:
        sink = MagicMock()
        sink.send.side_effect = NotifyFailure("rejected")
        self.assertFalse(DropNotifier(sink).notify(_make_watch(500), 100))


class TestMessageRendering(unittest.TestCase):

    def test_savings_and_discount(self) -> None:
        alert = DropAlert(
            url="https://www.ajio.com/p/1",
            platform="ajio",
            target_price=1000.0,
            observed_price=750.0,
        )
        self.assertEqual(alert.savings, 250.0)
        self.assertEqual(alert.discount_percent, 25)
        self.assertIn("AJIO", build_subject(alert))
        self.assertIn("25% below target", build_body(alert))

    def test_html_escapes_url(self) -> None:
        alert = DropAlert(
            url='https://www.ajio.com/p/1?a=1&b="x"',
            platform="ajio",
            target_price=1000.0,
            observed_price=750.0,
        )
        rendered = build_html_body(alert)
        self.assertIn("a=1&amp;b=&quot;x&quot;", rendered)
        self.assertNotIn('b="x"', rendered)


if __name__ == "__main__":
    unittest.main()
