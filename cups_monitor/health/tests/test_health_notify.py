"""
Tests for health notify module.
"""

import logging
from unittest.mock import MagicMock

import requests

from cups_monitor.health import notify


def _session_returning(status_code, text=""):
    session = MagicMock()
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    session.post.return_value = response
    return session


class TestBuildEvent:
    """Tests for build_event function."""

    def test_build_trigger_event(self):
        """Test trigger event carries every field."""
        event = notify.build_event(
            "key", "trigger", "CUPS service is down", "critical", "http://x:1"
        )

        assert event == {
            "routing_key": "key",
            "event_action": "trigger",
            "dedup_key": "cups-monitor",
            "payload": {
                "summary": "CUPS service is down",
                "source": "http://x:1",
                "severity": "critical",
            },
        }

    def test_build_event_without_source(self):
        """Test source is omitted when not given."""
        event = notify.build_event("key", "resolve", "CUPS recovered", "info")
        assert "source" not in event["payload"]


class TestSendAlert:
    """Tests for send_alert function."""

    def test_send_alert_accepted(self):
        """Test 202 counts as success."""
        session = _session_returning(202)

        sent = notify.send_alert(
            "key", "trigger", "down", "critical", "http://x:1", session=session
        )

        assert sent is True
        args, kwargs = session.post.call_args
        assert args[0] == notify.PAGERDUTY_EVENTS_URL
        assert kwargs["json"]["dedup_key"] == "cups-monitor"
        assert kwargs["headers"]["Content-Type"] == "application/json"

    def test_send_alert_200_is_failure(self):
        """Test only 202 counts as success."""
        session = _session_returning(200)

        assert notify.send_alert("key", "resolve", "up", "info", session=session) is False

    def test_send_alert_400_logged(self, caplog):
        """Test rejected event is logged, not raised."""
        session = _session_returning(400, text='{"status":"invalid event"}')

        with caplog.at_level(logging.ERROR):
            sent = notify.send_alert("key", "trigger", "down", "error", session=session)

        assert sent is False
        assert "Alert failed: status 400" in caplog.text
        assert "invalid event" in caplog.text

    def test_send_alert_transport_error(self, caplog):
        """Test transport error is logged, not raised."""
        session = MagicMock()
        session.post.side_effect = requests.exceptions.ConnectionError("no route")

        with caplog.at_level(logging.ERROR):
            sent = notify.send_alert("key", "trigger", "down", "error", session=session)

        assert sent is False
        assert "Alert failed" in caplog.text
        session.post.assert_called_once()

    def test_send_alert_custom_url(self):
        """Test events URL can be overridden."""
        session = _session_returning(202)

        notify.send_alert(
            "key", "trigger", "down", "error", session=session, url="http://pd.test"
        )

        assert session.post.call_args[0][0] == "http://pd.test"
