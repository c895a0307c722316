"""
Health notifications - PagerDuty Events API v2 delivery.

This module builds trigger/resolve events and posts them to PagerDuty.
Delivery failures are logged and dropped; they never raise.
"""

import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

PAGERDUTY_EVENTS_URL = "https://events.pagerduty.com/v2/enqueue"

# PagerDuty coalesces every event with this key into one incident
DEDUP_KEY = "cups-monitor"

ACTION_TRIGGER = "trigger"
ACTION_RESOLVE = "resolve"

RESOLVE_SUMMARY = "CUPS recovered"
RESOLVE_SEVERITY = "info"


def build_event(
    routing_key: str,
    action: str,
    summary: str,
    severity: str,
    source: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a PagerDuty Events API v2 body.

    Args:
        routing_key: Integration routing key
        action: "trigger" or "resolve"
        summary: Human readable summary
        severity: "critical", "error" or "info"
        source: Monitored URL (optional)

    Returns:
        JSON-serialisable event dict
    """
    payload: Dict[str, Any] = {"summary": summary, "severity": severity}
    if source:
        payload["source"] = source

    return {
        "routing_key": routing_key,
        "event_action": action,
        "dedup_key": DEDUP_KEY,
        "payload": payload,
    }


def send_alert(
    routing_key: str,
    action: str,
    summary: str,
    severity: str,
    source: Optional[str] = None,
    session: Optional[requests.Session] = None,
    url: str = PAGERDUTY_EVENTS_URL,
    timeout: float = 10.0,
) -> bool:
    """
    Post an event to PagerDuty.

    Args:
        routing_key: Integration routing key
        action: "trigger" or "resolve"
        summary: Human readable summary
        severity: "critical", "error" or "info"
        source: Monitored URL (optional)
        session: Session to post with (optional)
        url: Events API endpoint
        timeout: Request timeout in seconds

    Returns:
        True if PagerDuty accepted the event (HTTP 202), False otherwise
    """
    http = session if session is not None else requests
    event = build_event(routing_key, action, summary, severity, source)

    try:
        response = http.post(
            url,
            json=event,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
    except requests.exceptions.RequestException as e:
        logger.error("Alert failed: %s", e)
        return False

    try:
        if response.status_code == 202:
            logger.info("Alert sent (%s)", action)
            return True

        logger.error(
            "Alert failed: status %d - %s", response.status_code, response.text[:500]
        )
        return False
    finally:
        response.close()


def describe_alert(action: str, summary: str, severity: str, source: str) -> str:
    """Format an alert for dry-run output."""
    return f"[dry-run] {action} severity={severity} source={source}: {summary}"
