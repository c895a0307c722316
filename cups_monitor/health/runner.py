"""
Health runner - Orchestrates checks, state transitions and alerts.

The monitor is a two-state machine (healthy/unhealthy) starting healthy.
An alert is sent only when a check result moves it to the other state.
The state is owned by ``run_monitor`` and passed through each tick.
"""

import logging
import threading
import time
from typing import Callable, Optional, Tuple

import requests

from cups_monitor.health import checks, notify
from cups_monitor.health.config import MonitorConfig

logger = logging.getLogger(__name__)


def decide_action(is_healthy: bool, result: checks.HealthResult) -> Optional[str]:
    """
    Decide which alert a check result calls for.

    Args:
        is_healthy: State before the check
        result: Check outcome

    Returns:
        "trigger", "resolve", or None when the state does not change
    """
    if is_healthy and not result.healthy:
        return notify.ACTION_TRIGGER
    if not is_healthy and result.healthy:
        return notify.ACTION_RESOLVE
    return None


def run_tick(
    is_healthy: bool,
    config: MonitorConfig,
    session: Optional[requests.Session] = None,
    dry_run: bool = False,
) -> bool:
    """
    Run one check and alert on a state change.

    Args:
        is_healthy: State before the check
        config: Monitor configuration
        session: HTTP session shared by checker and dispatcher (optional)
        dry_run: If True, log the alert instead of sending it

    Returns:
        State after the check. Alert delivery never affects it.
    """
    result = checks.check_cups(
        config.cups_url, timeout=config.timeout_seconds, session=session
    )
    action = decide_action(is_healthy, result)

    if action is None:
        logger.debug("CUPS state unchanged (healthy=%s)", result.healthy)
        return result.healthy

    if action == notify.ACTION_TRIGGER:
        logger.warning("CUPS down: %s", result.message)
        summary = result.message or checks.MESSAGE_DOWN
        severity = result.severity or checks.SEVERITY_CRITICAL
    else:
        logger.info("CUPS recovered")
        summary = notify.RESOLVE_SUMMARY
        severity = notify.RESOLVE_SEVERITY

    if dry_run:
        logger.info(
            "%s", notify.describe_alert(action, summary, severity, config.cups_url)
        )
    else:
        notify.send_alert(
            config.routing_key,
            action,
            summary,
            severity,
            source=config.cups_url,
            session=session,
            url=config.events_url,
            timeout=config.timeout_seconds,
        )

    return result.healthy


def next_deadline(deadline: float, now: float, interval: float) -> Tuple[float, int]:
    """
    Advance a tick deadline, skipping ticks that already passed.

    Args:
        deadline: Deadline of the tick that just ran
        now: Current clock reading
        interval: Seconds between ticks

    Returns:
        Tuple of (next_deadline, skipped_ticks)
    """
    deadline += interval
    if deadline > now:
        return deadline, 0
    skipped = int((now - deadline) // interval) + 1
    return deadline + skipped * interval, skipped


def run_monitor(
    config: MonitorConfig,
    stop_event: threading.Event,
    session: Optional[requests.Session] = None,
    dry_run: bool = False,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """
    Check CUPS on a fixed schedule until ``stop_event`` is set.

    The first check runs one interval after start. Ticks that fall due while
    a check is still running are skipped, so checks never overlap.

    Args:
        config: Monitor configuration
        stop_event: Set to stop the loop between ticks
        session: HTTP session shared by checker and dispatcher (optional)
        dry_run: If True, log alerts instead of sending them
        clock: Monotonic clock

    Returns:
        Last known health state
    """
    is_healthy = True
    interval = config.interval_seconds
    deadline = clock() + interval

    logger.info("Monitoring %s every %ss", config.cups_url, interval)

    while not stop_event.wait(max(0.0, deadline - clock())):
        try:
            is_healthy = run_tick(is_healthy, config, session=session, dry_run=dry_run)
        except Exception as e:
            logger.error("Health check tick failed: %s", e, exc_info=True)

        deadline, skipped = next_deadline(deadline, clock(), interval)
        if skipped:
            logger.warning("Check overran the interval, skipped %d tick(s)", skipped)

    return is_healthy
