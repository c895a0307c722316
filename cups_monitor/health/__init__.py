"""
Health module - CUPS watchdog with PagerDuty alerting.

This module probes the CUPS HTTP endpoint on a fixed interval and opens or
resolves a PagerDuty incident when the service changes state.
"""

from cups_monitor.health.config import ConfigError, MonitorConfig, load_config
from cups_monitor.health.runner import run_monitor, run_tick

__all__ = ["ConfigError", "MonitorConfig", "load_config", "run_monitor", "run_tick"]
