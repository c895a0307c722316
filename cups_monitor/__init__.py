"""CUPS monitor - health watchdog for the local print service."""

__version__ = "0.1.0"
