"""Liveness agent — records its own health calls and probes manager services."""

__version__ = "0.1.0"
