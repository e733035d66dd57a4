"""Tickdown: a single-timer countdown service that survives restarts."""

__version__ = "0.1.0"
