"""Relay between a Factorio server (log file + RCON) and a Telegram chat."""

__version__ = "0.1.0"
