"""
Log monitoring for the Factorio bridge.

Tails the Factorio console log and publishes parsed game events.
"""

from .monitor import LogMonitor
from .parser import LogParser

__all__ = [
    "LogMonitor",
    "LogParser",
]
