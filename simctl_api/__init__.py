"""Simulator control service driving ``xcrun simctl``."""

__version__ = "0.1.0"
