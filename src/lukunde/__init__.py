"""Lukunde - school gradebook sheets with rules and shareable access codes."""

__version__ = "0.1.0"
