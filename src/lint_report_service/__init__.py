"""Scored, diffed PDF reports for API lint results."""

__version__ = "0.1.0"
