"""Command-line interface package for the lint report tooling."""

from .app import build_parser, main, render_diff, render_summary, render_table, run

__all__ = [
    "build_parser",
    "main",
    "render_diff",
    "render_summary",
    "render_table",
    "run",
]
