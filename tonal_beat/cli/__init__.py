"""Command-line interface for Tonal Beat."""

from .main import cli

__all__ = ["cli"]
