"""Command-line interface for jah."""

from .main import main

__all__ = ["main"]
