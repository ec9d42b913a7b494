"""Command-line interface module for the XML to JSON transcoder."""

from .main import main

__all__ = ["main"]
