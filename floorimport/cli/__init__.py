"""Command line interface (``python -m floorimport.cli``)."""

from .main import main

__all__ = ["main"]
