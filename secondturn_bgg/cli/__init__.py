"""
Command-line interface for the SecondTurn BGG package.

This module provides CLI commands for:
- Game search (full or lightweight)
- Game details
- Localized title suggestions per version
"""

from .main import main

__all__ = [
    "main",
]
