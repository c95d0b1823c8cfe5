"""
AOI CLI - Command-line access to the polygon store.

Draw, list, render and search areas-of-interest without a map UI.
"""

from .cli import main

__all__ = ['main']
