"""
Command-line interface for singgen.
"""

from singgen.cli.main import app

__all__ = ["app"]
