"""
Command-line interface for the buildconnector package.
"""

from .main import main_cli

__all__ = ["main_cli"]
