"""Command-line interface package for Tubetrack."""

from tubetrack.cli.main import CLIApplication, create_app

__all__ = ["CLIApplication", "create_app"]
