"""
CLI Commands for Kinetic.

Usage:
    flask retention run [--dry-run] [--limit N]   # Score members, send win-back emails
    flask retention score --member-id 1           # Recalculate one prediction
    flask retention stats                         # Campaign statistics
    flask retention seed-recipes                  # Load the default recipe catalog
"""
from .retention import init_app as init_retention_commands


def init_app(app):
    """Register all CLI commands with the Flask app."""
    init_retention_commands(app)
