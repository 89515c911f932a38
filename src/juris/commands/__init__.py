"""CLI commands for juris."""
