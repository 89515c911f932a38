"""Domain modules (users, offices)."""
