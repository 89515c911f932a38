"""Users module - actors and account status."""
