"""Offices module - tenants, memberships and office management."""
