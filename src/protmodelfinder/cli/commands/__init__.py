"""Command implementations."""
