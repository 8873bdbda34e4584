"""Shared helpers: logging setup, env flags, exception hierarchy."""
