"""Shared utilities: errors, logging and URL helpers."""
