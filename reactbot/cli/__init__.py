"""CLI module for reactbot."""
