"""Command-line interface for the Kaia wallet."""
