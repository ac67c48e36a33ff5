"""Command-line entry point for the broadcast launcher."""
