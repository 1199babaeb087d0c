"""Command-line tools for nimauth."""
