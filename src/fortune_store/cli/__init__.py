"""Command-line tools for Fortune Store."""
