"""Command-line interface and prompt rendering."""
