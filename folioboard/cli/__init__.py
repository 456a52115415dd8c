"""Command-line interface for folioboard."""
