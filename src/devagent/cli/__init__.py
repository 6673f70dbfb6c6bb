"""Command-line interface for DevAgent."""
