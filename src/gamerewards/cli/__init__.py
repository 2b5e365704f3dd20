"""Command line interface for the gaming rewards engine."""
