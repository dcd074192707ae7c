"""Command line interface for flowslice."""
