"""Command line interface for litstage."""
