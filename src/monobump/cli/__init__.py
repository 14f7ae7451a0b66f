"""Command line interface for monobump."""
