"""Command line interface for the device worker."""
