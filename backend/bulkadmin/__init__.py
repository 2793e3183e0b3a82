"""Session lifecycle core for the bulk SMS admin dashboard."""

__version__ = "0.1.0"
