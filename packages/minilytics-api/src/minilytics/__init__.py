"""Minilytics: privacy-friendly page-view analytics."""

__version__ = "0.1.0"
