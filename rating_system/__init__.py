"""Ratings, reviews and comments for arbitrary services."""

__version__ = "0.1.0"
