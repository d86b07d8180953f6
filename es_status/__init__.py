"""Simple Elasticsearch status checks for the terminal."""

__version__ = "0.1.0"
