"""Merge open pull requests whose head branch matches a configured name."""

__version__ = "0.1.0"
