"""Longtail Scout - keyword collection, scoring and long-tail expansion."""

__version__ = '0.1.0'
