"""Resize, crop and upload variants of a source image."""

__version__ = "0.1.0"
