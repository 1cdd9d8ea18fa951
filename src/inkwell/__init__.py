"""Inkwell - content resolution and build pipeline for markdown blogs."""

__version__ = "0.1.0"
