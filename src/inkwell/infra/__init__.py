"""Filesystem boundary: reading sources, writing artifacts, authoring helpers."""
