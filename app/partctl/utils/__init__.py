"""Utility modules for partctl."""
