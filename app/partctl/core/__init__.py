"""Configuration and file I/O for partctl."""
