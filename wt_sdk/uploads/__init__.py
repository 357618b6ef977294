"""Chunked upload engine shared by transfers and boards."""
