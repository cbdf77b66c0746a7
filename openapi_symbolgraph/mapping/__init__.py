"""
Mapping modules for OpenAPI Symbol Graph.

This package maps schema nodes to canonical types, creates symbols, and
assembles the full symbol graph from a normalized document.
"""
