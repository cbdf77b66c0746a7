"""
Catalog modules for OpenAPI Symbol Graph.

This package renders Markdown pages and writes documentation catalog
directories.
"""
