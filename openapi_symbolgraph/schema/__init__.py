"""
Schema definition modules for OpenAPI Symbol Graph.

This package contains the internal document model (tagged schema-node
variants), the adapter that normalizes raw parsed documents into it, and the
symbol graph model with its consistency validator.
"""
