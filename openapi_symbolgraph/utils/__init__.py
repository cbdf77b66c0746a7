"""
Utility modules for OpenAPI Symbol Graph.
"""
