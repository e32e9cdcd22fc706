"""
Core utilities shared across the blog persistence service.

This package hosts:
- configuration helpers (env vars, content root, registry/articles paths)
- the error types raised by stores and services
- logging setup and the atomic-write / path-containment helpers

Stores and services depend on these primitives instead of importing FastAPI.
"""
