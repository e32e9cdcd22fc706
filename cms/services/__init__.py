"""
High-level use cases for the blog persistence service.

Each service module orchestrates the stores to implement the editor's
operations (save the registry, write/delete article files, composite upsert).

Routers call these services instead of touching the registry file or the
articles directory directly.
"""
