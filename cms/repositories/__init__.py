"""
Persistence adapters.

These modules encapsulate how the registry file and the per-language article
files are stored on disk. Services depend on these stores rather than touching
the filesystem directly.
"""
