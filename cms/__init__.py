"""Persistence service for a multi-language static blog."""
