"""
Store Module

Run, sample and annotation persistence for an Assay project.

This module provides:
- Versioned, idempotent SQLite schema migrations
- An FTS5 search index kept in sync with samples by triggers
- A result store for recording runs, samples and annotations
- Full-text search over sample input and output
"""

__version__ = "0.1.0"

from .database import initialize_database, schema_version
from .repository import ResultStore

__all__ = ["ResultStore", "initialize_database", "schema_version"]
