"""
Assay Core Module

Shared record types and error kinds for the Assay evaluation workspace.

This module provides:
- Pydantic schemas for project manifests, runs, samples and annotations
- The error hierarchy raised by the project, store and eval layers
- Named failure policies for directory listings
"""

__version__ = "0.1.0"

from .errors import (
    AlreadyInitializedError,
    AssayError,
    DirectoryCreateError,
    EnumerationError,
    FailurePolicy,
    IntegrityViolationError,
    ManifestMalformedError,
    ManifestUnreadableError,
    ManifestWriteError,
    NameRequiredError,
    ParseError,
    ReadError,
    RecordNotFoundError,
    SchemaApplyError,
    SearchQueryError,
    StoreOpenError,
)

__all__ = [
    "AlreadyInitializedError",
    "AssayError",
    "DirectoryCreateError",
    "EnumerationError",
    "FailurePolicy",
    "IntegrityViolationError",
    "ManifestMalformedError",
    "ManifestUnreadableError",
    "ManifestWriteError",
    "NameRequiredError",
    "ParseError",
    "ReadError",
    "RecordNotFoundError",
    "SchemaApplyError",
    "SearchQueryError",
    "StoreOpenError",
]
