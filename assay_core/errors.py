"""Error kinds raised by the Assay workspace layers."""

from __future__ import annotations

from enum import Enum


class FailurePolicy(str, Enum):
    """How a directory listing reacts to an entry that fails to load."""

    SKIP_AND_CONTINUE = "skip-and-continue"
    FAIL_FAST = "fail-fast"


class AssayError(Exception):
    """Base class for every failure reported by the workspace core."""


class NameRequiredError(AssayError, ValueError):
    """Raised when a project name is empty after trimming."""


class AlreadyInitializedError(AssayError, FileExistsError):
    """Raised when a project manifest already exists at the target root."""


class ManifestUnreadableError(AssayError, OSError):
    """Raised when the project manifest cannot be read from disk."""


class ManifestMalformedError(AssayError, ValueError):
    """Raised when the project manifest is not a valid manifest document."""


class ManifestWriteError(AssayError, OSError):
    """Raised when a new project manifest cannot be written."""


class DirectoryCreateError(AssayError, OSError):
    """Raised when a project or store directory cannot be created."""


class StoreOpenError(AssayError):
    """Raised when the SQLite store file cannot be opened."""


class SchemaApplyError(AssayError):
    """Raised when a schema migration fails to apply."""


class ReadError(AssayError, OSError):
    """Raised when an eval definition file cannot be read."""


class ParseError(AssayError, ValueError):
    """Raised when an eval definition is not valid YAML or has the wrong shape."""


class EnumerationError(AssayError, OSError):
    """Raised when a directory cannot be listed."""


class RecordNotFoundError(AssayError, KeyError):
    """Raised when a run, sample or annotation id is unknown."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class IntegrityViolationError(AssayError, ValueError):
    """Raised when a write breaks a foreign key or uniqueness constraint."""


class SearchQueryError(AssayError, ValueError):
    """Raised when a full-text query cannot be parsed by SQLite."""
