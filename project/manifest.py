"""Reading and writing the ``Assay.toml`` project manifest."""

from __future__ import annotations

import tomllib
import uuid
from pathlib import Path

import tomli_w
from pydantic import ValidationError

from assay_core.errors import (
    AlreadyInitializedError,
    ManifestMalformedError,
    ManifestUnreadableError,
    ManifestWriteError,
)
from assay_core.schemas import ProjectManifest, utc_now

INITIAL_VERSION = "0.1.0"


def new_manifest(name: str) -> ProjectManifest:
    return ProjectManifest(
        id=uuid.uuid4(),
        name=name.strip(),
        created_at=utc_now(),
        version=INITIAL_VERSION,
    )


def read_manifest(manifest_path: Path) -> ProjectManifest:
    """Load and validate a manifest file.

    Raises:
        ManifestUnreadableError: If the file cannot be read
        ManifestMalformedError: If it is not TOML or misses required fields
    """
    try:
        contents = manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestUnreadableError(f"Assay.toml error at {manifest_path}: {exc}") from exc

    try:
        data = tomllib.loads(contents)
        return ProjectManifest.from_dict(data)
    except (tomllib.TOMLDecodeError, ValidationError) as exc:
        raise ManifestMalformedError(f"Invalid Assay.toml at {manifest_path}: {exc}") from exc


def write_manifest(manifest: ProjectManifest, manifest_path: Path) -> None:
    """Write a new manifest; never overwrites an existing one."""
    try:
        with open(manifest_path, "xb") as f:
            tomli_w.dump(manifest.to_toml_dict(), f)
    except FileExistsError as exc:
        raise AlreadyInitializedError(f"Assay.toml already exists in {manifest_path.parent}") from exc
    except OSError as exc:
        raise ManifestWriteError(f"Failed to write Assay.toml: {exc}") from exc
