"""Project create, open and list operations."""

from __future__ import annotations

import logging
from pathlib import Path

from assay_core.errors import (
    AlreadyInitializedError,
    AssayError,
    EnumerationError,
    FailurePolicy,
    NameRequiredError,
)
from assay_core.schemas import ProjectInfo
from store.database import initialize_database

from .layout import ProjectLayout
from .manifest import new_manifest, read_manifest, write_manifest

logger = logging.getLogger(__name__)


def create_project(root_path: str | Path, name: str) -> ProjectInfo:
    """Initialize a new project at ``root_path``.

    Creates the directory tree, writes ``Assay.toml`` and initializes the
    result store. Work done before a failing step is not rolled back.

    Raises:
        NameRequiredError: If ``name`` is blank
        AlreadyInitializedError: If a manifest already exists
        DirectoryCreateError: If a directory cannot be created
        ManifestWriteError: If the manifest cannot be written
        StoreOpenError, SchemaApplyError: If store initialization fails
    """
    if not name.strip():
        raise NameRequiredError("Project name is required")

    layout = ProjectLayout(root_path)
    if layout.has_manifest():
        raise AlreadyInitializedError(f"Assay.toml already exists in {layout.root}")

    layout.create_directory_structure()
    manifest = new_manifest(name)
    write_manifest(manifest, layout.manifest_path)

    info = ProjectInfo.from_manifest(manifest, layout.root)
    initialize_database(info.db_path)
    logger.info(f"Created project '{info.name}' ({info.id}) at {info.path}")
    return info


def open_project(path: str | Path, initialize_store: bool = True) -> ProjectInfo:
    """Open an existing project, re-creating its internal directory if needed.

    Raises:
        ManifestUnreadableError: If ``Assay.toml`` cannot be read
        ManifestMalformedError: If ``Assay.toml`` is invalid
    """
    layout = ProjectLayout(path)
    manifest = read_manifest(layout.manifest_path)
    layout.ensure_internal_dir()

    info = ProjectInfo.from_manifest(manifest, layout.root)
    if initialize_store:
        initialize_database(info.db_path)
    logger.debug(f"Opened project '{info.name}' at {info.path}")
    return info


def list_projects(
    root: str | Path,
    policy: FailurePolicy = FailurePolicy.SKIP_AND_CONTINUE,
) -> list[ProjectInfo]:
    """List the projects found in the immediate subdirectories of ``root``.

    Directories without a manifest and symlinks are ignored. Under the default
    skip-and-continue policy a project that fails to open is logged and
    left out; under fail-fast its error propagates.

    Returns:
        Projects sorted by creation time, oldest first
    """
    root_path = Path(root)
    try:
        entries = list(root_path.iterdir())
    except OSError as exc:
        raise EnumerationError(f"Failed to read directory {root_path}: {exc}") from exc

    projects: list[ProjectInfo] = []
    for entry in entries:
        if entry.is_symlink() or not entry.is_dir():
            continue
        if not ProjectLayout(entry).has_manifest():
            continue
        try:
            projects.append(open_project(entry, initialize_store=False))
        except AssayError as e:
            if policy is FailurePolicy.FAIL_FAST:
                raise
            logger.warning(f"Skipping project {entry.name}: {e}")

    projects.sort(key=lambda p: p.created_at)
    return projects
