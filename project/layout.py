"""On-disk layout of an Assay project."""

from __future__ import annotations

from pathlib import Path

from assay_core.errors import DirectoryCreateError
from assay_core.schemas import DB_FILE, INTERNAL_DIR

MANIFEST_FILE = "Assay.toml"
PROJECT_DIRS = ("evals", "datasets", "results", "models", "plugins")


class ProjectLayout:
    """Resolves every path inside a project root."""

    def __init__(self, root: str | Path):
        self.root = Path(root).absolute()

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_FILE

    @property
    def internal_dir(self) -> Path:
        return self.root / INTERNAL_DIR

    @property
    def db_path(self) -> Path:
        return self.internal_dir / DB_FILE

    @property
    def evals_dir(self) -> Path:
        return self.root / "evals"

    def has_manifest(self) -> bool:
        return self.manifest_path.exists()

    def create_directory_structure(self) -> None:
        """Create the root, the standard subdirectories and the internal directory."""
        self._make_dir(self.root, "project")
        for name in PROJECT_DIRS:
            self._make_dir(self.root / name, name)
        self.ensure_internal_dir()

    def ensure_internal_dir(self) -> None:
        self._make_dir(self.internal_dir, "internal")

    def _make_dir(self, path: Path, label: str) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DirectoryCreateError(f"Failed to create {label} directory {path}: {exc}") from exc
