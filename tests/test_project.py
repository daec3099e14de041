"""Tests for project creation, opening and listing."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from uuid import uuid4

import pytest
import tomli_w

from assay_core.errors import (
    AlreadyInitializedError,
    DirectoryCreateError,
    EnumerationError,
    FailurePolicy,
    ManifestMalformedError,
    ManifestUnreadableError,
    NameRequiredError,
)
from evals.loader import list_eval_summaries
from project.layout import MANIFEST_FILE, PROJECT_DIRS, ProjectLayout
from project.lifecycle import create_project, list_projects, open_project
from store.database import schema_version


def _write_manifest(root: Path, created_at: str, name: str = "Project") -> None:
    root.mkdir(parents=True, exist_ok=True)
    with open(root / MANIFEST_FILE, "wb") as f:
        tomli_w.dump(
            {"id": str(uuid4()), "name": name, "created_at": created_at, "version": "0.1.0"},
            f,
        )


class TestCreateProject:
    @pytest.mark.parametrize("name", ["", " ", "\t\n", "   "])
    def test_blank_name_is_rejected(self, tmp_path: Path, name: str) -> None:
        with pytest.raises(NameRequiredError):
            create_project(tmp_path / "proj", name)

        assert not (tmp_path / "proj").exists()

    def test_blank_name_checked_before_path(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file.txt"
        blocker.write_text("not a directory")

        with pytest.raises(NameRequiredError):
            create_project(blocker / "proj", "  ")

    def test_creates_layout_manifest_and_store(self, tmp_path: Path) -> None:
        root = tmp_path / "x"

        info = create_project(root, "  Demo  ")

        assert info.name == "Demo"
        assert info.version == "0.1.0"
        assert info.path == str(root)
        assert info.db_path == str(root / ".assay" / "assay.db")
        for name in PROJECT_DIRS:
            assert (root / name).is_dir()
        assert Path(info.db_path).exists()
        assert schema_version(info.db_path) > 0

        with open(root / MANIFEST_FILE, "rb") as f:
            manifest = tomllib.load(f)
        assert set(manifest) == {"id", "name", "created_at", "version"}
        assert manifest["id"] == str(info.id)
        assert manifest["name"] == "Demo"
        assert "db_path" not in manifest

    def test_fresh_project_has_no_evals(self, tmp_path: Path) -> None:
        info = create_project(tmp_path / "x", "Demo")

        assert list_eval_summaries(info.path) == []

    def test_second_create_fails(self, tmp_path: Path) -> None:
        root = tmp_path / "proj"
        first = create_project(root, "Demo")

        with pytest.raises(AlreadyInitializedError):
            create_project(root, "Other")

        assert open_project(root).id == first.id

    def test_existing_directory_without_manifest_is_adopted(self, tmp_path: Path) -> None:
        root = tmp_path / "proj"
        (root / "evals").mkdir(parents=True)
        (root / "evals" / "keep.txt").write_text("keep")

        info = create_project(root, "Demo")

        assert info.name == "Demo"
        assert (root / "evals" / "keep.txt").read_text() == "keep"

    def test_directory_failure_is_reported(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file.txt"
        blocker.write_text("not a directory")

        with pytest.raises(DirectoryCreateError):
            create_project(blocker / "proj", "Demo")

    def test_relative_path_is_made_absolute(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)

        info = create_project("rel", "Demo")

        assert Path(info.path).is_absolute()
        assert info.path == str(Path.cwd() / "rel")


class TestOpenProject:
    def test_round_trip(self, tmp_path: Path) -> None:
        created = create_project(tmp_path / "proj", "Demo")

        opened = open_project(created.path)

        assert opened.id == created.id
        assert opened.name == created.name
        assert opened.version == created.version
        assert opened.created_at == created.created_at
        assert opened.db_path == created.db_path

    def test_recreates_internal_directory(self, tmp_path: Path) -> None:
        created = create_project(tmp_path / "proj", "Demo")
        db_path = Path(created.db_path)
        db_path.unlink()
        db_path.parent.rmdir()

        opened = open_project(created.path)

        assert Path(opened.db_path).exists()

    def test_is_repeatable(self, tmp_path: Path) -> None:
        created = create_project(tmp_path / "proj", "Demo")

        for _ in range(3):
            assert open_project(created.path).id == created.id

    def test_without_store_initialization(self, tmp_path: Path) -> None:
        root = tmp_path / "proj"
        _write_manifest(root, "2026-01-01T00:00:00Z")

        info = open_project(root, initialize_store=False)

        assert ProjectLayout(root).internal_dir.is_dir()
        assert not Path(info.db_path).exists()

    def test_missing_manifest(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestUnreadableError):
            open_project(tmp_path)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / MANIFEST_FILE).write_text("id = [unclosed")

        with pytest.raises(ManifestMalformedError):
            open_project(tmp_path)

    def test_missing_fields(self, tmp_path: Path) -> None:
        (tmp_path / MANIFEST_FILE).write_text('name = "Demo"\n')

        with pytest.raises(ManifestMalformedError):
            open_project(tmp_path)

    def test_invalid_id(self, tmp_path: Path) -> None:
        (tmp_path / MANIFEST_FILE).write_text(
            'id = "not-a-uuid"\nname = "Demo"\n'
            'created_at = "2026-01-01T00:00:00Z"\nversion = "0.1.0"\n'
        )

        with pytest.raises(ManifestMalformedError):
            open_project(tmp_path)

    def test_blank_manifest_name(self, tmp_path: Path) -> None:
        _write_manifest(tmp_path, "2026-01-01T00:00:00Z", name="   ")

        with pytest.raises(ManifestMalformedError):
            open_project(tmp_path)

    def test_manifest_name_is_trimmed(self, tmp_path: Path) -> None:
        _write_manifest(tmp_path, "2026-01-01T00:00:00Z", name="  Demo  ")

        assert open_project(tmp_path).name == "Demo"


class TestListProjects:
    def test_empty_root(self, tmp_path: Path) -> None:
        assert list_projects(tmp_path) == []

    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(EnumerationError):
            list_projects(tmp_path / "missing")

    def test_sorted_by_creation_time(self, tmp_path: Path) -> None:
        _write_manifest(tmp_path / "b", "2026-03-01T00:00:00Z", name="March")
        _write_manifest(tmp_path / "a", "2026-05-01T00:00:00Z", name="May")
        _write_manifest(tmp_path / "c", "2026-01-01T00:00:00Z", name="January")

        projects = list_projects(tmp_path)

        assert [p.name for p in projects] == ["January", "March", "May"]
        created = [p.created_at for p in projects]
        assert created == sorted(created)

    def test_lists_created_projects(self, tmp_path: Path) -> None:
        ids = {create_project(tmp_path / f"proj-{i}", f"Project {i}").id for i in range(3)}

        projects = list_projects(tmp_path)

        assert {p.id for p in projects} == ids

    def test_skips_non_projects(self, tmp_path: Path) -> None:
        _write_manifest(tmp_path / "good", "2026-01-01T00:00:00Z", name="Good")
        (tmp_path / "plain-dir").mkdir()
        (tmp_path / "stray.txt").write_text("hello")

        projects = list_projects(tmp_path)

        assert [p.name for p in projects] == ["Good"]

    def test_symlinked_project_is_skipped(self, tmp_path: Path) -> None:
        root = tmp_path / "root"
        _write_manifest(root / "good", "2026-01-01T00:00:00Z", name="Good")
        _write_manifest(tmp_path / "outside", "2026-02-01T00:00:00Z", name="Outside")
        (root / "linked").symlink_to(tmp_path / "outside", target_is_directory=True)

        projects = list_projects(root)

        assert [p.name for p in projects] == ["Good"]

    def test_does_not_create_stores(self, tmp_path: Path) -> None:
        _write_manifest(tmp_path / "good", "2026-01-01T00:00:00Z")

        projects = list_projects(tmp_path)

        assert not Path(projects[0].db_path).exists()

    def test_skip_and_continue_is_default(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        _write_manifest(tmp_path / "good", "2026-01-01T00:00:00Z", name="Good")
        (tmp_path / "broken").mkdir()
        (tmp_path / "broken" / MANIFEST_FILE).write_text("this is = = not toml")

        with caplog.at_level(logging.WARNING, logger="project.lifecycle"):
            projects = list_projects(tmp_path)

        assert [p.name for p in projects] == ["Good"]
        assert "broken" in caplog.text

    def test_fail_fast_policy(self, tmp_path: Path) -> None:
        _write_manifest(tmp_path / "good", "2026-01-01T00:00:00Z")
        (tmp_path / "broken").mkdir()
        (tmp_path / "broken" / MANIFEST_FILE).write_text("this is = = not toml")

        with pytest.raises(ManifestMalformedError):
            list_projects(tmp_path, policy=FailurePolicy.FAIL_FAST)
