from __future__ import annotations

from datetime import datetime, timezone
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field, StringConstraints, computed_field, field_validator


INTERNAL_DIR = ".assay"
DB_FILE = "assay.db"


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


TBaseSchema = TypeVar("TBaseSchema", bound="BaseSchema")


class BaseSchema(BaseModel):
    def to_json(self) -> str:
        return self.model_dump_json()

    def to_dict(self) -> dict[str, object]:
        return self.model_dump()

    @classmethod
    def from_json(cls: type[TBaseSchema], data: str) -> TBaseSchema:
        return cls.model_validate_json(data)

    @classmethod
    def from_dict(cls: type[TBaseSchema], data: Mapping[str, object]) -> TBaseSchema:
        return cls.model_validate(data)


class ProjectManifest(BaseSchema):
    id: UUID
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    created_at: datetime
    version: str

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: datetime) -> datetime:
        return _ensure_utc(value)

    def to_toml_dict(self) -> dict[str, str]:
        """Flatten to the string fields written into ``Assay.toml``."""
        return {
            "id": str(self.id),
            "name": self.name,
            "created_at": self.created_at.isoformat().replace("+00:00", "Z"),
            "version": self.version,
        }


class ProjectInfo(BaseSchema):
    id: UUID
    name: str
    path: str
    created_at: datetime
    version: str

    @field_validator("created_at")
    @classmethod
    def created_at_utc(cls, value: datetime) -> datetime:
        return _ensure_utc(value)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def db_path(self) -> str:
        return str(Path(self.path) / INTERNAL_DIR / DB_FILE)

    @classmethod
    def from_manifest(cls, manifest: ProjectManifest, path: str | Path) -> "ProjectInfo":
        return cls(
            id=manifest.id,
            name=manifest.name,
            path=str(path),
            created_at=manifest.created_at,
            version=manifest.version,
        )


class EvalRun(BaseSchema):
    id: str
    project_id: str
    eval_id: str
    model_id: str
    started_at: datetime
    completed_at: datetime | None = None
    status: str
    config_json: str
    metrics_json: str | None = None


class Sample(BaseSchema):
    id: str
    run_id: str
    index_num: int = Field(ge=0)
    input_json: str
    output_json: str | None = None
    scores_json: str | None = None
    trajectory_json: str | None = None
    status: str
    latency_ms: int | None = None
    tokens_input: int | None = None
    tokens_output: int | None = None


class Annotation(BaseSchema):
    id: str
    sample_id: str
    author: str
    created_at: datetime
    annotation_type: str
    content: str
