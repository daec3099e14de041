"""
SQLite-backed result store for eval runs, samples and annotations.
"""

from __future__ import annotations

import json
import re
import sqlite3
import uuid
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, TypeAlias, cast

from assay_core.errors import IntegrityViolationError, RecordNotFoundError, SearchQueryError
from assay_core.schemas import Annotation, EvalRun, Sample, utc_now

from .database import initialize_database, session


ConfigInput: TypeAlias = Mapping[str, object] | str | None

_SECRET_TOKENS = ("api_key", "apikey", "token", "secret")


def _looks_like_secret(key: str) -> bool:
    lowered = key.lower()
    return any(token in lowered for token in _SECRET_TOKENS)


def _sanitize_value(value: object) -> object:
    if isinstance(value, Mapping):
        return _sanitize_mapping(cast(Mapping[str, object], value))
    if isinstance(value, (list, tuple)):
        return [_sanitize_value(item) for item in cast(Sequence[object], value)]
    return value


def _sanitize_mapping(mapping: Mapping[str, object]) -> dict[str, object]:
    sanitized: dict[str, object] = {}
    for key, value in mapping.items():
        if not _looks_like_secret(key):
            sanitized[key] = _sanitize_value(value)
    return sanitized


def _redact_string_config(config: str) -> str:
    try:
        parsed = json.loads(config)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, (dict, list)):
        return json.dumps(_sanitize_value(parsed), sort_keys=True, default=str)

    redacted = config
    for token in _SECRET_TOKENS:
        pattern = re.compile(rf'("[^"]*{token}[^"]*"\s*:\s*)"[^"]*"', re.IGNORECASE)
        redacted = pattern.sub(r'\1"<redacted>"', redacted)
    if redacted == config and any(token in config.lower() for token in _SECRET_TOKENS):
        return "<redacted>"
    return redacted


def _prepare_config_json(config: ConfigInput) -> str:
    if config is None:
        return "{}"
    if isinstance(config, str):
        return _redact_string_config(config)
    return json.dumps(_sanitize_mapping(config), sort_keys=True, default=str)


def _optional_json(value: object) -> str | None:
    if value is None:
        return None
    return json.dumps(value, default=str)


def _new_id() -> str:
    return str(uuid.uuid4())


class ResultStore:
    """Write and query access to a project's ``assay.db``.

    Every call opens its own connection; nothing is cached between calls.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path: str = str(db_path)
        initialize_database(self.db_path)

    # Runs

    def create_run(
        self,
        project_id: str,
        eval_id: str,
        model_id: str,
        config: ConfigInput,
        run_id: str | None = None,
        status: str = "running",
    ) -> EvalRun:
        run = EvalRun(
            id=run_id or _new_id(),
            project_id=str(project_id),
            eval_id=eval_id,
            model_id=model_id,
            started_at=utc_now(),
            status=status,
            config_json=_prepare_config_json(config),
        )
        with session(self.db_path) as connection:
            try:
                _ = connection.execute(
                    """
                    INSERT INTO eval_runs (
                        id, project_id, eval_id, model_id, started_at, status, config_json
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        run.id,
                        run.project_id,
                        run.eval_id,
                        run.model_id,
                        run.started_at.isoformat(),
                        run.status,
                        run.config_json,
                    ),
                )
            except sqlite3.IntegrityError as exc:
                raise IntegrityViolationError(f"Cannot create run {run.id}: {exc}") from exc
        return run

    def complete_run(
        self,
        run_id: str,
        status: str = "completed",
        metrics: Mapping[str, object] | None = None,
    ) -> EvalRun:
        """Close a run. The stored config snapshot is left untouched."""
        with session(self.db_path) as connection:
            cursor = connection.execute(
                """
                UPDATE eval_runs
                SET completed_at = ?, status = ?, metrics_json = ?
                WHERE id = ?
                """,
                (utc_now().isoformat(), status, _optional_json(metrics), run_id),
            )
            if cursor.rowcount == 0:
                raise RecordNotFoundError(f"Run not found: {run_id}")
        run = self.get_run(run_id)
        if run is None:
            raise RecordNotFoundError(f"Run not found: {run_id}")
        return run

    def get_run(self, run_id: str) -> EvalRun | None:
        with session(self.db_path) as connection:
            row = cast(
                sqlite3.Row | None,
                connection.execute("SELECT * FROM eval_runs WHERE id = ?", (run_id,)).fetchone(),
            )
        if row is None:
            return None
        return EvalRun.from_dict(dict(row))

    def list_runs(self, eval_id: str | None = None) -> list[EvalRun]:
        query = "SELECT * FROM eval_runs"
        params: tuple[object, ...] = ()
        if eval_id is not None:
            query += " WHERE eval_id = ?"
            params = (eval_id,)
        query += " ORDER BY started_at ASC"
        with session(self.db_path) as connection:
            rows = connection.execute(query, params).fetchall()
        return [EvalRun.from_dict(dict(cast(sqlite3.Row, row))) for row in rows]

    # Samples

    def add_sample(
        self,
        run_id: str,
        index_num: int,
        sample_input: Any,
        sample_id: str | None = None,
        status: str = "pending",
    ) -> Sample:
        sample = Sample(
            id=sample_id or _new_id(),
            run_id=run_id,
            index_num=index_num,
            input_json=json.dumps(sample_input, default=str),
            status=status,
        )
        with session(self.db_path) as connection:
            try:
                _ = connection.execute(
                    """
                    INSERT INTO samples (id, run_id, index_num, input_json, status)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (sample.id, sample.run_id, sample.index_num, sample.input_json, sample.status),
                )
            except sqlite3.IntegrityError as exc:
                raise IntegrityViolationError(
                    f"Cannot add sample {sample.id} to run {run_id}: {exc}"
                ) from exc
        return sample

    def record_sample_output(
        self,
        sample_id: str,
        output: Any,
        scores: Mapping[str, object] | None = None,
        trajectory: Any = None,
        status: str = "completed",
        latency_ms: int | None = None,
        tokens_input: int | None = None,
        tokens_output: int | None = None,
    ) -> Sample:
        with session(self.db_path) as connection:
            cursor = connection.execute(
                """
                UPDATE samples
                SET output_json = ?, scores_json = ?, trajectory_json = ?, status = ?,
                    latency_ms = ?, tokens_input = ?, tokens_output = ?
                WHERE id = ?
                """,
                (
                    _optional_json(output),
                    _optional_json(scores),
                    _optional_json(trajectory),
                    status,
                    latency_ms,
                    tokens_input,
                    tokens_output,
                    sample_id,
                ),
            )
            if cursor.rowcount == 0:
                raise RecordNotFoundError(f"Sample not found: {sample_id}")
            row = cast(
                sqlite3.Row,
                connection.execute("SELECT * FROM samples WHERE id = ?", (sample_id,)).fetchone(),
            )
        return Sample.from_dict(dict(row))

    def delete_sample(self, sample_id: str) -> None:
        with session(self.db_path) as connection:
            try:
                cursor = connection.execute("DELETE FROM samples WHERE id = ?", (sample_id,))
            except sqlite3.IntegrityError as exc:
                raise IntegrityViolationError(
                    f"Cannot delete sample {sample_id}: {exc}"
                ) from exc
            if cursor.rowcount == 0:
                raise RecordNotFoundError(f"Sample not found: {sample_id}")

    def list_samples(self, run_id: str) -> list[Sample]:
        with session(self.db_path) as connection:
            rows = connection.execute(
                "SELECT * FROM samples WHERE run_id = ? ORDER BY index_num ASC",
                (run_id,),
            ).fetchall()
        return [Sample.from_dict(dict(cast(sqlite3.Row, row))) for row in rows]

    def search_samples(self, query: str, limit: int = 20) -> list[Sample]:
        """Full-text search over sample input and output, best match first."""
        with session(self.db_path) as connection:
            try:
                rows = connection.execute(
                    """
                    SELECT s.*
                    FROM samples_fts
                    JOIN samples s ON s.rowid = samples_fts.rowid
                    WHERE samples_fts MATCH ?
                    ORDER BY bm25(samples_fts)
                    LIMIT ?
                    """,
                    (query, limit),
                ).fetchall()
            except sqlite3.OperationalError as exc:
                raise SearchQueryError(f"Invalid search query {query!r}: {exc}") from exc
        return [Sample.from_dict(dict(cast(sqlite3.Row, row))) for row in rows]

    # Annotations

    def add_annotation(
        self,
        sample_id: str,
        author: str,
        annotation_type: str,
        content: str,
    ) -> Annotation:
        annotation = Annotation(
            id=_new_id(),
            sample_id=sample_id,
            author=author,
            created_at=utc_now(),
            annotation_type=annotation_type,
            content=content,
        )
        with session(self.db_path) as connection:
            try:
                _ = connection.execute(
                    """
                    INSERT INTO annotations (
                        id, sample_id, author, created_at, annotation_type, content
                    )
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        annotation.id,
                        annotation.sample_id,
                        annotation.author,
                        annotation.created_at.isoformat(),
                        annotation.annotation_type,
                        annotation.content,
                    ),
                )
            except sqlite3.IntegrityError as exc:
                raise IntegrityViolationError(
                    f"Cannot annotate sample {sample_id}: {exc}"
                ) from exc
        return annotation

    def list_annotations(self, sample_id: str) -> list[Annotation]:
        with session(self.db_path) as connection:
            rows = connection.execute(
                "SELECT * FROM annotations WHERE sample_id = ? ORDER BY created_at ASC",
                (sample_id,),
            ).fetchall()
        return [Annotation.from_dict(dict(cast(sqlite3.Row, row))) for row in rows]
