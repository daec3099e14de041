"""
SQLite schema management for the project result store.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from assay_core.errors import DirectoryCreateError, SchemaApplyError, StoreOpenError
from assay_core.schemas import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    sql: str


CORE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS eval_runs (
  id TEXT PRIMARY KEY,
  project_id TEXT NOT NULL,
  eval_id TEXT NOT NULL,
  model_id TEXT NOT NULL,
  started_at DATETIME NOT NULL,
  completed_at DATETIME,
  status TEXT NOT NULL,
  config_json TEXT NOT NULL,
  metrics_json TEXT
);

CREATE TABLE IF NOT EXISTS samples (
  id TEXT PRIMARY KEY,
  run_id TEXT NOT NULL REFERENCES eval_runs(id),
  index_num INTEGER NOT NULL,
  input_json TEXT NOT NULL,
  output_json TEXT,
  scores_json TEXT,
  trajectory_json TEXT,
  status TEXT NOT NULL,
  latency_ms INTEGER,
  tokens_input INTEGER,
  tokens_output INTEGER
);

CREATE VIRTUAL TABLE IF NOT EXISTS samples_fts USING fts5(
  input_text,
  output_text,
  content='samples',
  content_rowid='rowid'
);

CREATE TABLE IF NOT EXISTS annotations (
  id TEXT PRIMARY KEY,
  sample_id TEXT NOT NULL REFERENCES samples(id),
  author TEXT NOT NULL,
  created_at DATETIME NOT NULL,
  annotation_type TEXT NOT NULL,
  content TEXT NOT NULL
);
"""

# samples has no input_text/output_text columns, so the external-content index
# is fed from the JSON columns. The 'delete' rows must repeat the exact values
# that were indexed.
FTS_SYNC_SQL = """
CREATE TRIGGER IF NOT EXISTS samples_fts_ai AFTER INSERT ON samples BEGIN
  INSERT INTO samples_fts(rowid, input_text, output_text)
  VALUES (new.rowid, new.input_json, COALESCE(new.output_json, ''));
END;

CREATE TRIGGER IF NOT EXISTS samples_fts_ad AFTER DELETE ON samples BEGIN
  INSERT INTO samples_fts(samples_fts, rowid, input_text, output_text)
  VALUES ('delete', old.rowid, old.input_json, COALESCE(old.output_json, ''));
END;

CREATE TRIGGER IF NOT EXISTS samples_fts_au AFTER UPDATE OF input_json, output_json ON samples BEGIN
  INSERT INTO samples_fts(samples_fts, rowid, input_text, output_text)
  VALUES ('delete', old.rowid, old.input_json, COALESCE(old.output_json, ''));
  INSERT INTO samples_fts(rowid, input_text, output_text)
  VALUES (new.rowid, new.input_json, COALESCE(new.output_json, ''));
END;
"""

LOOKUP_INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_samples_run ON samples(run_id, index_num);
CREATE INDEX IF NOT EXISTS idx_annotations_sample ON annotations(sample_id);
CREATE INDEX IF NOT EXISTS idx_runs_eval ON eval_runs(eval_id);
"""

MIGRATIONS: tuple[Migration, ...] = (
    Migration(1, "core_tables", CORE_TABLES_SQL),
    Migration(2, "samples_fts_sync", FTS_SYNC_SQL),
    Migration(3, "lookup_indexes", LOOKUP_INDEXES_SQL),
)

_VERSION_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  version INTEGER PRIMARY KEY,
  name TEXT NOT NULL,
  applied_at TEXT NOT NULL
);
"""


def _current_version(connection: sqlite3.Connection) -> int:
    row = connection.execute("SELECT MAX(version) FROM schema_migrations").fetchone()
    if row is None or row[0] is None:
        return 0
    return int(row[0])


def apply_migrations(
    connection: sqlite3.Connection,
    migrations: tuple[Migration, ...] = MIGRATIONS,
) -> list[int]:
    """Apply pending migrations in order and return the versions applied."""
    _ = connection.executescript(_VERSION_TABLE_SQL)
    current = _current_version(connection)
    applied: list[int] = []
    for migration in sorted(migrations, key=lambda m: m.version):
        if migration.version <= current:
            continue
        _ = connection.executescript(migration.sql)
        _ = connection.execute(
            "INSERT INTO schema_migrations (version, name, applied_at) VALUES (?, ?, ?)",
            (migration.version, migration.name, utc_now().isoformat()),
        )
        connection.commit()
        logger.info(f"Applied schema migration {migration.version} ({migration.name})")
        applied.append(migration.version)
    return applied


def initialize_database(db_path: str | Path) -> None:
    """Create the SQLite database and bring its schema up to date."""
    path = Path(db_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreateError(f"Failed to create db directory {path.parent}: {exc}") from exc

    try:
        connection = sqlite3.connect(str(path))
    except sqlite3.Error as exc:
        raise StoreOpenError(f"Failed to open database {path}: {exc}") from exc

    try:
        _ = connection.execute("PRAGMA foreign_keys = ON")
        _ = apply_migrations(connection)
    except sqlite3.DatabaseError as exc:
        if _is_open_failure(exc):
            raise StoreOpenError(f"Failed to open database {path}: {exc}") from exc
        raise SchemaApplyError(f"Migration error in {path}: {exc}") from exc
    finally:
        connection.close()


def _is_open_failure(exc: sqlite3.DatabaseError) -> bool:
    # sqlite3.connect is lazy; a non-database file only fails on first read.
    message = str(exc).lower()
    return "file is not a database" in message or "unable to open" in message


def connect(db_path: str | Path) -> sqlite3.Connection:
    """Open a SQLite connection with sane defaults."""
    connection = sqlite3.connect(str(db_path))
    connection.row_factory = sqlite3.Row
    _ = connection.execute("PRAGMA foreign_keys = ON")
    return connection


def schema_version(db_path: str | Path) -> int:
    """Return the highest migration version recorded in the store."""
    if not Path(db_path).exists():
        return 0
    connection = sqlite3.connect(str(db_path))
    try:
        exists = connection.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'schema_migrations'"
        ).fetchone()
        if exists is None:
            return 0
        return _current_version(connection)
    finally:
        connection.close()


@contextmanager
def session(db_path: str | Path) -> Iterator[sqlite3.Connection]:
    """Yield a connection that commits on success and is always closed."""
    connection = connect(db_path)
    try:
        with connection:
            yield connection
    finally:
        connection.close()
