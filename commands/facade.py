"""Worker dispatch and result serialization for host requests."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel

from assay_core.schemas import ProjectInfo
from evals.definition import EvalSummary
from evals.loader import list_eval_summaries
from project.lifecycle import create_project, list_projects, open_project

T = TypeVar("T")


def serialize(result: BaseModel | Sequence[BaseModel]) -> Any:
    """Convert an operation result to JSON-compatible data."""
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    return [item.model_dump(mode="json") for item in result]


class CommandDispatcher:
    """Runs the blocking workspace operations on a worker pool.

    Each call is submitted independently and carries its own arguments;
    the dispatcher holds no per-project state.
    """

    def __init__(self, max_workers: int = 4) -> None:
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="assay")

    def __enter__(self) -> "CommandDispatcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def submit(self, fn: Callable[..., T], *args: Any) -> Future[T]:
        return self._pool.submit(fn, *args)

    def create_project(self, path: str | Path, name: str) -> Future[ProjectInfo]:
        return self.submit(create_project, path, name)

    def open_project(self, path: str | Path) -> Future[ProjectInfo]:
        return self.submit(open_project, path)

    def list_projects(self, root_path: str | Path) -> Future[list[ProjectInfo]]:
        return self.submit(list_projects, root_path)

    def list_evals(self, project_path: str | Path) -> Future[list[EvalSummary]]:
        return self.submit(list_eval_summaries, project_path)
