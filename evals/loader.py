"""Loading evaluation definitions from a project's ``evals`` directory."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from assay_core.errors import AssayError, EnumerationError, FailurePolicy, ParseError, ReadError

from .definition import EvalDefinition, EvalSummary

logger = logging.getLogger(__name__)

EVAL_EXTENSIONS = ("yaml", "yml")

_YAML11_ONLY_TAGS = ("tag:yaml.org,2002:bool", "tag:yaml.org,2002:timestamp")


class DefinitionLoader(yaml.SafeLoader):
    """SafeLoader with YAML 1.2 core scalars.

    Dates and yes/no/on/off stay strings; only true/false are booleans.
    """


DefinitionLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _YAML11_ONLY_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
DefinitionLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def load_eval_file(path: str | Path) -> EvalDefinition:
    """Load an evaluation definition from a YAML file.

    Args:
        path: Path to the definition document

    Returns:
        EvalDefinition instance

    Raises:
        ReadError: If the file cannot be read
        ParseError: If the YAML is invalid or does not describe an eval
    """
    path = Path(path)
    try:
        contents = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ReadError(f"Read error {path}: {exc}") from exc

    try:
        data = yaml.load(contents, Loader=DefinitionLoader)
    except yaml.YAMLError as exc:
        raise ParseError(f"YAML error {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ParseError(f"YAML error {path}: expected a mapping at the top level")

    try:
        return EvalDefinition.from_dict(data)
    except ValidationError as exc:
        raise ParseError(f"YAML error {path}: {exc}") from exc


def dump_eval_definition(definition: EvalDefinition) -> str:
    """Render a definition back to YAML, keeping field and scorer key order."""
    return yaml.safe_dump(
        definition.to_document(),
        default_flow_style=False,
        sort_keys=False,
        indent=2,
    )


def is_eval_file(path: Path) -> bool:
    # Suffix match is case-sensitive: "EVAL.YAML" is not picked up.
    return path.suffix[1:] in EVAL_EXTENSIONS


def list_eval_summaries(
    project_path: str | Path,
    policy: FailurePolicy = FailurePolicy.FAIL_FAST,
) -> list[EvalSummary]:
    """Summarize every definition under ``<project_path>/evals``.

    Under the default fail-fast policy the first definition that fails to
    load aborts the listing. A missing ``evals`` directory yields ``[]``.
    Symlinked entries are skipped.

    Returns:
        Summaries sorted by name, case-insensitively
    """
    evals_dir = Path(project_path) / "evals"
    if not evals_dir.exists():
        return []

    try:
        entries = list(evals_dir.iterdir())
    except OSError as exc:
        raise EnumerationError(f"Read evals dir error {evals_dir}: {exc}") from exc

    summaries: list[EvalSummary] = []
    for entry in entries:
        if entry.is_symlink() or not entry.is_file() or not is_eval_file(entry):
            continue
        try:
            definition = load_eval_file(entry)
        except AssayError as e:
            if policy is FailurePolicy.FAIL_FAST:
                raise
            logger.warning(f"Skipping eval definition {entry.name}: {e}")
            continue
        logger.debug(f"Loaded eval definition '{definition.id}' from {entry}")
        summaries.append(EvalSummary.from_definition(definition, str(entry)))

    summaries.sort(key=lambda s: s.name.lower())
    return summaries
