"""
Evals Module

Declarative evaluation definitions stored in a project's ``evals`` directory.

This module provides:
- Pydantic models for dataset, solver, scorer and execution blocks
- Explicit single/multiple model references resolved from untagged YAML
- Scorer entries that keep every unmodeled key in order
- Loading, dumping and listing of YAML definition files
"""

__version__ = "0.1.0"

from .definition import (
    DatasetConfig,
    EvalDefinition,
    EvalSummary,
    ExecutionConfig,
    ModelRef,
    MultipleModels,
    ScorerConfig,
    SingleModel,
    SolverConfig,
    parse_model_ref,
)
from .loader import dump_eval_definition, list_eval_summaries, load_eval_file

__all__ = [
    "DatasetConfig",
    "EvalDefinition",
    "EvalSummary",
    "ExecutionConfig",
    "ModelRef",
    "MultipleModels",
    "ScorerConfig",
    "SingleModel",
    "SolverConfig",
    "dump_eval_definition",
    "list_eval_summaries",
    "load_eval_file",
    "parse_model_ref",
]
