"""
Commands Module

Host-facing surface for the Assay workspace.

This module provides:
- YAML/env settings for the command layer
- A worker-pool dispatcher for the blocking project and eval operations
- A Typer CLI printing JSON results
"""

__version__ = "0.1.0"
