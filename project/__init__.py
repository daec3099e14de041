"""
Project Module

Lifecycle of filesystem-rooted Assay projects.

This module provides:
- Project creation with the standard directory layout and manifest
- Opening existing projects and initializing their result store
- Listing the projects under a common root
"""

__version__ = "0.1.0"

from .layout import MANIFEST_FILE, PROJECT_DIRS, ProjectLayout
from .lifecycle import create_project, list_projects, open_project

__all__ = [
    "MANIFEST_FILE",
    "PROJECT_DIRS",
    "ProjectLayout",
    "create_project",
    "list_projects",
    "open_project",
]
