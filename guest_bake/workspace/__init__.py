"""Workspace discovery module.

This module handles:
- Resolving the Cargo workspace package graph via ``cargo metadata``
- Partitioning packages by the workspace selection flags
- Selecting the packages eligible for guest building
"""

from guest_bake.workspace.models import Package, Target, WorkspaceMetadata

__all__ = ["Package", "Target", "WorkspaceMetadata"]
