"""
Service layer for tfbump.

Contains the orchestration that ties domain objects to infrastructure:
- UpdateService: Scan files, fetch tag catalogs, plan and apply rewrites

Services are the primary API for commands to use.
"""

from .update_service import UpdateService, FileUpdate, ReferenceSummary, create_github_client

__all__ = [
    'UpdateService',
    'FileUpdate',
    'ReferenceSummary',
    'create_github_client',
]
