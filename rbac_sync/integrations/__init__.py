"""
Integrations package for external storage.

This package contains the filesystem layout of the YAML documents.
"""

from rbac_sync.integrations.document_store import DocumentStore

__all__ = [
    "DocumentStore",
]
