"""
RBAC sync: two-way sync between the roles and permissions stored in a
database and declarative YAML documents.
"""

__version__ = "0.1.0"
