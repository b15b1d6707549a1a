"""
Scripts Module

Command line tools for syncing roles and permissions:
- Import documents into the database
- Export the database to documents
- Table creation
"""
