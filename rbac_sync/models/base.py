"""
SQLAlchemy declarative base.

This module defines the base configuration for SQLAlchemy models
using SQLAlchemy 2.0+ style with async support.
"""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass
