"""
Database Base Definition
========================

Defines the SQLAlchemy Declarative Base.

All ORM models must inherit from this Base. Models are imported by
``app.models`` so that Alembic and test fixtures see the full metadata.
"""

from sqlalchemy.orm import declarative_base

# Base class for all database models
Base = declarative_base()
