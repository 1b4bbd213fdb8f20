"""Persistence layer: SQLAlchemy models, dialect backends, repositories."""
