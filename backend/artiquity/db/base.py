"""SQLAlchemy Declarative Base — shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata
    - Primary keys are uuid4 text so seed rows can use readable ids

Design Decisions:
    - Separate file for Base: avoids circular imports between models
"""

import uuid

from sqlalchemy.orm import DeclarativeBase


def new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all Artiquity ORM models."""
    pass
