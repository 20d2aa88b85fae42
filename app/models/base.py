"""
SQLAlchemy Declarative Base and shared mixins
"""

from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative Base shared by every domain model
    """

    pass


class CreatedAtMixin:
    """
    Row creation timestamp
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class IntegerIDMixin:
    """
    Autoincrement integer primary key
    """

    id: Mapped[int] = mapped_column(
        primary_key=True,
        autoincrement=True,
    )
