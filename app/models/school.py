"""
ERD summary:
- School 1 - 0..1 SchoolEmbedding (school_embeddings.school_id, ON DELETE CASCADE)
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.sqlalchemy_types import PackedVector
from app.models.base import Base, CreatedAtMixin, IntegerIDMixin


class School(Base, IntegerIDMixin, CreatedAtMixin):
    """A registered school"""

    __tablename__ = "schools"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    contact: Mapped[str] = mapped_column(String(32), nullable=False)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    email_id: Mapped[str] = mapped_column(String(255), nullable=False)

    embedding: Mapped["SchoolEmbedding | None"] = relationship(
        "SchoolEmbedding",
        back_populates="school",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<School(id={self.id}, name={self.name}, city={self.city})>"


class SchoolEmbedding(Base):
    """Embedding vector for one school, upserted by school_id"""

    __tablename__ = "school_embeddings"

    school_id: Mapped[int] = mapped_column(
        ForeignKey("schools.id", ondelete="CASCADE"),
        primary_key=True,
    )
    embedding: Mapped[list[float]] = mapped_column(
        PackedVector,
        nullable=False,
        comment="packed little-endian float32",
    )
    dimension: Mapped[int] = mapped_column(Integer, nullable=False)
    model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    school: Mapped["School"] = relationship(
        "School",
        back_populates="embedding",
    )

    def __repr__(self) -> str:
        return f"<SchoolEmbedding(school_id={self.school_id}, dimension={self.dimension})>"
