"""
Author Model

Represents an author in the catalog. Authors have no outgoing references.
"""

from datetime import UTC, date, datetime

from sqlalchemy import Date, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


class Author(Base):
    """
    Author model representing writers in the catalog.

    Table: authors

    Example:
        author = Author(
            name="Ursula K. Le Guin",
            date_of_birth=date(1929, 10, 21),
            country_of_origin="United States",
            description="American author of speculative fiction.",
        )
        db.add(author)
        db.commit()
    """

    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(
        String(255),
        index=True,
        nullable=False,
        comment="Author's full name"
    )
    date_of_birth: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )
    country_of_origin: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Author biography"
    )

    # Reference to an uploaded image; the file itself lives elsewhere
    profile_image: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"Author(id={self.id}, name='{self.name}')"
