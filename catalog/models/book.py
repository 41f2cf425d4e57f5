"""
Book Model

The central model of the catalog.

The author reference is a plain integer column, not a foreign key:
deleting an author must not delete or block its books. The ``author``
relationship is view-only and resolves to None once the author is gone.

``total_sales`` is a denormalised display counter. It is never kept in
sync with the Sale ledger; rankings always recompute from the ledger.
"""

from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.database import Base

if TYPE_CHECKING:
    from catalog.models.author import Author


class Book(Base):
    """
    Book model representing books in the catalog.

    Table: books

    Fields:
    - name: Book title (required)
    - summary: Short description (required)
    - publication_date: When the book was published (required)
    - total_sales: Denormalised sales counter, defaults to 0
    - author_id: Identifier of the book's single author (required)
    - cover_image: Optional reference to the cover image
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(
        String(500),
        index=True,
        nullable=False,
        comment="Book title"
    )
    summary: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Book summary"
    )

    # Date (not DateTime) because we only care about the day
    publication_date: Mapped[date] = mapped_column(
        Date,
        index=True,
        nullable=False,
    )
    total_sales: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Denormalised sales counter (display only)"
    )
    author_id: Mapped[int] = mapped_column(
        Integer,
        index=True,
        nullable=False,
    )
    cover_image: Mapped[str | None] = mapped_column(
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

    # Weak many-to-one: joined by identifier only
    author: Mapped["Author | None"] = relationship(
        "Author",
        primaryjoin="foreign(Book.author_id) == Author.id",
        viewonly=True,
        lazy="joined",
    )

    def __repr__(self) -> str:
        return f"Book(id={self.id}, name='{self.name}', author_id={self.author_id})"
