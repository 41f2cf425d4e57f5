"""
Review Model

A reader's review of a book.

Business Rules:
- Score must be 1-5 (also enforced by a check constraint)
- Upvotes start at 0 and are only ever incremented by the server
"""

from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


class Review(Base):
    """
    Review model for book reviews.

    Attributes:
        id: Primary key
        book_id: Identifier of the reviewed book
        review: Review text
        score: 1-5 rating
        upvotes: Number of upvotes (server-incremented)
        created_at: When the review was created
        updated_at: When the review was last updated
    """

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    book_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )
    review: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Review text content",
    )
    score: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Score from 1-5",
    )
    upvotes: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        comment="Number of upvotes",
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

    __table_args__ = (
        CheckConstraint("score >= 1 AND score <= 5", name="ck_review_score_range"),
        CheckConstraint("upvotes >= 0", name="ck_review_upvotes_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, book_id={self.book_id}, score={self.score})>"
