"""
Sale Model

One line of the sales ledger: units sold for a book in a calendar year.

Several rows may exist for the same (book, year); they are never merged.
Rankings sum them at query time.
"""

from sqlalchemy import CheckConstraint, Integer
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


class Sale(Base):
    """
    Sale model.

    Attributes:
        id: Primary key
        book_id: Identifier of the book sold
        year: Calendar year of the sales
        sales: Units sold (non-negative)
    """

    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    book_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )
    year: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )
    sales: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("sales >= 0", name="ck_sale_sales_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Sale(id={self.id}, book_id={self.book_id}, year={self.year}, sales={self.sales})>"
