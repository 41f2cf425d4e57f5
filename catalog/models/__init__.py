"""
SQLAlchemy Models Package

This package contains all database models for the Catalog API.

Model Relationships (all by identifier, no cascading deletes):
- Book -> Author: Many-to-One (book.author_id)
- Review -> Book: Many-to-One (review.book_id)
- Sale -> Book: Many-to-One (sale.book_id)

Deleting an author leaves its books in place; deleting a book leaves its
reviews and sales in place. References are only checked when an
entity is written.

Import all models here to:
1. Make them available as: from catalog.models import Book, Author
2. Register them with Base.metadata before create_all() runs
"""

from catalog.models.author import Author
from catalog.models.book import Book
from catalog.models.review import Review
from catalog.models.sale import Sale

__all__ = [
    "Author",
    "Book",
    "Review",
    "Sale",
]
