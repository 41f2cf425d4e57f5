"""
Aggregation Engine

Ranked views of the catalog, computed from the store on every call:

- top_rated_books: books ranked by mean review score
- top_selling_books: books ranked by the sum of their sales ledger

Results are never cached; they must always reflect the current store.
Ties are broken by book id (ascending) so the ordering is deterministic.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from catalog.exceptions import CatalogValidationError
from catalog.models import Book, Review, Sale
from catalog.schemas import BookSummary, ReviewResponse, TopRatedBook, TopSellingBook
from catalog.services.store import store_errors

logger = logging.getLogger(__name__)

# Size of the per-year leaderboard used for in_top_five_on_publication_year
TOP_FIVE = 5


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise CatalogValidationError(f"limit must be at least 1, got {limit}")


# =============================================================================
# Top Rated
# =============================================================================

def _pick_extreme_reviews(reviews: list[Review]) -> tuple[Review | None, Review | None]:
    """
    Return (highest, lowest) rated reviews of one book.

    Equal scores are broken by the number of upvotes, more upvotes first,
    then by review id.
    """
    if not reviews:
        return None, None
    highest = min(reviews, key=lambda r: (-r.score, -r.upvotes, r.id))
    lowest = min(reviews, key=lambda r: (r.score, -r.upvotes, r.id))
    return highest, lowest


def top_rated_books(db: Session, limit: int = 10) -> list[TopRatedBook]:
    """
    Rank books by average review score.

    Sort order: average score desc, review count desc, book id asc.
    Books without reviews have no average and sort last.

    Args:
        db: Database session
        limit: Maximum number of books to return

    Returns:
        Ranked list, each entry carrying the book's highest and lowest
        rated review
    """
    _check_limit(limit)

    stats = (
        select(
            Review.book_id.label("book_id"),
            func.avg(Review.score).label("average_score"),
            func.count(Review.id).label("review_count"),
        )
        .group_by(Review.book_id)
        .subquery()
    )
    review_count = func.coalesce(stats.c.review_count, 0)

    stmt = (
        select(Book, stats.c.average_score, review_count)
        .outerjoin(stats, stats.c.book_id == Book.id)
        .order_by(
            stats.c.average_score.desc().nulls_last(),
            review_count.desc(),
            Book.id,
        )
        .limit(limit)
    )

    with store_errors(db):
        rows = db.execute(stmt).unique().all()

        book_ids = [book.id for book, _, _ in rows]
        reviews_by_book: dict[int, list[Review]] = {book_id: [] for book_id in book_ids}
        if book_ids:
            for review in db.execute(
                select(Review).where(Review.book_id.in_(book_ids))
            ).scalars():
                reviews_by_book[review.book_id].append(review)

    results = []
    for book, average, count in rows:
        highest, lowest = _pick_extreme_reviews(reviews_by_book[book.id])
        results.append(
            TopRatedBook(
                book=BookSummary.model_validate(book),
                average_score=round(float(average), 2) if average is not None else None,
                review_count=count,
                highest_rated_review=ReviewResponse.model_validate(highest) if highest else None,
                lowest_rated_review=ReviewResponse.model_validate(lowest) if lowest else None,
            )
        )

    logger.debug(f"Computed top {len(results)} rated books")
    return results


# =============================================================================
# Top Selling
# =============================================================================

def _author_ledger_totals(db: Session, author_ids: set[int]) -> dict[int, int]:
    """Sum of the sales ledger across every book of each author."""
    if not author_ids:
        return {}
    stmt = (
        select(Book.author_id, func.sum(Sale.sales))
        .join(Sale, Sale.book_id == Book.id)
        .where(Book.author_id.in_(author_ids))
        .group_by(Book.author_id)
    )
    return {author_id: int(total or 0) for author_id, total in db.execute(stmt).all()}


def _top_five_for_year(db: Session, year: int) -> set[int]:
    """Ids of the five best-selling books counting only Sale rows of ``year``."""
    year_total = func.sum(Sale.sales)
    stmt = (
        select(Sale.book_id)
        .where(Sale.year == year)
        .group_by(Sale.book_id)
        .order_by(year_total.desc(), Sale.book_id)
        .limit(TOP_FIVE)
    )
    return set(db.execute(stmt).scalars().all())


def top_selling_books(db: Session, limit: int = 50) -> list[TopSellingBook]:
    """
    Rank books by the sum of their Sale rows.

    ``Book.total_sales`` is ignored; the ledger is the source of truth.
    Sort order: ledger total desc, book id asc.

    Each entry also reports the author's ledger total across all of
    their books, and whether the book was among the five best sellers of
    its own publication year.

    Args:
        db: Database session
        limit: Maximum number of books to return
    """
    _check_limit(limit)

    ledger = (
        select(
            Sale.book_id.label("book_id"),
            func.sum(Sale.sales).label("total_sales"),
        )
        .group_by(Sale.book_id)
        .subquery()
    )
    total_sales = func.coalesce(ledger.c.total_sales, 0)

    stmt = (
        select(Book, total_sales)
        .outerjoin(ledger, ledger.c.book_id == Book.id)
        .order_by(total_sales.desc(), Book.id)
        .limit(limit)
    )

    with store_errors(db):
        rows = db.execute(stmt).unique().all()
        author_totals = _author_ledger_totals(db, {book.author_id for book, _ in rows})

        top_five_by_year: dict[int, set[int]] = {}
        results = []
        for book, total in rows:
            year = book.publication_date.year
            if year not in top_five_by_year:
                top_five_by_year[year] = _top_five_for_year(db, year)

            results.append(
                TopSellingBook(
                    book=BookSummary.model_validate(book),
                    total_sales=int(total),
                    author_total_sales=author_totals.get(book.author_id, 0),
                    in_top_five_on_publication_year=book.id in top_five_by_year[year],
                )
            )

    logger.debug(f"Computed top {len(results)} selling books")
    return results
