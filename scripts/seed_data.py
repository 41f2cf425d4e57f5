#!/usr/bin/env python3
"""
Database Seed Script

Populates the database with sample data for development and testing.

USAGE:
    # Make sure you're in the project root with venv activated
    python scripts/seed_data.py

    # Options:
    python scripts/seed_data.py --clear          # Delete existing data first
    python scripts/seed_data.py --authors 10     # Fewer authors
    python scripts/seed_data.py --seed 7         # Different (but repeatable) data

This script:
1. Connects to the database using app settings
2. Clears existing data (optional)
3. Creates authors, then books by random authors
4. Adds 1-10 reviews and 5 yearly sales lines per book

The cache and the search index are not touched; run
scripts/reindex_elasticsearch.py afterwards to fill the index.
"""

import argparse
import random
import sys
from datetime import date, timedelta
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete
from sqlalchemy.orm import Session

from catalog.database import SessionLocal, create_tables
from catalog.models import Author, Book, Review, Sale

FIRST_NAMES = [
    "Ana", "Bruno", "Carmen", "Diego", "Elena", "Felipe", "Gabriela", "Hugo",
    "Isabel", "Javier", "Lucia", "Mateo", "Nora", "Pablo", "Rosa", "Tomas",
]
LAST_NAMES = [
    "Alvarez", "Bennett", "Castro", "Duarte", "Eriksen", "Fischer", "Garcia",
    "Huang", "Ibarra", "Jensen", "Kowalski", "Lopez", "Moreau", "Novak",
]
COUNTRIES = [
    "Argentina", "Chile", "France", "Germany", "Japan", "Mexico", "Nigeria",
    "Poland", "Spain", "United Kingdom", "United States",
]
WORDS = [
    "ancient", "river", "dragon", "silent", "city", "winter", "garden", "shadow",
    "empire", "letters", "storm", "island", "memory", "glass", "mountain",
    "night", "journey", "stranger", "fire", "harbor", "secret", "light",
]


def sentence(rng: random.Random, length: int) -> str:
    words = rng.sample(WORDS, length)
    return " ".join(words).capitalize() + "."


def paragraph(rng: random.Random) -> str:
    return " ".join(sentence(rng, rng.randint(4, 8)) for _ in range(rng.randint(2, 4)))


def random_date(rng: random.Random, years_back: int) -> date:
    return date.today() - timedelta(days=rng.randint(0, years_back * 365))


def clear_data(db: Session) -> None:
    """Clear all existing data from the database."""
    print("Clearing existing data...")
    for model in (Sale, Review, Book, Author):
        db.execute(delete(model))
    db.commit()
    print("Data cleared.")


def create_authors(db: Session, rng: random.Random, count: int) -> list[Author]:
    """Create sample authors."""
    print("Creating authors...")
    authors = [
        Author(
            name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
            date_of_birth=random_date(rng, 80) - timedelta(days=20 * 365),
            country_of_origin=rng.choice(COUNTRIES),
            description=paragraph(rng),
        )
        for _ in range(count)
    ]
    db.add_all(authors)
    db.commit()
    for author in authors:
        db.refresh(author)

    print(f"Created {len(authors)} authors.")
    return authors


def create_books(
    db: Session,
    rng: random.Random,
    authors: list[Author],
    count: int,
) -> list[Book]:
    """Create books, each by a random author."""
    print("Creating books...")
    books = [
        Book(
            name=sentence(rng, 3).rstrip(".").title(),
            summary=paragraph(rng),
            publication_date=random_date(rng, 20),
            total_sales=rng.randint(0, 9999),
            author_id=rng.choice(authors).id,
        )
        for _ in range(count)
    ]
    db.add_all(books)
    db.commit()
    for book in books:
        db.refresh(book)

    print(f"Created {len(books)} books.")
    return books


def create_reviews_and_sales(
    db: Session,
    rng: random.Random,
    books: list[Book],
) -> tuple[int, int]:
    """Add 1-10 reviews and five sales lines to every book."""
    print("Creating reviews and sales...")
    review_count = 0
    sale_count = 0

    for book in books:
        for _ in range(rng.randint(1, 10)):
            db.add(Review(
                book_id=book.id,
                review=sentence(rng, rng.randint(5, 10)),
                score=rng.randint(1, 5),
                upvotes=rng.randint(0, 99),
            ))
            review_count += 1

        for _ in range(5):
            db.add(Sale(
                book_id=book.id,
                year=random_date(rng, 10).year,
                sales=rng.randint(0, 999),
            ))
            sale_count += 1

    db.commit()
    print(f"Created {review_count} reviews and {sale_count} sales.")
    return review_count, sale_count


def seed_database(
    clear_existing: bool = False,
    author_count: int = 50,
    book_count: int = 300,
    seed: int = 42,
) -> None:
    """
    Main function to seed the database.

    Args:
        clear_existing: If True, clears existing data before seeding.
        author_count: Number of authors to create
        book_count: Number of books to create
        seed: Random seed, so the same arguments give the same data
    """
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    create_tables()
    rng = random.Random(seed)
    db = SessionLocal()

    try:
        if clear_existing:
            clear_data(db)

        authors = create_authors(db, rng, author_count)
        books = create_books(db, rng, authors, book_count)
        reviews, sales = create_reviews_and_sales(db, rng, books)

        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)
        print("\nSummary:")
        print(f"  - Authors: {len(authors)}")
        print(f"  - Books: {len(books)}")
        print(f"  - Reviews: {reviews}")
        print(f"  - Sales: {sales}")

    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed the catalog database")
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete all authors, books, reviews and sales first",
    )
    parser.add_argument("--authors", type=int, default=50, help="Number of authors (default: 50)")
    parser.add_argument("--books", type=int, default=300, help="Number of books (default: 300)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")

    args = parser.parse_args()
    if args.authors < 1:
        parser.error("--authors must be at least 1")

    seed_database(
        clear_existing=args.clear,
        author_count=args.authors,
        book_count=args.books,
        seed=args.seed,
    )


if __name__ == "__main__":
    main()
