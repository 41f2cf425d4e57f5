"""
Tests for Authors API Endpoints
"""

import threading

import pytest
from fastapi import status

from catalog.schemas import AuthorUpdate
from catalog.services.collections import AUTHORS
from catalog.services.elasticsearch import NullSearchIndex
from catalog.services.entities import EntityService
from catalog.services.search import SearchMirror


AUTHOR_DATA = {
    "name": "Octavia E. Butler",
    "date_of_birth": "1947-06-22",
    "country_of_origin": "United States",
    "description": "American science fiction author.",
}


class TestAuthorsCRUD:
    """Tests for the /api/v1/authors endpoints."""

    def test_list_authors_empty(self, client):
        response = client.get("/api/v1/authors/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"items": [], "total": 0}

    def test_create_author(self, client):
        """Test creating an author."""
        response = client.post("/api/v1/authors/", json=AUTHOR_DATA)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["name"] == "Octavia E. Butler"
        assert data["date_of_birth"] == "1947-06-22"
        assert data["profile_image"] is None
        assert "created_at" in data

    def test_create_author_requires_fields(self, client):
        response = client.post("/api/v1/authors/", json={"name": "Nobody"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_get_author(self, client, sample_author):
        response = client.get(f"/api/v1/authors/{sample_author.id}")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["country_of_origin"] == "United States"

    def test_get_author_not_found(self, client):
        response = client.get("/api/v1/authors/99999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["detail"] == "Author with id 99999 not found"

    def test_update_author(self, client, sample_author):
        """PATCH changes only the fields sent."""
        response = client.patch(
            f"/api/v1/authors/{sample_author.id}",
            json={"profile_image": "images/le-guin.jpg"},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["profile_image"] == "images/le-guin.jpg"
        assert data["name"] == "Ursula K. Le Guin"

    def test_update_author_invalidates_cache(self, client, sample_author, fake_cache):
        client.get(f"/api/v1/authors/{sample_author.id}")
        client.get("/api/v1/authors/")
        assert f"author:{sample_author.id}" in fake_cache.data
        assert "all:author" in fake_cache.data

        client.patch(f"/api/v1/authors/{sample_author.id}", json={"description": "Updated."})

        assert f"author:{sample_author.id}" not in fake_cache.data
        assert "all:author" not in fake_cache.data
        response = client.get(f"/api/v1/authors/{sample_author.id}")
        assert response.json()["description"] == "Updated."

    def test_delete_author_keeps_books(self, client, sample_book, sample_author):
        """Deleting an author does not delete their books."""
        response = client.delete(f"/api/v1/authors/{sample_author.id}")
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = client.get("/api/v1/books/")
        assert response.json()["total"] == 1

    def test_delete_author_not_found(self, client):
        response = client.delete("/api/v1/authors/99999")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_author_clears_profile_image(self, client, sample_author):
        """Null clears an optional field and leaves required ones alone."""
        client.patch(
            f"/api/v1/authors/{sample_author.id}",
            json={"profile_image": "images/le-guin.jpg"},
        )

        response = client.patch(
            f"/api/v1/authors/{sample_author.id}",
            json={"profile_image": None, "name": None},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["profile_image"] is None
        assert data["name"] == "Ursula K. Le Guin"


class TestAuthorsInCachedBooks:
    """Books embed their author, so author writes must refresh cached books."""

    def test_update_author_refreshes_cached_books(self, client, sample_book, sample_author, fake_cache):
        client.get(f"/api/v1/books/{sample_book.id}")
        client.get("/api/v1/books/")
        assert f"book:{sample_book.id}" in fake_cache.data
        assert "all:book" in fake_cache.data

        client.patch(f"/api/v1/authors/{sample_author.id}", json={"name": "U. K. Le Guin"})

        assert f"book:{sample_book.id}" not in fake_cache.data
        assert "all:book" not in fake_cache.data
        book = client.get(f"/api/v1/books/{sample_book.id}").json()
        assert book["author"]["name"] == "U. K. Le Guin"
        books = client.get("/api/v1/books/").json()
        assert books["items"][0]["author"]["name"] == "U. K. Le Guin"

    def test_delete_author_refreshes_cached_books(self, client, sample_book, sample_author, fake_cache):
        client.get(f"/api/v1/books/{sample_book.id}")
        client.get("/api/v1/books/")

        client.delete(f"/api/v1/authors/{sample_author.id}")

        book = client.get(f"/api/v1/books/{sample_book.id}").json()
        assert book["author"] is None
        assert book["author_id"] == sample_author.id
        books = client.get("/api/v1/books/").json()
        assert books["items"][0]["author"] is None

    def test_other_authors_books_stay_cached(self, client, sample_book, fake_cache):
        response = client.post("/api/v1/authors/", json=AUTHOR_DATA)
        other_id = response.json()["id"]
        client.get(f"/api/v1/books/{sample_book.id}")

        client.patch(f"/api/v1/authors/{other_id}", json={"description": "Updated."})

        assert f"book:{sample_book.id}" in fake_cache.data


class TestAuthorService:
    """The service layer, called without HTTP."""

    @pytest.mark.asyncio
    async def test_store_and_cache_work_runs_in_threadpool(
        self, db_session, coordinator, health, sample_author
    ):
        """The event loop thread never runs the blocking store and cache calls."""
        threads = []
        write = coordinator.write

        def recording_write(*args, **kwargs):
            threads.append(threading.get_ident())
            return write(*args, **kwargs)

        coordinator.write = recording_write
        mirror = SearchMirror(NullSearchIndex(), health, prefix="test_")
        service = EntityService(AUTHORS, db_session, coordinator, mirror)

        result = await service.update(sample_author.id, AuthorUpdate(name="U. K. Le Guin"))

        assert result.name == "U. K. Le Guin"
        assert len(threads) == 1
        assert threads[0] != threading.get_ident()
