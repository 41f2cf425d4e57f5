"""
Tests for Books API Endpoints

This module tests all CRUD operations for the /api/v1/books endpoints,
including how they interact with the cache.

TEST NAMING CONVENTION:
- test_<action>_<scenario>
- Examples: test_create_book_success, test_get_book_not_found
"""

from fastapi import status


class TestListBooks:
    """Tests for GET /api/v1/books/ endpoint."""

    def test_list_books_empty(self, client):
        """Test listing books when database is empty."""
        response = client.get("/api/v1/books/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["items"] == []
        assert data["total"] == 0

    def test_list_books_with_data(self, client, sample_book):
        """Test listing books returns expected data."""
        response = client.get("/api/v1/books/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["name"] == "A Wizard of Earthsea"
        assert data["items"][0]["author"]["name"] == "Ursula K. Le Guin"

    def test_list_books_is_cached(self, client, sample_book, fake_cache):
        """The full list is stored under all:book after the first read."""
        client.get("/api/v1/books/")

        assert "all:book" in fake_cache.data


class TestGetBook:
    """Tests for GET /api/v1/books/{book_id} endpoint."""

    def test_get_book_success(self, client, sample_book):
        """Test getting a book by ID."""
        response = client.get(f"/api/v1/books/{sample_book.id}")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["id"] == sample_book.id
        assert data["name"] == "A Wizard of Earthsea"
        assert data["publication_date"] == "1968-11-01"
        assert data["total_sales"] == 0
        assert data["author"]["id"] == sample_book.author_id

    def test_get_book_not_found(self, client, fake_cache):
        """Test getting a non-existent book returns 404 and caches nothing."""
        response = client.get("/api/v1/books/99999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert "not found" in response.json()["detail"].lower()
        assert "book:99999" not in fake_cache.data

    def test_get_book_served_from_cache(self, client, sample_book, fake_cache, db_session):
        """A cached book is returned without reading the database."""
        client.get(f"/api/v1/books/{sample_book.id}")
        assert f"book:{sample_book.id}" in fake_cache.data

        # Change the row behind the cache's back
        sample_book.name = "Changed directly"
        db_session.commit()

        response = client.get(f"/api/v1/books/{sample_book.id}")
        assert response.json()["name"] == "A Wizard of Earthsea"

    def test_get_book_with_deleted_author(self, client, sample_book, sample_author):
        """Deleting an author leaves the book readable with no author."""
        response = client.delete(f"/api/v1/authors/{sample_author.id}")
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = client.get(f"/api/v1/books/{sample_book.id}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["author"] is None


class TestCreateBook:
    """Tests for POST /api/v1/books/ endpoint."""

    def test_create_book_success(self, client, sample_author):
        """Test creating a book with all required fields."""
        book_data = {
            "name": "The Dispossessed",
            "summary": "A physicist travels between two worlds.",
            "publication_date": "1974-05-01",
            "author_id": sample_author.id,
        }

        response = client.post("/api/v1/books/", json=book_data)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["id"] is not None
        assert data["name"] == "The Dispossessed"
        assert data["total_sales"] == 0
        assert data["cover_image"] is None
        assert data["author"]["name"] == "Ursula K. Le Guin"

    def test_create_book_unknown_author(self, client):
        """A book must reference an existing author."""
        book_data = {
            "name": "Orphan",
            "summary": "No author.",
            "publication_date": "2000-01-01",
            "author_id": 424242,
        }

        response = client.post("/api/v1/books/", json=book_data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "does not exist" in response.json()["detail"]

    def test_create_book_missing_fields(self, client, sample_author):
        """Test that required fields are enforced by the schema."""
        response = client.post("/api/v1/books/", json={"name": "Half a book"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_create_book_invalidates_list(self, client, sample_book, sample_author, fake_cache):
        """A new book shows up in the list even when the list was cached."""
        client.get("/api/v1/books/")
        assert "all:book" in fake_cache.data

        client.post(
            "/api/v1/books/",
            json={
                "name": "The Left Hand of Darkness",
                "summary": "An envoy on a planet of ambisexual people.",
                "publication_date": "1969-03-01",
                "author_id": sample_author.id,
            },
        )

        assert "all:book" not in fake_cache.data
        response = client.get("/api/v1/books/")
        assert response.json()["total"] == 2


class TestUpdateBook:
    """Tests for PATCH /api/v1/books/{book_id} endpoint."""

    def test_update_book_partial(self, client, sample_book):
        """Only the fields sent are changed."""
        response = client.patch(
            f"/api/v1/books/{sample_book.id}",
            json={"name": "A Wizard of Earthsea (Revised)"},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["name"] == "A Wizard of Earthsea (Revised)"
        assert data["summary"] == sample_book.summary

    def test_update_book_null_fields_ignored(self, client, sample_book):
        """Fields sent as null are left unchanged."""
        response = client.patch(
            f"/api/v1/books/{sample_book.id}",
            json={"name": None, "total_sales": 50},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["name"] == "A Wizard of Earthsea"
        assert data["total_sales"] == 50

    def test_update_book_clears_cover_image(self, client, sample_book):
        """Null clears the optional cover image."""
        client.patch(f"/api/v1/books/{sample_book.id}", json={"cover_image": "covers/earthsea.jpg"})

        response = client.patch(f"/api/v1/books/{sample_book.id}", json={"cover_image": None})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["cover_image"] is None
        assert client.get(f"/api/v1/books/{sample_book.id}").json()["cover_image"] is None

    def test_update_then_read_returns_latest(self, client, sample_book, fake_cache):
        """A cached book is invalidated by an update."""
        client.get(f"/api/v1/books/{sample_book.id}")
        assert f"book:{sample_book.id}" in fake_cache.data

        client.patch(f"/api/v1/books/{sample_book.id}", json={"summary": "New summary."})

        response = client.get(f"/api/v1/books/{sample_book.id}")
        assert response.json()["summary"] == "New summary."

    def test_update_book_not_found(self, client):
        response = client.patch("/api/v1/books/99999", json={"name": "Ghost"})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_book_unknown_author(self, client, sample_book):
        response = client.patch(f"/api/v1/books/{sample_book.id}", json={"author_id": 424242})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestDeleteBook:
    """Tests for DELETE /api/v1/books/{book_id} endpoint."""

    def test_delete_book_success(self, client, sample_book):
        response = client.delete(f"/api/v1/books/{sample_book.id}")
        assert response.status_code == status.HTTP_204_NO_CONTENT

        response = client.get(f"/api/v1/books/{sample_book.id}")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_book_twice(self, client, sample_book):
        """Deleting an already deleted book is a 404 every time."""
        client.delete(f"/api/v1/books/{sample_book.id}")

        for _ in range(2):
            response = client.delete(f"/api/v1/books/{sample_book.id}")
            assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_book_keeps_reviews(self, client, sample_review):
        """Reviews of a deleted book stay in place."""
        client.delete(f"/api/v1/books/{sample_review.book_id}")

        response = client.get(f"/api/v1/reviews/{sample_review.id}")
        assert response.status_code == status.HTTP_200_OK


class TestBooksWithoutCache:
    """The API behaves the same when Redis is down."""

    def test_crud_with_cache_failing(self, client, sample_author, fake_cache):
        fake_cache.failing = True

        response = client.post(
            "/api/v1/books/",
            json={
                "name": "Tehanu",
                "summary": "The fourth Earthsea book.",
                "publication_date": "1990-02-01",
                "author_id": sample_author.id,
            },
        )
        assert response.status_code == status.HTTP_201_CREATED
        book_id = response.json()["id"]

        response = client.patch(f"/api/v1/books/{book_id}", json={"summary": "Changed."})
        assert response.status_code == status.HTTP_200_OK

        response = client.get(f"/api/v1/books/{book_id}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["summary"] == "Changed."

        response = client.get("/api/v1/books/")
        assert response.json()["total"] == 1

        response = client.delete(f"/api/v1/books/{book_id}")
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert fake_cache.data == {}
