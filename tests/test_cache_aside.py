"""
Tests for the Cache-Aside Coordinator

Exercises the coordinator directly, with the dict-backed FakeCache and a
counting loader standing in for the database.
"""

from datetime import date

import pytest
from unittest.mock import MagicMock

from catalog.exceptions import NotFoundError
from catalog.schemas import AuthorResponse
from catalog.services.cache import NullCache
from catalog.services.collections import AUTHORS
from catalog.services.coordinator import CacheAsideCoordinator
from catalog.services.health import Backend, BackendState


def make_author(author_id: int = 1, name: str = "N. K. Jemisin") -> AuthorResponse:
    return AuthorResponse(
        id=author_id,
        name=name,
        date_of_birth=date(1972, 9, 19),
        country_of_origin="United States",
        description="Author of the Broken Earth trilogy.",
        created_at="2024-01-01T00:00:00Z",
        updated_at="2024-01-01T00:00:00Z",
    )


class TestReadOne:
    """read_one: hit, miss and not-found behaviour."""

    def test_miss_loads_and_populates(self, coordinator, fake_cache):
        load = MagicMock(return_value=make_author())

        result = coordinator.read_one(AUTHORS, 1, load)

        assert result.name == "N. K. Jemisin"
        load.assert_called_once()
        assert "author:1" in fake_cache.data

    def test_hit_skips_the_store(self, coordinator, fake_cache):
        coordinator.read_one(AUTHORS, 1, lambda: make_author())
        load = MagicMock()

        result = coordinator.read_one(AUTHORS, 1, load)

        assert result.id == 1
        load.assert_not_called()

    def test_not_found_is_not_cached(self, coordinator, fake_cache):
        def load():
            raise NotFoundError("author", 7)

        with pytest.raises(NotFoundError):
            coordinator.read_one(AUTHORS, 7, load)

        assert "author:7" not in fake_cache.data

    def test_undecodable_entry_is_a_miss(self, coordinator, fake_cache):
        fake_cache.data["author:1"] = "{not json"
        load = MagicMock(return_value=make_author())

        result = coordinator.read_one(AUTHORS, 1, load)

        assert result.id == 1
        load.assert_called_once()


class TestReadAll:
    def test_list_round_trips_through_cache(self, coordinator, fake_cache):
        authors = [make_author(1), make_author(2, "Ted Chiang")]
        coordinator.read_all(AUTHORS, lambda: authors)
        load = MagicMock()

        result = coordinator.read_all(AUTHORS, load)

        assert [a.name for a in result] == ["N. K. Jemisin", "Ted Chiang"]
        load.assert_not_called()


class TestWrites:
    """write and delete always invalidate both keys."""

    def test_write_invalidates_entity_and_list(self, coordinator, fake_cache):
        fake_cache.data["author:1"] = "stale"
        fake_cache.data["all:author"] = "stale"

        coordinator.write(AUTHORS, lambda: make_author(1, "Updated"), 1)

        assert "author:1" not in fake_cache.data
        assert "all:author" not in fake_cache.data

    def test_create_takes_id_from_result(self, coordinator, fake_cache):
        coordinator.write(AUTHORS, lambda: make_author(5))

        assert fake_cache.deleted == ["author:5", "all:author"]

    def test_failed_write_does_not_invalidate(self, coordinator, fake_cache):
        fake_cache.data["author:1"] = "kept"

        def mutate():
            raise NotFoundError("author", 1)

        with pytest.raises(NotFoundError):
            coordinator.write(AUTHORS, mutate, 1)

        assert fake_cache.data["author:1"] == "kept"

    def test_delete_of_never_cached_key(self, coordinator, fake_cache):
        coordinator.delete(AUTHORS, 3, lambda: None)

        assert fake_cache.deleted == ["author:3", "all:author"]

    def test_write_invalidates_dependents(self, coordinator, fake_cache):
        fake_cache.data["book:7"] = "embeds author 1"
        fake_cache.data["book:9"] = "embeds author 2"
        fake_cache.data["all:book"] = "embeds every author"

        coordinator.write(AUTHORS, lambda: make_author(1), 1, lambda: {"book": [7, 8]})

        assert "book:7" not in fake_cache.data
        assert "all:book" not in fake_cache.data
        assert fake_cache.data["book:9"] == "embeds author 2"

    def test_dependents_loaded_after_mutation(self, coordinator):
        calls = []

        def mutate():
            calls.append("mutate")
            return make_author(1)

        def dependents():
            calls.append("dependents")
            return {}

        coordinator.write(AUTHORS, mutate, 1, dependents)

        assert calls == ["mutate", "dependents"]


class TestCacheFailures:
    """A failing cache degrades to the store without raising."""

    def test_read_with_failing_cache(self, coordinator, fake_cache, health):
        fake_cache.failing = True
        load = MagicMock(return_value=make_author())

        result = coordinator.read_one(AUTHORS, 1, load)

        assert result.id == 1
        assert health.state(Backend.CACHE) == BackendState.UNAVAILABLE

    def test_unavailable_cache_is_skipped(self, coordinator, fake_cache, health):
        health.mark_unavailable(Backend.CACHE, "test")
        fake_cache.data["author:1"] = make_author(1, "Cached").model_dump_json()

        result = coordinator.read_one(AUTHORS, 1, lambda: make_author(1, "Fresh"))

        assert result.name == "Fresh"
        assert fake_cache.gets == []

    def test_write_with_failing_cache(self, coordinator, fake_cache, health):
        fake_cache.failing = True

        result = coordinator.write(AUTHORS, lambda: make_author(1), 1)

        assert result.id == 1

        assert health.state(Backend.CACHE) == BackendState.UNAVAILABLE


class TestDeferredInvalidation:
    """Invalidations missed while the cache is down are replayed on recovery."""

    def test_write_while_unavailable_makes_no_cache_call(self, coordinator, fake_cache, health):
        health.mark_unavailable(Backend.CACHE, "test")
        fake_cache.data["author:1"] = make_author(1, "Cached").model_dump_json()

        coordinator.write(AUTHORS, lambda: make_author(1, "Fresh"), 1)

        assert fake_cache.deleted == []
        assert "author:1" in fake_cache.data

    def test_replayed_before_first_read_after_recovery(self, coordinator, fake_cache, health):
        fake_cache.data["author:1"] = make_author(1, "Cached").model_dump_json()
        health.mark_unavailable(Backend.CACHE, "test")
        coordinator.write(AUTHORS, lambda: make_author(1, "Fresh"), 1)

        health.mark_available(Backend.CACHE)
        result = coordinator.read_one(AUTHORS, 1, lambda: make_author(1, "Fresh"))

        assert result.name == "Fresh"
        assert fake_cache.deleted == ["all:author", "author:1"]

    def test_failed_delete_is_replayed(self, coordinator, fake_cache, health):
        fake_cache.data["author:1"] = make_author(1, "Cached").model_dump_json()
        fake_cache.failing = True
        coordinator.delete(AUTHORS, 1, lambda: None)

        fake_cache.failing = False
        health.mark_available(Backend.CACHE)
        load = MagicMock(side_effect=NotFoundError("author", 1))

        with pytest.raises(NotFoundError):
            coordinator.read_one(AUTHORS, 1, load)

        assert "author:1" not in fake_cache.data
        load.assert_called_once()

    def test_null_cache_queues_nothing(self, health):
        coordinator = CacheAsideCoordinator(NullCache(), health)
        health.mark_unavailable(Backend.CACHE, "disabled")

        coordinator.write(AUTHORS, lambda: make_author(1), 1)

        assert coordinator._pending == set()
