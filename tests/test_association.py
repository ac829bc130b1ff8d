import pytest

from moviecollection.services.association import AssociationManager
from moviecollection.services.errors import UnknownActor
from moviecollection.services.models import Actor, Movie
from moviecollection.services.store import InMemoryCatalogStore


@pytest.fixture
def store():
    store = InMemoryCatalogStore()
    for name in ("Christian Bale", "Michael Caine", "Liam Neeson"):
        store.actors.insert(Actor(name=name))
    return store


@pytest.fixture
def manager(store):
    return AssociationManager(store.actors)


@pytest.fixture
def movie(store):
    return store.movies.insert(Movie(name="Batman Begins", rating=8.2))


def test_attach_cast_adds_actor_ids(manager, movie):
    updated = manager.attach_cast(movie, [1, 3])
    assert updated.cast == frozenset({1, 3})
    assert movie.cast == frozenset()


def test_attach_cast_is_idempotent(manager, movie):
    once = manager.attach_cast(movie, [1, 2])
    twice = manager.attach_cast(once, [1, 2])
    assert twice.cast == once.cast


def test_duplicate_ids_collapse(manager, movie):
    assert manager.attach_cast(movie, [2, 2, 2]).cast == frozenset({2})


def test_unknown_actor_leaves_cast_unchanged(manager, movie):
    casted = manager.attach_cast(movie, [1])
    with pytest.raises(UnknownActor) as excinfo:
        manager.attach_cast(casted, [2, 99])
    assert excinfo.value.actor_id == 99
    assert casted.cast == frozenset({1})


def test_attach_does_not_write_to_store(manager, store, movie):
    manager.attach_cast(movie, [1, 2])
    assert store.movies.find_by_id(movie.id).cast == frozenset()


def test_filmography_mirrors_cast_after_attach(manager, store, movie):
    other = store.movies.insert(Movie(name="The Prestige"))
    stored = store.movies.replace(manager.attach_cast(movie, [1, 2]))
    store.movies.replace(manager.attach_cast(other, [1]))

    movies = store.movies.find_all()
    for actor_id in stored.cast:
        assert stored.id in {m.id for m in manager.filmography(actor_id, movies)}
    assert [m.name for m in manager.filmography(1, movies)] == ["Batman Begins", "The Prestige"]
    assert manager.filmography(3, movies) == []


def test_resolve_cast_orders_by_id(manager, movie):
    casted = manager.attach_cast(movie, [3, 1])
    assert [actor.name for actor in manager.resolve_cast(casted)] == ["Christian Bale", "Liam Neeson"]


def test_detach_actor(manager, movie):
    casted = manager.attach_cast(movie, [1, 2])
    assert manager.detach_actor(casted, 1).cast == frozenset({2})
