"""Repository contracts for the catalog plus an in-process adapter.

The catalog core only ever talks to these interfaces. ``moviecollection.db``
provides the SQLAlchemy-backed implementation used by the web app; the
in-process store below backs tests and local tooling.
"""

from __future__ import annotations

import itertools
import threading
from abc import ABC, abstractmethod
from dataclasses import replace

from moviecollection.services.errors import Conflict, NotFound
from moviecollection.services.models import Actor, Movie, User


class MovieRepository(ABC):
    @abstractmethod
    def find_all(self) -> list[Movie]: ...

    @abstractmethod
    def find_by_id(self, movie_id: int) -> Movie:
        """Return the stored movie or raise ``NotFound``."""

    @abstractmethod
    def insert(self, movie: Movie) -> Movie:
        """Persist a new movie and return it with its generated id."""

    @abstractmethod
    def replace(self, movie: Movie) -> Movie:
        """Overwrite the full stored record, cast included."""

    @abstractmethod
    def delete_by_id(self, movie_id: int) -> None: ...


class ActorRepository(ABC):
    @abstractmethod
    def find_all(self) -> list[Actor]: ...

    @abstractmethod
    def find_by_id(self, actor_id: int) -> Actor: ...

    @abstractmethod
    def insert(self, actor: Actor) -> Actor: ...

    @abstractmethod
    def replace(self, actor: Actor) -> Actor: ...

    @abstractmethod
    def delete_by_id(self, actor_id: int) -> None: ...


class UserRepository(ABC):
    @abstractmethod
    def register(self, user: User) -> None:
        """Store a new account, raising ``Conflict`` if the username is taken."""


class _InMemoryRepository:
    entity_name = "Entity"

    def __init__(self, lock: threading.Lock) -> None:
        self._lock = lock
        self._rows: dict[int, object] = {}
        self._ids = itertools.count(1)

    def find_all(self):
        with self._lock:
            return list(self._rows.values())

    def find_by_id(self, entity_id: int):
        with self._lock:
            try:
                return self._rows[entity_id]
            except KeyError:
                raise NotFound(self.entity_name, entity_id) from None

    def insert(self, entity):
        with self._lock:
            stored = replace(entity, id=next(self._ids))
            self._rows[stored.id] = stored
            return stored

    def replace(self, entity):
        with self._lock:
            if entity.id not in self._rows:
                raise NotFound(self.entity_name, entity.id)
            self._rows[entity.id] = entity
            return entity

    def delete_by_id(self, entity_id: int) -> None:
        with self._lock:
            if self._rows.pop(entity_id, None) is None:
                raise NotFound(self.entity_name, entity_id)


class InMemoryMovieRepository(_InMemoryRepository, MovieRepository):
    entity_name = "Movie"


class InMemoryActorRepository(_InMemoryRepository, ActorRepository):
    entity_name = "Actor"


class InMemoryUserRepository(UserRepository):
    def __init__(self, lock: threading.Lock) -> None:
        self._lock = lock
        self.users: dict[str, User] = {}

    def register(self, user: User) -> None:
        with self._lock:
            if user.username in self.users:
                raise Conflict(f"Username already registered: {user.username}")
            self.users[user.username] = user


class InMemoryCatalogStore:
    """Bundle of in-process repositories sharing one lock."""

    def __init__(self) -> None:
        lock = threading.Lock()
        self.movies = InMemoryMovieRepository(lock)
        self.actors = InMemoryActorRepository(lock)
        self.users = InMemoryUserRepository(lock)
