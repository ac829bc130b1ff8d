"""Catalog service: search, CRUD and the two-phase cast workflow."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

import bcrypt

from moviecollection.services.association import AssociationManager
from moviecollection.services.errors import InvalidRegistration
from moviecollection.services.identifiers import parse_identifiers
from moviecollection.services.models import Actor, Movie, MovieDetail, PendingMovie, Role, User
from moviecollection.services.query import SearchRequest, apply_filter
from moviecollection.services.sorting import sort_movies
from moviecollection.services.store import ActorRepository, MovieRepository, UserRepository

logger = logging.getLogger(__name__)

PasswordHasher = Callable[[str], str]


def bcrypt_hasher(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


class CatalogService:
    """Coordinates the repositories, the association manager and the query engine.

    Every mutation checks that its target exists first, so an unknown id
    surfaces as ``NotFound`` instead of a silent no-op.
    """

    def __init__(
        self,
        movies: MovieRepository,
        actors: ActorRepository,
        users: UserRepository,
        *,
        cast_delimiter: str = ",",
        password_hasher: PasswordHasher = bcrypt_hasher,
    ) -> None:
        self.movies = movies
        self.actors = actors
        self.users = users
        self.cast_delimiter = cast_delimiter
        self.password_hasher = password_hasher
        self.association = AssociationManager(actors)

    def search(self, request: SearchRequest) -> list[Movie]:
        movies = self.movies.find_all()
        actors = {}
        if request.name is None and request.category is None and request.actor is not None:
            actors = {actor.id: actor for actor in self.actors.find_all()}
        results = apply_filter(movies, request, actors)
        return sort_movies(results, request.order_by)

    def list_movies(self) -> list[Movie]:
        return self.movies.find_all()

    def find_movie(self, movie_id: int) -> Movie:
        return self.movies.find_by_id(movie_id)

    def movie_detail(self, movie_id: int) -> MovieDetail:
        movie = self.movies.find_by_id(movie_id)
        return MovieDetail(movie=movie, cast=self.association.resolve_cast(movie))

    def begin_create(self, raw_cast_text: str) -> PendingMovie:
        return PendingMovie(cast_ref=raw_cast_text or "")

    def confirm_create(self, draft: PendingMovie) -> Movie:
        """Build, cast and persist a movie from ``draft``.

        Cast text is parsed and resolved before the insert, so a bad id leaves
        nothing behind in the store.
        """

        actor_ids = parse_identifiers(draft.cast_ref, self.cast_delimiter)
        movie = self.association.attach_cast(draft.to_movie(), actor_ids)
        stored = self.movies.insert(movie)
        logger.info("Created movie %s (%s) with %d cast members", stored.id, stored.name, len(stored.cast))
        return stored

    def update_core(self, movie: Movie) -> Movie:
        """Replace the scalar fields of a stored movie, keeping its cast."""

        current = self.movies.find_by_id(movie.id)
        updated = replace(movie, cast=current.cast)
        stored = self.movies.replace(updated)
        logger.info("Updated movie %s", stored.id)
        return stored

    def attach_cast_then_confirm(self, movie_id: int, cast_text: str) -> Movie:
        actor_ids = parse_identifiers(cast_text, self.cast_delimiter)
        movie = self.movies.find_by_id(movie_id)
        updated = self.association.attach_cast(movie, actor_ids)
        if updated.cast == movie.cast:
            return movie
        stored = self.movies.replace(updated)
        logger.info("Attached %d actors to movie %s", len(stored.cast) - len(movie.cast), movie_id)
        return stored

    def delete_movie(self, movie_id: int) -> None:
        self.movies.find_by_id(movie_id)
        self.movies.delete_by_id(movie_id)
        logger.info("Deleted movie %s", movie_id)

    def list_actors(self) -> list[Actor]:
        return self.actors.find_all()

    def find_actor(self, actor_id: int) -> Actor:
        return self.actors.find_by_id(actor_id)

    def create_actor(self, name: str) -> Actor:
        stored = self.actors.insert(Actor(name=name))
        logger.info("Created actor %s (%s)", stored.id, stored.name)
        return stored

    def update_actor(self, actor: Actor) -> Actor:
        self.actors.find_by_id(actor.id)
        return self.actors.replace(actor)

    def actor_filmography(self, actor_id: int) -> list[Movie]:
        self.actors.find_by_id(actor_id)
        return self.association.filmography(actor_id, self.movies.find_all())

    def delete_actor(self, actor_id: int) -> None:
        self.actors.find_by_id(actor_id)
        for movie in self.association.filmography(actor_id, self.movies.find_all()):
            self.movies.replace(self.association.detach_actor(movie, actor_id))
        self.actors.delete_by_id(actor_id)
        logger.info("Deleted actor %s", actor_id)

    def register_user(self, username: str, password: str, role: Role | str = Role.USER) -> User:
        if not username or not password:
            logger.warning("Rejected registration with blank username or password")
            raise InvalidRegistration("username and password must not be empty")
        user = User(
            username=username,
            password=self.password_hasher(password),
            enabled=True,
            role=Role(role),
        )
        self.users.register(user)
        logger.info("Registered user %s", username)
        return user
