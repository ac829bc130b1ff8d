"""Movie <-> Actor cast link.

The movie's ``cast`` set is the only stored side of the relationship. An
actor's filmography is always derived from it, so callers never write both
sides. Nothing here touches storage except to resolve actor ids.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable

from moviecollection.services.errors import NotFound, UnknownActor
from moviecollection.services.models import Actor, Movie
from moviecollection.services.store import ActorRepository

logger = logging.getLogger(__name__)


class AssociationManager:
    def __init__(self, actors: ActorRepository) -> None:
        self.actors = actors

    def attach_cast(self, movie: Movie, actor_ids: Iterable[int]) -> Movie:
        """Return ``movie`` with ``actor_ids`` added to its cast.

        Every id is resolved before anything changes. One unknown id raises
        ``UnknownActor`` and the input movie is left as it was.
        """

        resolved: set[int] = set()
        for actor_id in actor_ids:
            if actor_id in resolved:
                continue
            try:
                self.actors.find_by_id(actor_id)
            except NotFound as exc:
                logger.warning("Cast attach rejected for movie %s: unknown actor %s", movie.id, actor_id)
                raise UnknownActor(actor_id) from exc
            resolved.add(actor_id)
        return replace(movie, cast=movie.cast | resolved)

    def resolve_cast(self, movie: Movie) -> list[Actor]:
        return [self.actors.find_by_id(actor_id) for actor_id in sorted(movie.cast)]

    @staticmethod
    def detach_actor(movie: Movie, actor_id: int) -> Movie:
        return replace(movie, cast=movie.cast - {actor_id})

    @staticmethod
    def filmography(actor_id: int, movies: Iterable[Movie]) -> list[Movie]:
        return [movie for movie in movies if actor_id in movie.cast]
