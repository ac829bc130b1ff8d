"""Single-criterion movie filters.

Name and actor searches are substring matches while category search is an
exact match. Both are case-insensitive. The asymmetry is visible to users of
the search form and is kept as-is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping

from moviecollection.services.models import Actor, Movie
from moviecollection.services.sorting import SortKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchRequest:
    name: str | None = None
    category: str | None = None
    actor: str | None = None
    order_by: SortKey | None = None


def by_name(movies: Iterable[Movie], query: str) -> list[Movie]:
    needle = query.lower()
    return [movie for movie in movies if needle in (movie.name or "").lower()]


def by_category(movies: Iterable[Movie], query: str) -> list[Movie]:
    needle = query.lower()
    return [movie for movie in movies if (movie.category or "").lower() == needle]


def by_actor(movies: Iterable[Movie], query: str, actors: Mapping[int, Actor]) -> list[Movie]:
    needle = query.lower()

    def _matches(movie: Movie) -> bool:
        for actor_id in movie.cast:
            actor = actors.get(actor_id)
            if actor is not None and needle in actor.name.lower():
                return True
        return False

    return [movie for movie in movies if _matches(movie)]


def apply_filter(
    movies: list[Movie],
    request: SearchRequest,
    actors: Mapping[int, Actor],
) -> list[Movie]:
    """Run the first supplied criterion in name, category, actor order."""

    if request.name is not None:
        logger.debug("Filtering movies by name %r", request.name)
        return by_name(movies, request.name)
    if request.category is not None:
        logger.debug("Filtering movies by category %r", request.category)
        return by_category(movies, request.category)
    if request.actor is not None:
        logger.debug("Filtering movies by actor %r", request.actor)
        return by_actor(movies, request.actor, actors)
    return list(movies)
