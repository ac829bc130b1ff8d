"""Result ordering for movie searches."""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from moviecollection.services.models import Movie


class SortKey(str, Enum):
    RATING = "rating"
    NAME = "name"
    DATE = "date"


def sort_movies(movies: Iterable[Movie], order_by: SortKey | None) -> list[Movie]:
    """Stable sort by one key; ``None`` keeps the incoming order."""

    movies = list(movies)
    if order_by is None:
        return movies
    order_by = SortKey(order_by)
    if order_by is SortKey.RATING:
        return sorted(movies, key=lambda m: m.rating, reverse=True)
    if order_by is SortKey.NAME:
        return sorted(movies, key=lambda m: m.name)
    # Undated movies sort after every dated one.
    return sorted(
        movies,
        key=lambda m: (m.release_date is not None, m.release_date or 0),
        reverse=True,
    )
