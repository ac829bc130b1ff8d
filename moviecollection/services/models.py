"""Shared dataclasses for service layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class Role(str, Enum):
    USER = "ROLE_USER"
    ADMIN = "ROLE_ADMIN"


@dataclass(frozen=True, slots=True)
class Actor:
    name: str
    id: int | None = None


@dataclass(frozen=True, slots=True)
class Movie:
    """A catalog entry. ``cast`` holds actor ids and is the only stored side of the link."""

    name: str
    release_date: date | None = None
    category: str | None = None
    description: str | None = None
    image: str | None = None
    rating: float = 0.0
    cast: frozenset[int] = field(default_factory=frozenset)
    id: int | None = None


@dataclass(frozen=True, slots=True)
class PendingMovie:
    """Caller-held draft between ``begin_create`` and ``confirm_create``."""

    cast_ref: str = ""
    name: str = ""
    release_date: date | None = None
    category: str | None = None
    description: str | None = None
    image: str | None = None
    rating: float = 0.0

    def to_movie(self) -> Movie:
        return Movie(
            name=self.name,
            release_date=self.release_date,
            category=self.category,
            description=self.description,
            image=self.image,
            rating=self.rating,
        )


@dataclass(frozen=True, slots=True)
class MovieDetail:
    movie: Movie
    cast: list[Actor]


@dataclass(frozen=True, slots=True)
class User:
    username: str
    password: str
    enabled: bool = False
    role: Role = Role.USER
