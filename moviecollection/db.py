"""Database session management and repositories."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

from sqlalchemy import create_engine, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from moviecollection.core.config import get_settings
from moviecollection.models import ActorRecord, AuthorityRecord, Base, MovieRecord, UserRecord
from moviecollection.services.errors import Conflict, NotFound, StoreFailure
from moviecollection.services.models import Actor, Movie, User
from moviecollection.services.store import ActorRepository, MovieRepository, UserRepository

logger = logging.getLogger(__name__)

# Keys are stored as signed 64-bit integers.
_MAX_KEY = 2**63 - 1


def _storable_key(key: int) -> bool:
    return -_MAX_KEY - 1 <= key <= _MAX_KEY


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # Requests are served from a threadpool; SQLite must allow that.
        return {"connect_args": {"check_same_thread": False}}
    return {}


def _create_engine():
    settings = get_settings()
    return create_engine(
        settings.database_url,
        echo=settings.sql_echo,
        future=True,
        **_engine_options(settings.database_url),
    )


engine = _create_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_models() -> None:
    """Create tables if they do not exist (handy for local dev)."""
    Base.metadata.create_all(bind=engine)


def get_session() -> Iterator[Session]:
    """FastAPI-friendly dependency that manages commits/rollbacks."""

    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def _store_errors() -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Store operation failed: %s", exc)
        raise StoreFailure(str(exc)) from exc


def _to_movie(record: MovieRecord) -> Movie:
    return Movie(
        id=record.id,
        name=record.name,
        release_date=record.release_date,
        category=record.category,
        description=record.description,
        image=record.image,
        rating=record.rating,
        cast=frozenset(actor.actor_id for actor in record.cast),
    )


def _to_actor(record: ActorRecord) -> Actor:
    return Actor(id=record.actor_id, name=record.actor_name)


class SqlMovieRepository(MovieRepository):
    """Movie persistence over the ``t_movies`` and ``movie_actors`` tables."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_all(self) -> list[Movie]:
        with _store_errors():
            query = select(MovieRecord).options(selectinload(MovieRecord.cast)).order_by(MovieRecord.id)
            return [_to_movie(record) for record in self.session.execute(query).scalars()]

    def find_by_id(self, movie_id: int) -> Movie:
        with _store_errors():
            return _to_movie(self._get(movie_id))

    def insert(self, movie: Movie) -> Movie:
        with _store_errors():
            record = MovieRecord()
            self._apply(record, movie)
            self.session.add(record)
            self.session.flush()  # assign IDs before leaving scope
            self.session.refresh(record)
            return _to_movie(record)

    def replace(self, movie: Movie) -> Movie:
        with _store_errors():
            record = self._get(movie.id)
            self._apply(record, movie)
            self.session.flush()
            return _to_movie(record)

    def delete_by_id(self, movie_id: int) -> None:
        with _store_errors():
            self.session.delete(self._get(movie_id))
            self.session.flush()

    def _get(self, movie_id: int) -> MovieRecord:
        record = self.session.get(MovieRecord, movie_id) if _storable_key(movie_id) else None
        if record is None:
            raise NotFound("Movie", movie_id)
        return record

    def _apply(self, record: MovieRecord, movie: Movie) -> None:
        cast = self._load_actors(movie.cast)
        record.name = movie.name
        record.release_date = movie.release_date
        record.category = movie.category
        record.description = movie.description
        record.image = movie.image
        record.rating = movie.rating
        record.cast = cast

    def _load_actors(self, actor_ids: Iterable[int]) -> set[ActorRecord]:
        wanted = set(actor_ids)
        if not wanted:
            return set()
        storable = sorted(key for key in wanted if _storable_key(key))
        found: set[ActorRecord] = set()
        if storable:
            query = select(ActorRecord).where(ActorRecord.actor_id.in_(storable))
            found = set(self.session.execute(query).scalars())
        missing = wanted - {actor.actor_id for actor in found}
        if missing:
            raise NotFound("Actor", min(missing))
        return found


class SqlActorRepository(ActorRepository):
    def __init__(self, session: Session) -> None:
        self.session = session

    def find_all(self) -> list[Actor]:
        with _store_errors():
            query = select(ActorRecord).order_by(ActorRecord.actor_id)
            return [_to_actor(record) for record in self.session.execute(query).scalars()]

    def find_by_id(self, actor_id: int) -> Actor:
        with _store_errors():
            return _to_actor(self._get(actor_id))

    def insert(self, actor: Actor) -> Actor:
        with _store_errors():
            record = ActorRecord(actor_name=actor.name)
            self.session.add(record)
            self.session.flush()
            self.session.refresh(record)
            return _to_actor(record)

    def replace(self, actor: Actor) -> Actor:
        with _store_errors():
            record = self._get(actor.id)
            record.actor_name = actor.name
            self.session.flush()
            return _to_actor(record)

    def delete_by_id(self, actor_id: int) -> None:
        with _store_errors():
            self.session.delete(self._get(actor_id))
            self.session.flush()

    def _get(self, actor_id: int) -> ActorRecord:
        record = self.session.get(ActorRecord, actor_id) if _storable_key(actor_id) else None
        if record is None:
            raise NotFound("Actor", actor_id)
        return record


class SqlUserRepository(UserRepository):
    """Writes accounts into the ``users`` and ``authorities`` tables."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def register(self, user: User) -> None:
        with _store_errors():
            if self.session.get(UserRecord, user.username) is not None:
                raise Conflict(f"Username already registered: {user.username}")
            try:
                self.session.add(
                    UserRecord(username=user.username, password=user.password, enabled=user.enabled)
                )
                self.session.flush()
                self.session.add(AuthorityRecord(username=user.username, authority=user.role.value))
                self.session.flush()
            except IntegrityError as exc:
                raise Conflict(f"Username already registered: {user.username}") from exc
