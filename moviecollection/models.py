"""SQLAlchemy ORM models.

Movies and actors are linked through the ``movie_actors`` association table.
Cast membership is stored only from the movie side; an actor's filmography
is a query over the same rows.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import Boolean, Column, Date, Float, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


movie_actors = Table(
    "movie_actors",
    Base.metadata,
    Column("movie_id", ForeignKey("t_movies.id", ondelete="CASCADE"), primary_key=True),
    Column("actor_id", ForeignKey("t_actors.actor_id", ondelete="CASCADE"), primary_key=True),
)


class MovieRecord(Base):
    __tablename__ = "t_movies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    release_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    category: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image: Mapped[str | None] = mapped_column(String(512), nullable=True)
    rating: Mapped[float] = mapped_column(Float, default=0.0)

    cast: Mapped[set[ActorRecord]] = relationship(
        secondary=movie_actors,
        collection_class=set,
    )

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"MovieRecord(id={self.id}, name={self.name})"


class ActorRecord(Base):
    __tablename__ = "t_actors"

    actor_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    actor_name: Mapped[str] = mapped_column(String(255), index=True)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"ActorRecord(actor_id={self.actor_id}, actor_name={self.actor_name})"


class UserRecord(Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(128), primary_key=True)
    password: Mapped[str] = mapped_column(String(255))
    enabled: Mapped[bool] = mapped_column(Boolean, default=False)


class AuthorityRecord(Base):
    __tablename__ = "authorities"

    username: Mapped[str] = mapped_column(
        ForeignKey("users.username", ondelete="CASCADE"), primary_key=True
    )
    authority: Mapped[str] = mapped_column(String(64), primary_key=True)
