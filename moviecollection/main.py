"""FastAPI entrypoint wiring the catalog service to its HTTP surface."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date

from fastapi import Depends, FastAPI, HTTPException, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from moviecollection.core.config import get_settings
from moviecollection.db import (
    SqlActorRepository,
    SqlMovieRepository,
    SqlUserRepository,
    get_session,
    init_models,
)
from moviecollection.services.catalog import CatalogService
from moviecollection.services.errors import (
    CatalogError,
    Conflict,
    InvalidRegistration,
    MalformedIdentifier,
    NotFound,
    UnknownActor,
)
from moviecollection.services.models import Actor, Movie, PendingMovie, Role
from moviecollection.services.query import SearchRequest
from moviecollection.services.sorting import SortKey

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Ensure database tables before serving."""

    init_models()
    yield


app = FastAPI(title="Movie Collection", lifespan=lifespan)


def get_catalog_service(session: Session = Depends(get_session)) -> CatalogService:
    settings = get_settings()
    return CatalogService(
        SqlMovieRepository(session),
        SqlActorRepository(session),
        SqlUserRepository(session),
        cast_delimiter=settings.cast_delimiter,
    )


class MovieFields(BaseModel):
    name: str
    release_date: date | None = None
    category: str | None = None
    description: str | None = None
    image: str | None = None
    rating: float = 0.0


class MovieResponse(MovieFields):
    id: int
    cast: list[int] = Field(default_factory=list, description="Actor ids, ascending")


class ActorRequest(BaseModel):
    name: str = Field(..., min_length=1)


class ActorResponse(BaseModel):
    id: int
    name: str


class MovieDetailResponse(BaseModel):
    movie: MovieResponse
    cast: list[ActorResponse]


class CastText(BaseModel):
    text: str = Field(default="", description="Comma-separated actor ids, e.g. '1, 4, 7'")


class PendingMovieBody(BaseModel):
    cast_ref: str = ""
    name: str = ""
    release_date: date | None = None
    category: str | None = None
    description: str | None = None
    image: str | None = None
    rating: float = 0.0


class RegisterRequest(BaseModel):
    username: str = ""
    password: str = ""
    role: Role | None = None


class RegisterResponse(BaseModel):
    username: str
    enabled: bool
    role: Role


@app.get("/movies", response_model=list[MovieResponse])
def search_movies(
    name: str | None = None,
    category: str | None = None,
    actor: str | None = None,
    order_by: SortKey | None = Query(default=None),
    service: CatalogService = Depends(get_catalog_service),
) -> list[MovieResponse]:
    """Apply at most one filter (name, then category, then actor) and an optional sort."""

    request = SearchRequest(name=name, category=category, actor=actor, order_by=order_by)
    try:
        movies = service.search(request)
    except CatalogError as exc:
        raise _to_http_error(exc) from exc
    return [_movie_to_response(movie) for movie in movies]


@app.get("/movies/{movie_id}", response_model=MovieDetailResponse)
def get_movie_detail(
    movie_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> MovieDetailResponse:
    try:
        detail = service.movie_detail(movie_id)
    except CatalogError as exc:
        raise _to_http_error(exc) from exc
    return MovieDetailResponse(
        movie=_movie_to_response(detail.movie),
        cast=[_actor_to_response(actor) for actor in detail.cast],
    )


@app.post("/movies/new", response_model=PendingMovieBody)
def begin_movie_creation(
    payload: CastText,
    service: CatalogService = Depends(get_catalog_service),
) -> PendingMovieBody:
    """First step of movie creation: echo a draft carrying the raw cast text."""

    draft = service.begin_create(payload.text)
    return PendingMovieBody(cast_ref=draft.cast_ref)


@app.post("/movies", response_model=MovieResponse, status_code=status.HTTP_201_CREATED)
def confirm_movie_creation(
    payload: PendingMovieBody,
    service: CatalogService = Depends(get_catalog_service),
) -> MovieResponse:
    draft = PendingMovie(**payload.model_dump())
    try:
        movie = service.confirm_create(draft)
    except CatalogError as exc:
        raise _to_http_error(exc) from exc
    return _movie_to_response(movie)


@app.put("/movies/{movie_id}", response_model=MovieResponse)
def update_movie(
    movie_id: int,
    payload: MovieFields,
    service: CatalogService = Depends(get_catalog_service),
) -> MovieResponse:
    try:
        movie = service.update_core(Movie(id=movie_id, **payload.model_dump()))
    except CatalogError as exc:
        raise _to_http_error(exc) from exc
    return _movie_to_response(movie)


@app.post("/movies/{movie_id}/cast", response_model=MovieResponse)
def attach_movie_cast(
    movie_id: int,
    payload: CastText,
    service: CatalogService = Depends(get_catalog_service),
) -> MovieResponse:
    try:
        movie = service.attach_cast_then_confirm(movie_id, payload.text)
    except CatalogError as exc:
        raise _to_http_error(exc) from exc
    return _movie_to_response(movie)


@app.delete("/movies/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_movie(
    movie_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> Response:
    try:
        service.delete_movie(movie_id)
    except CatalogError as exc:
        raise _to_http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/actors", response_model=list[ActorResponse])
def list_actors(service: CatalogService = Depends(get_catalog_service)) -> list[ActorResponse]:
    try:
        actors = service.list_actors()
    except CatalogError as exc:
        raise _to_http_error(exc) from exc
    return [_actor_to_response(actor) for actor in actors]


@app.post("/actors", response_model=ActorResponse, status_code=status.HTTP_201_CREATED)
def create_actor(
    payload: ActorRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> ActorResponse:
    try:
        actor = service.create_actor(payload.name)
    except CatalogError as exc:
        raise _to_http_error(exc) from exc
    return _actor_to_response(actor)


@app.put("/actors/{actor_id}", response_model=ActorResponse)
def update_actor(
    actor_id: int,
    payload: ActorRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> ActorResponse:
    try:
        actor = service.update_actor(Actor(id=actor_id, name=payload.name))
    except CatalogError as exc:
        raise _to_http_error(exc) from exc
    return _actor_to_response(actor)


@app.get("/actors/{actor_id}/movies", response_model=list[MovieResponse])
def get_actor_filmography(
    actor_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> list[MovieResponse]:
    try:
        movies = service.actor_filmography(actor_id)
    except CatalogError as exc:
        raise _to_http_error(exc) from exc
    return [_movie_to_response(movie) for movie in movies]


@app.delete("/actors/{actor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_actor(
    actor_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> Response:
    try:
        service.delete_actor(actor_id)
    except CatalogError as exc:
        raise _to_http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register_user(
    payload: RegisterRequest,
    service: CatalogService = Depends(get_catalog_service),
) -> RegisterResponse:
    role = payload.role or get_settings().default_role
    try:
        user = service.register_user(payload.username, payload.password, role)
    except CatalogError as exc:
        raise _to_http_error(exc) from exc
    return RegisterResponse(username=user.username, enabled=user.enabled, role=user.role)


@app.get("/rest/movies", response_model=list[MovieResponse])
def rest_list_movies(service: CatalogService = Depends(get_catalog_service)) -> list[MovieResponse]:
    try:
        movies = service.list_movies()
    except Exception as exc:
        logger.exception("Listing movies failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR) from exc
    return [_movie_to_response(movie) for movie in movies]


@app.get("/rest/movie/{movie_id}", response_model=MovieResponse)
def rest_get_movie(
    movie_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> MovieResponse:
    """Read-only lookup: a missing movie is a 404, anything else a bare 500."""

    try:
        movie = service.find_movie(movie_id)
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    except Exception as exc:
        logger.exception("Loading movie %s failed", movie_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR) from exc
    return _movie_to_response(movie)


def _to_http_error(exc: CatalogError) -> HTTPException:
    if isinstance(exc, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (UnknownActor, MalformedIdentifier, InvalidRegistration)):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if isinstance(exc, Conflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    logger.error("Catalog operation failed: %s", exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="The catalog store is unavailable.",
    )


def _movie_to_response(movie: Movie) -> MovieResponse:
    return MovieResponse(
        id=movie.id,
        name=movie.name,
        release_date=movie.release_date,
        category=movie.category,
        description=movie.description,
        image=movie.image,
        rating=movie.rating,
        cast=sorted(movie.cast),
    )


def _actor_to_response(actor: Actor) -> ActorResponse:
    return ActorResponse(id=actor.id, name=actor.name)
