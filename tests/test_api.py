import pytest
from fastapi.testclient import TestClient

from moviecollection.main import app, get_catalog_service
from moviecollection.services.catalog import CatalogService
from moviecollection.services.errors import StoreFailure
from moviecollection.services.store import InMemoryCatalogStore


@pytest.fixture
def store():
    return InMemoryCatalogStore()


@pytest.fixture
def client(store):
    service = CatalogService(
        store.movies,
        store.actors,
        store.users,
        password_hasher=lambda raw: f"hashed:{raw}",
    )
    app.dependency_overrides[get_catalog_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_actor(client, name):
    response = client.post("/actors", json={"name": name})
    assert response.status_code == 201
    return response.json()["id"]


def _create_movie(client, cast_ref="", **fields):
    draft = client.post("/movies/new", json={"text": cast_ref}).json()
    draft.update({"name": "The Prestige", "category": "Drama", "rating": 8.5})
    draft.update(fields)
    return client.post("/movies", json=draft)


def test_two_phase_creation(client):
    bale = _create_actor(client, "Christian Bale")
    caine = _create_actor(client, "Michael Caine")

    draft = client.post("/movies/new", json={"text": f"{bale}, {caine}"})
    assert draft.status_code == 200
    assert draft.json()["cast_ref"] == f"{bale}, {caine}"

    response = _create_movie(client, f"{bale}, {caine}", release_date="2006-10-20")
    assert response.status_code == 201
    body = response.json()
    assert body["cast"] == [bale, caine]
    assert body["release_date"] == "2006-10-20"


def test_creation_with_unknown_actor_is_rejected(client, store):
    response = _create_movie(client, "8")
    assert response.status_code == 422
    assert store.movies.find_all() == []


def test_creation_with_malformed_text_is_rejected(client):
    assert _create_movie(client, "1;2").status_code == 422


def test_detail_returns_resolved_cast(client):
    bale = _create_actor(client, "Christian Bale")
    movie_id = _create_movie(client, str(bale)).json()["id"]

    response = client.get(f"/movies/{movie_id}")
    assert response.status_code == 200
    assert response.json()["cast"] == [{"id": bale, "name": "Christian Bale"}]
    assert client.get("/movies/999").status_code == 404


def test_search_with_filter_and_order(client):
    _create_movie(client, name="Batman Begins", rating=8.2)
    _create_movie(client, name="Combat Zone", rating=9.1)
    _create_movie(client, name="Fight Night", rating=6.0)

    response = client.get("/movies", params={"name": "BAT", "order_by": "rating"})
    assert response.status_code == 200
    assert [m["name"] for m in response.json()] == ["Combat Zone", "Batman Begins"]

    assert client.get("/movies", params={"order_by": "popularity"}).status_code == 422


def test_search_by_category_is_exact(client):
    _create_movie(client, name="A", category="drama")
    _create_movie(client, name="B", category="Dramatic")
    response = client.get("/movies", params={"category": "DRAMA"})
    assert [m["name"] for m in response.json()] == ["A"]


def test_edit_fields_then_cast(client):
    bale = _create_actor(client, "Christian Bale")
    caine = _create_actor(client, "Michael Caine")
    movie_id = _create_movie(client, str(bale)).json()["id"]

    updated = client.put(f"/movies/{movie_id}", json={"name": "The Prestige", "rating": 9.0})
    assert updated.status_code == 200
    assert updated.json()["cast"] == [bale]

    for _ in range(2):
        response = client.post(f"/movies/{movie_id}/cast", json={"text": f"{caine},{bale}"})
        assert response.status_code == 200
        assert response.json()["cast"] == [bale, caine]

    assert client.put("/movies/77", json={"name": "x"}).status_code == 404
    assert client.post(f"/movies/{movie_id}/cast", json={"text": "99"}).status_code == 422


def test_delete_movie_and_actor(client):
    bale = _create_actor(client, "Christian Bale")
    movie_id = _create_movie(client, str(bale)).json()["id"]

    assert [m["id"] for m in client.get(f"/actors/{bale}/movies").json()] == [movie_id]
    assert client.delete(f"/actors/{bale}").status_code == 204
    assert client.get(f"/movies/{movie_id}").json()["cast"] == []
    assert client.delete(f"/actors/{bale}").status_code == 404

    assert client.delete(f"/movies/{movie_id}").status_code == 204
    assert client.delete(f"/movies/{movie_id}").status_code == 404


def test_actor_listing_and_rename(client):
    bale = _create_actor(client, "Christian Bale")
    assert client.put(f"/actors/{bale}", json={"name": "C. Bale"}).json()["name"] == "C. Bale"
    assert client.get("/actors").json() == [{"id": bale, "name": "C. Bale"}]
    assert client.put("/actors/42", json={"name": "Nobody"}).status_code == 404
    assert client.post("/actors", json={"name": ""}).status_code == 422


def test_register(client, store):
    response = client.post("/register", json={"username": "neo", "password": "matrix"})
    assert response.status_code == 201
    assert response.json() == {"username": "neo", "enabled": True, "role": "ROLE_USER"}
    assert store.users.users["neo"].password == "hashed:matrix"

    assert client.post("/register", json={"username": "neo", "password": "x"}).status_code == 409
    assert client.post("/register", json={"username": "", "password": "x"}).status_code == 422


def test_rest_surface(client):
    movie_id = _create_movie(client).json()["id"]

    listing = client.get("/rest/movies")
    assert listing.status_code == 200
    assert [m["id"] for m in listing.json()] == [movie_id]

    assert client.get(f"/rest/movie/{movie_id}").json()["name"] == "The Prestige"
    assert client.get("/rest/movie/404").status_code == 404


def test_rest_surface_hides_store_failures(client, store, monkeypatch):
    def _explode(*_args, **_kwargs):
        raise StoreFailure("database unreachable")

    monkeypatch.setattr(store.movies, "find_by_id", _explode)
    monkeypatch.setattr(store.movies, "find_all", _explode)

    response = client.get("/rest/movie/1")
    assert response.status_code == 500
    assert "unreachable" not in response.text
    assert client.get("/rest/movies").status_code == 500
    assert client.get("/movies").status_code == 500
