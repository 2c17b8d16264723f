import pytest
from sqlalchemy import func, select

from app.db.models import Episode

pytestmark = pytest.mark.asyncio

POSTER = ("s2.jpg", b"\xff\xd8\xff\xe0", "image/jpeg")


async def _create_episode(client, serie, headers, number=1, **extra):
    return await client.post(
        f"/tv/{serie.id}/season/1/episode",
        json={"name": f"Episode {number}", "number": number, **extra},
        headers=headers,
    )


async def test_list_seasons(client, serie, season):
    resp = await client.get(f"/tv/{serie.id}/season")

    assert resp.status_code == 200
    body = resp.json()
    assert [s["name"] for s in body["items"]] == ["Season 1"]
    assert body["_links"] == {"self": {"href": f"http://test/tv/{serie.id}/season?offset=0&limit=10"}}


async def test_list_seasons_of_unknown_serie(client):
    resp = await client.get("/tv/77/season")

    assert resp.status_code == 404
    assert resp.json() == {"errors": [{"field": "id", "message": "not found"}]}


async def test_create_season(client, serie, admin_headers, uploader):
    resp = await client.post(
        f"/tv/{serie.id}/season",
        data={"name": "Season 2", "number": "2", "airDate": "2009-03-08", "overview": "Worse."},
        files={"image": POSTER},
        headers=admin_headers,
    )

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["serie_id"] == serie.id
    assert body["number"] == 2
    assert body["air_date"] == "2009-03-08"
    assert body["poster"] == "https://images.test/1/s2.jpg"
    assert len(uploader.uploads) == 1


async def test_create_season_number_taken(client, serie, season, admin_headers, uploader):
    resp = await client.post(
        f"/tv/{serie.id}/season",
        data={"name": "Again", "number": "1"},
        files={"image": POSTER},
        headers=admin_headers,
    )

    assert resp.status_code == 400
    assert resp.json() == {"errors": [{"field": "number", "message": "season already exists"}]}
    assert uploader.uploads == []


async def test_create_season_bad_number(client, serie, admin_headers):
    resp = await client.post(
        f"/tv/{serie.id}/season",
        data={"name": "Zero", "number": "0"},
        files={"image": POSTER},
        headers=admin_headers,
    )

    assert resp.status_code == 400
    assert resp.json() == {"errors": [{"field": "number", "message": "number must be an integer larger than 0"}]}


async def test_create_season_requires_admin(client, serie, user_headers):
    resp = await client.post(f"/tv/{serie.id}/season", data={"name": "x", "number": "2"}, headers=user_headers)

    assert resp.status_code == 401
    assert resp.json() == {"error": "insufficient authorization"}


async def test_get_season_with_episodes(client, serie, season, admin_headers):
    assert (await _create_episode(client, serie, admin_headers, 2)).status_code == 201
    assert (await _create_episode(client, serie, admin_headers, 1)).status_code == 201

    resp = await client.get(f"/tv/{serie.id}/season/1")

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["id"] == season.id
    assert [e["number"] for e in body["episodes"]] == [1, 2]


@pytest.mark.parametrize(
    "path, status, errors",
    [
        ("/tv/{id}/season/9", 404, [{"field": "season", "message": "not found"}]),
        ("/tv/{id}/season/x", 400, [{"field": "season", "message": "season must be an integer larger than 0"}]),
        ("/tv/abc/season/1", 400, [{"field": "id", "message": "id must be an integer larger than 0"}]),
    ],
)
async def test_get_season_errors(client, serie, season, path, status, errors):
    resp = await client.get(path.format(id=serie.id))

    assert resp.status_code == status
    assert resp.json() == {"errors": errors}


async def test_delete_season_removes_episodes(client, db_session, serie, season, admin_headers):
    assert (await _create_episode(client, serie, admin_headers)).status_code == 201

    resp = await client.delete(f"/tv/{serie.id}/season/1", headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json() == {}
    assert (await client.get(f"/tv/{serie.id}/season/1")).status_code == 404
    assert (await db_session.execute(select(func.count(Episode.id)))).scalar_one() == 0


async def test_create_episode(client, serie, season, admin_headers):
    resp = await _create_episode(client, serie, admin_headers, 1, airDate="2008-01-20", overview="Pilot.")

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["serie_id"] == serie.id
    assert body["season_id"] == season.id
    assert body["air_date"] == "2008-01-20"
    assert body["overview"] == "Pilot."


async def test_create_episode_number_taken(client, serie, season, admin_headers):
    assert (await _create_episode(client, serie, admin_headers)).status_code == 201

    resp = await _create_episode(client, serie, admin_headers)

    assert resp.status_code == 400
    assert resp.json() == {"errors": [{"field": "number", "message": "episode already exists"}]}


async def test_create_episode_in_unknown_season(client, serie, admin_headers):
    resp = await _create_episode(client, serie, admin_headers)

    assert resp.status_code == 404
    assert {"field": "season", "message": "not found"} in resp.json()["errors"]


async def test_get_and_delete_episode(client, serie, season, admin_headers):
    assert (await _create_episode(client, serie, admin_headers, 3)).status_code == 201
    path = f"/tv/{serie.id}/season/1/episode/3"

    got = await client.get(path)
    assert got.status_code == 200
    assert got.json()["name"] == "Episode 3"

    deleted = await client.delete(path, headers=admin_headers)
    assert deleted.status_code == 200
    assert deleted.json() == {}

    missing = await client.get(path)
    assert missing.status_code == 404
    assert missing.json() == {"errors": [{"field": "episode", "message": "not found"}]}
