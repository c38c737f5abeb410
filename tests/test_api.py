import uuid
from pathlib import Path

from sqlalchemy import text

from app.core.exceptions import StorageError
from app.main import app
from app.models import VisibilityType
from app.services.qr_encoder import QREncoder
from app.services.storage import LocalImageStorage, get_image_storage
from app.services.token_generator import TokenGenerator
from tests.conftest import WEB_PREFIX, auth_headers

API = "/api/v1"


class RepeatingTokenGenerator(TokenGenerator):
    def __init__(self, token):
        self.token = token

    def generate(self) -> uuid.UUID:
        return self.token


class UnwritableStorage(LocalImageStorage):
    def store(self, data, file_name, context, content_type=None):
        raise StorageError("Could not store image")


def local_file(storage, url):
    return Path(storage.root) / url[len(WEB_PREFIX):]


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


async def test_users_me(client, seed):
    user_id = await seed.user("mira")

    resp = await client.get(f"{API}/users/me", headers=auth_headers(user_id))

    assert resp.status_code == 200
    assert resp.json()["nickname"] == "mira"
    assert resp.json()["role"] == "artist"


async def test_generate_requires_authentication(client, seed):
    owner = await seed.user()
    artwork_id = await seed.artwork(owner)

    resp = await client.post(f"{API}/qr/generate", json={"artwork_id": artwork_id})

    assert resp.status_code == 401
    assert resp.json()["code"] == "A001"
    assert resp.headers["www-authenticate"] == "Bearer"


async def test_generate_rejects_bad_token(client, seed):
    owner = await seed.user()
    artwork_id = await seed.artwork(owner)

    resp = await client.post(
        f"{API}/qr/generate",
        json={"artwork_id": artwork_id},
        headers={"Authorization": "Bearer not-a-jwt"},
    )

    assert resp.status_code == 401


async def test_generate_by_non_owner_is_forbidden(client, seed):
    owner = await seed.user("owner")
    stranger = await seed.user("stranger")
    artwork_id = await seed.artwork(owner)

    resp = await client.post(
        f"{API}/qr/generate", json={"artwork_id": artwork_id}, headers=auth_headers(stranger)
    )

    assert resp.status_code == 403
    assert resp.json() == {
        "status": 403,
        "code": "W003",
        "message": "You do not have access to this artwork",
    }


async def test_generate_for_unknown_artwork(client, seed):
    user_id = await seed.user()

    resp = await client.post(
        f"{API}/qr/generate", json={"artwork_id": 9999}, headers=auth_headers(user_id)
    )

    assert resp.status_code == 404
    assert resp.json()["code"] == "W001"


async def test_generate_validates_body(client, seed):
    user_id = await seed.user()

    resp = await client.post(
        f"{API}/qr/generate", json={"artwork_id": 0}, headers=auth_headers(user_id)
    )

    assert resp.status_code == 422


async def test_qr_lifecycle(client, seed, storage):
    owner = await seed.user("painter")
    headers = auth_headers(owner)

    resp = await client.post(
        f"{API}/artworks",
        json={"title": "Night Bloom", "glb_url": "https://cdn.livingbrush.test/glb/bloom.glb"},
        headers=headers,
    )
    assert resp.status_code == 201
    artwork = resp.json()
    assert artwork["visibility"] == "private"
    artwork_id = artwork["artwork_id"]

    resp = await client.patch(
        f"{API}/artworks/{artwork_id}/visibility", json={"visibility": "public"}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["visibility"] == "public"

    resp = await client.post(f"{API}/qr/generate", json={"artwork_id": artwork_id}, headers=headers)
    assert resp.status_code == 200
    first = resp.json()
    assert local_file(storage, first["qr_image_url"]).exists()

    # anonymous scan of a public artwork
    resp = await client.get(f"{API}/qr/scan/{first['qr_token']}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["artwork_id"] == artwork_id
    assert body["title"] == "Night Bloom"
    assert body["owner_nickname"] == "painter"
    assert body["qr_image_url"] == first["qr_image_url"]

    resp = await client.post(f"{API}/qr/generate", json={"artwork_id": artwork_id}, headers=headers)
    second = resp.json()
    assert second["qr_token"] != first["qr_token"]

    resp = await client.get(f"{API}/qr/scan/{first['qr_token']}")
    assert resp.status_code == 404
    assert resp.json()["code"] == "Q002"

    resp = await client.get(f"{API}/qr/scan/{second['qr_token']}")
    assert resp.status_code == 200

    resp = await client.get(f"{API}/qr/artworks/{artwork_id}/history", headers=headers)
    assert resp.status_code == 200
    history = resp.json()
    assert [h["qr_token"] for h in history] == [second["qr_token"], first["qr_token"]]
    assert [h["is_active"] for h in history] == [True, False]


async def test_history_is_owner_only(client, seed):
    owner = await seed.user("owner")
    stranger = await seed.user("stranger")
    artwork_id = await seed.artwork(owner)

    resp = await client.get(
        f"{API}/qr/artworks/{artwork_id}/history", headers=auth_headers(stranger)
    )

    assert resp.status_code == 403


async def test_scan_unknown_and_malformed_tokens(client):
    resp = await client.get(f"{API}/qr/scan/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json() == {"status": 404, "code": "Q002", "message": "QR code not found"}

    resp = await client.get(f"{API}/qr/scan/not-a-uuid")
    assert resp.status_code == 422


async def test_private_artwork_scan(client, seed):
    owner = await seed.user("owner", user_id=7)
    visitor = await seed.user("visitor", user_id=3)
    await seed.artwork(owner, artwork_id=99, visibility=VisibilityType.PRIVATE)

    resp = await client.post(f"{API}/qr/generate", json={"artwork_id": 99}, headers=auth_headers(7))
    assert resp.status_code == 200
    token = resp.json()["qr_token"]

    resp = await client.get(f"{API}/qr/scan/{token}", headers=auth_headers(visitor))
    assert resp.status_code == 404
    assert resp.json()["code"] == "Q002"

    resp = await client.get(f"{API}/qr/scan/{token}")
    assert resp.status_code == 404
    assert resp.json()["code"] == "Q002"

    resp = await client.get(f"{API}/qr/scan/{token}", headers=auth_headers(7))
    assert resp.status_code == 200
    assert resp.json()["artwork_id"] == 99


async def test_private_artwork_hidden_from_non_owner(client, seed):
    owner = await seed.user("owner")
    stranger = await seed.user("stranger")
    artwork_id = await seed.artwork(owner, visibility=VisibilityType.PRIVATE)

    resp = await client.get(f"{API}/artworks/{artwork_id}", headers=auth_headers(stranger))
    assert resp.status_code == 404

    resp = await client.get(f"{API}/artworks/{artwork_id}", headers=auth_headers(owner))
    assert resp.status_code == 200
    assert resp.json()["user_id"] == owner


async def test_create_artwork_rejects_blank_title(client, seed):
    owner = await seed.user()

    resp = await client.post(
        f"{API}/artworks",
        json={"title": "   ", "glb_url": "https://cdn.livingbrush.test/glb/x.glb"},
        headers=auth_headers(owner),
    )

    assert resp.status_code == 422


async def test_delete_artwork_invalidates_its_codes(client, seed, storage):
    owner = await seed.user()
    headers = auth_headers(owner)
    artwork_id = await seed.artwork(owner, media_urls=["https://cdn.livingbrush.test/a.png"])

    first = (await client.post(f"{API}/qr/generate", json={"artwork_id": artwork_id}, headers=headers)).json()
    await client.get(f"{API}/qr/scan/{first['qr_token']}")
    second = (await client.post(f"{API}/qr/generate", json={"artwork_id": artwork_id}, headers=headers)).json()

    resp = await client.delete(f"{API}/artworks/{artwork_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"status": "success"}

    for issued in (first, second):
        resp = await client.get(f"{API}/qr/scan/{issued['qr_token']}")
        assert resp.status_code == 404
        assert resp.json()["code"] == "Q002"
        assert not local_file(storage, issued["qr_image_url"]).exists()

    resp = await client.get(f"{API}/artworks/{artwork_id}", headers=headers)
    assert resp.status_code == 404


async def test_delete_by_non_owner_is_forbidden(client, seed):
    owner = await seed.user("owner")
    stranger = await seed.user("stranger")
    artwork_id = await seed.artwork(owner)

    resp = await client.delete(f"{API}/artworks/{artwork_id}", headers=auth_headers(stranger))

    assert resp.status_code == 403
    assert resp.json()["code"] == "W003"


async def test_generate_exhaustion_keeps_previous_code(client, seed, monkeypatch):
    owner = await seed.user()
    headers = auth_headers(owner)
    artwork_id = await seed.artwork(owner)
    first = (await client.post(f"{API}/qr/generate", json={"artwork_id": artwork_id}, headers=headers)).json()

    monkeypatch.setattr(
        "app.api.deps.token_generator", RepeatingTokenGenerator(uuid.UUID(first["qr_token"]))
    )
    resp = await client.post(f"{API}/qr/generate", json={"artwork_id": artwork_id}, headers=headers)

    assert resp.status_code == 500
    assert resp.json()["code"] == "Q004"
    resp = await client.get(f"{API}/qr/scan/{first['qr_token']}")
    assert resp.status_code == 200


async def test_generate_encoding_failure_is_a_bad_request(client, seed, monkeypatch):
    owner = await seed.user()
    headers = auth_headers(owner)
    artwork_id = await seed.artwork(owner)
    # a border this wide leaves no room for modules in a 300px image
    monkeypatch.setattr("app.api.deps.qr_encoder", QREncoder(border=140))

    resp = await client.post(f"{API}/qr/generate", json={"artwork_id": artwork_id}, headers=headers)

    assert resp.status_code == 400
    assert resp.json()["code"] == "Q005"
    history = await client.get(f"{API}/qr/artworks/{artwork_id}/history", headers=headers)
    assert history.json() == []


async def test_generate_image_storage_failure(client, seed, tmp_path):
    owner = await seed.user()
    headers = auth_headers(owner)
    artwork_id = await seed.artwork(owner)
    app.dependency_overrides[get_image_storage] = lambda: UnwritableStorage(
        str(tmp_path / "unwritable"), WEB_PREFIX
    )

    resp = await client.post(f"{API}/qr/generate", json={"artwork_id": artwork_id}, headers=headers)

    assert resp.status_code == 500
    assert resp.json() == {"status": 500, "code": "S001", "message": "Could not store image"}
    history = await client.get(f"{API}/qr/artworks/{artwork_id}/history", headers=headers)
    assert history.json() == []


async def test_database_failure_maps_to_storage_error(client, seed, engine):
    owner = await seed.user()
    artwork_id = await seed.artwork(owner)
    async with engine.begin() as conn:
        await conn.execute(text("DROP TABLE qr_scan_history"))
        await conn.execute(text("DROP TABLE qr_codes"))

    resp = await client.get(f"{API}/qr/scan/{uuid.uuid4()}")
    assert resp.status_code == 500
    assert resp.json()["code"] == "S001"

    resp = await client.get(
        f"{API}/qr/artworks/{artwork_id}/history", headers=auth_headers(owner)
    )
    assert resp.status_code == 500
    assert resp.json()["code"] == "S001"
