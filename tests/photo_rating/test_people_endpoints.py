import io

import jwt
import numpy as np
import pytest
from fastapi.testclient import TestClient

from photo_rating.app import check_config, create_app
from photo_rating.models.app_config import AppConfig
from photo_rating.services.auth import ADMIN_ID
from photo_rating.utils.image_processing import bytes2pil, np2pil, pil2bytes

JWT_SECRET = "test-secret"

image_0 = np.ones((600, 800, 3), dtype="uint8") * 127
image_1 = np.ones((40, 60, 3), dtype="uint8") * 200


def png_bytes(array: np.ndarray) -> bytes:
    byte_arr = io.BytesIO()
    np2pil(array).save(byte_arr, format="PNG")
    return byte_arr.getvalue()


def make_config(db_path, **kwargs) -> AppConfig:
    settings = {"sql_lite_path": str(db_path), "enable_auth": False}
    settings.update(kwargs)
    return AppConfig(_env_file=None, **settings)


@pytest.fixture(scope="function")
def prepare_db(tmp_path):
    db_path = tmp_path / "db"
    db_path.mkdir()
    app = create_app(make_config(db_path))

    with TestClient(app) as client:
        yield client, app.state.db


@pytest.fixture(scope="function")
def prepare_db_with_auth(tmp_path):
    db_path = tmp_path / "db"
    db_path.mkdir()
    app = create_app(make_config(db_path, enable_auth=True, jwt_secret=JWT_SECRET))

    with TestClient(app) as client:
        yield client


def post_person(client, name: str, image_bytes: bytes, headers=None):
    return client.post(
        "/admin/people",
        files={"file": ("photo", image_bytes, "application/octet-stream")},
        data={"name": name},
        headers=headers or {},
    )


def test_create_person_with_jpeg(prepare_db):
    # pylint: disable=redefined-outer-name
    client, db = prepare_db
    response = post_person(client, "Ada", pil2bytes(np2pil(image_0)))
    assert response.status_code == 201

    person_id = int(response.headers["person_id"])
    person = db.read_person(person_id)
    assert person.name == "Ada"
    assert person.image_format == "JPEG"

    response = client.get(f"/images/{person_id}")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/jpeg"
    assert response.headers["cache-control"] == "public, max-age=86400"
    image = bytes2pil(response.content)
    assert image.format == "JPEG"
    assert image.size == (512, 384)


def test_create_person_with_png_stores_upload_unchanged(prepare_db):
    # pylint: disable=redefined-outer-name
    client, db = prepare_db
    image_bytes = png_bytes(image_0)
    response = post_person(client, "Grace", image_bytes)
    assert response.status_code == 201

    person_id = int(response.headers["person_id"])
    assert db.read_person_image(person_id) == (image_bytes, "PNG")

    response = client.get(f"/images/{person_id}")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content == image_bytes


def test_create_person_with_unknown_bytes(prepare_db):
    # pylint: disable=redefined-outer-name
    client, _ = prepare_db
    image_bytes = b"no image header here" * 40
    response = post_person(client, "Linus", image_bytes)
    assert response.status_code == 201

    response = client.get(f"/images/{response.headers['person_id']}")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/octet-stream"
    assert response.content == image_bytes


def test_create_person_with_broken_jpeg_is_rejected(prepare_db):
    # pylint: disable=redefined-outer-name
    client, db = prepare_db
    rng = np.random.default_rng(0)
    image_bytes = pil2bytes(np2pil(rng.integers(0, 256, (200, 300, 3), dtype="uint8")))
    response = post_person(client, "Broken", image_bytes[: len(image_bytes) // 2])
    assert response.status_code == 422
    assert response.json()["detail"].startswith("Failed to process image")
    assert db.read_people() == []


def test_create_person_with_oversized_jpeg_is_rejected(prepare_db):
    # pylint: disable=redefined-outer-name
    client, db = prepare_db
    image_bytes = bytearray(pil2bytes(np2pil(image_1[:8, :8])))
    sof = image_bytes.index(b"\xff\xc0")
    image_bytes[sof + 5 : sof + 9] = (15000).to_bytes(2, "big") * 2
    response = post_person(client, "Huge", bytes(image_bytes))
    assert response.status_code == 422
    assert db.read_people() == []


def test_create_person_with_invalid_input(prepare_db):
    # pylint: disable=redefined-outer-name
    client, db = prepare_db
    assert post_person(client, "Empty", b"").status_code == 400
    assert post_person(client, "   ", pil2bytes(np2pil(image_1))).status_code == 400
    assert db.read_people() == []


def test_list_people(prepare_db):
    # pylint: disable=redefined-outer-name
    client, _ = prepare_db
    ids = {}
    for name in ["Margaret", "Alan", "Barbara"]:
        response = post_person(client, name, pil2bytes(np2pil(image_1)))
        ids[name] = int(response.headers["person_id"])

    response = client.get("/people")
    assert response.status_code == 200
    assert response.json() == {
        "people": [
            {"id": ids[name], "name": name, "image_url": f"/images/{ids[name]}"}
            for name in ["Alan", "Barbara", "Margaret"]
        ]
    }

    response = client.get(f"/people/{ids['Alan']}")
    assert response.status_code == 200
    assert response.json()["name"] == "Alan"


@pytest.mark.parametrize("path", ["/people/abc", "/people/0", "/people/-3", "/images/abc", "/images/0"])
def test_invalid_person_id(prepare_db, path):
    # pylint: disable=redefined-outer-name
    client, _ = prepare_db
    assert client.get(path).status_code == 400


@pytest.mark.parametrize("path", ["/people/999", "/images/999"])
def test_unknown_person_id(prepare_db, path):
    # pylint: disable=redefined-outer-name
    client, _ = prepare_db
    assert client.get(path).status_code == 404


def test_delete_person(prepare_db):
    # pylint: disable=redefined-outer-name
    client, db = prepare_db
    response = post_person(client, "Ada", pil2bytes(np2pil(image_1)))
    person_id = int(response.headers["person_id"])

    response = client.delete(f"/admin/people/{person_id}")
    assert response.status_code == 200
    assert not db.person_exists(person_id)
    assert client.get(f"/images/{person_id}").status_code == 404
    assert client.delete(f"/admin/people/{person_id}").status_code == 404


def test_admin_endpoints_require_api_key(prepare_db_with_auth):
    # pylint: disable=redefined-outer-name
    client = prepare_db_with_auth
    image_bytes = pil2bytes(np2pil(image_1))

    assert post_person(client, "Ada", image_bytes).status_code == 403
    wrong_id = jwt.encode({"id": "someone-else"}, JWT_SECRET, algorithm="HS256")
    assert post_person(client, "Ada", image_bytes, headers={"api_key": wrong_id}).status_code == 403
    wrong_secret = jwt.encode({"id": ADMIN_ID}, "other-secret", algorithm="HS256")
    assert post_person(client, "Ada", image_bytes, headers={"api_key": wrong_secret}).status_code == 403

    api_key = jwt.encode({"id": ADMIN_ID}, JWT_SECRET, algorithm="HS256")
    response = post_person(client, "Ada", image_bytes, headers={"api_key": api_key})
    assert response.status_code == 201

    # public endpoints stay open
    assert client.get("/people").status_code == 200
    assert client.get(f"/images/{response.headers['person_id']}").status_code == 200


def test_check_config(tmp_path):
    with pytest.raises(ValueError):
        check_config(make_config(tmp_path, enable_auth=True, jwt_secret=""))
    with pytest.raises(ValueError):
        check_config(make_config(""))
    with pytest.raises(ValueError):
        check_config(make_config(tmp_path, image_quality=0))
    assert check_config(make_config(tmp_path)) is None
    assert check_config(make_config(tmp_path, enable_documentation=True)) == "/documentation"
