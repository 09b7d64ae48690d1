import os

import pytest
from fastapi.testclient import TestClient

from wordbin.animals import to_u64
from wordbin.errors import PersistenceCorrupt, PersistenceWriteFailed
from wordbin.main import create_app


def _upload(client, **data):
    files = data.pop("files", None)
    data.setdefault("expiration", "never")
    resp = client.post("/upload", data=data, files=files, follow_redirects=False)
    assert resp.status_code == 302, resp.text
    location = resp.headers["location"]
    assert location.startswith("/pasta/")
    return location[len("/pasta/"):]


def test_index_has_form(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert 'action="/upload"' in resp.text
    assert 'name="expiration"' in resp.text


def test_upload_and_view_text(client):
    animals = _upload(client, content="<b>hello</b>", expiration="1hour")

    page = client.get(f"/pasta/{animals}")
    assert page.status_code == 200
    assert "&lt;b&gt;hello&lt;/b&gt;" in page.text

    raw = client.get(f"/raw/{animals}")
    assert raw.status_code == 200
    assert raw.text == "<b>hello</b>"


def test_api_view(client):
    animals = _upload(client, content="hello")

    resp = client.get(f"/api/pastes/{animals}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == animals
    assert body["kind"] == "text"
    assert body["expires_at"] is None
    assert body["file_name"] is None


def test_url_paste_redirects(client):
    animals = _upload(client, content="https://example.com/x")

    resp = client.get(f"/url/{animals}", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "https://example.com/x"


def test_text_paste_is_not_a_url(client):
    animals = _upload(client, content="https://example.com/x please visit")

    resp = client.get(f"/url/{animals}", follow_redirects=False)
    assert resp.status_code == 400


def test_invalid_expiration_is_rejected(client):
    resp = client.post("/upload", data={"content": "x", "expiration": "2min"}, follow_redirects=False)

    assert resp.status_code == 400
    assert client.get("/api/pastes").json() == []


def test_missing_expiration_means_never(client):
    resp = client.post("/upload", data={"content": "x"}, follow_redirects=False)
    animals = resp.headers["location"].rsplit("/", 1)[1]
    assert client.get(f"/api/pastes/{animals}").json()["expires_at"] is None


@pytest.mark.parametrize("animals", ["zebra-zebra-zebra", "not-an-animal", "ant-bee"])
def test_unknown_ids_are_not_found(client, animals):
    page = client.get(f"/pasta/{animals}")
    assert page.status_code == 404
    assert "not found" in page.text

    assert client.get(f"/raw/{animals}").status_code == 404
    assert client.get(f"/url/{animals}").status_code == 404
    assert client.get(f"/remove/{animals}", follow_redirects=False).status_code == 404

    api = client.get(f"/api/pastes/{animals}")
    assert api.status_code == 404
    assert api.json()["error"]["code"] == "not_found"


def test_file_upload(client, settings):
    animals = _upload(
        client,
        content="",
        files={"file": ("my notes.txt", b"file bytes", "text/plain")},
    )
    stored = os.path.join(settings.DATA_DIR, animals, "my_notes.txt")
    assert os.path.isfile(stored)

    body = client.get(f"/api/pastes/{animals}").json()
    assert body["kind"] == "file"
    assert body["file_name"] == "my_notes.txt"

    download = client.get(f"/file/{animals}")
    assert download.status_code == 200
    assert download.content == b"file bytes"

    client.get(f"/remove/{animals}", follow_redirects=False)
    assert not os.path.exists(os.path.join(settings.DATA_DIR, animals))


def test_text_paste_has_no_file(client):
    animals = _upload(client, content="hello")

    resp = client.get(f"/file/{animals}")
    assert resp.status_code == 404
    assert resp.headers["content-type"].startswith("text/html")
    assert "not found" in resp.text


def test_missing_payload_is_not_found(client, settings):
    animals = _upload(client, content="", files={"file": ("a.txt", b"data", "text/plain")})
    os.remove(os.path.join(settings.DATA_DIR, animals, "a.txt"))

    resp = client.get(f"/file/{animals}")
    assert resp.status_code == 404
    assert "not found" in resp.text


def test_failed_upload_discards_payload_and_id(client, settings, monkeypatch):
    store = client.app.state.store

    def fail_save(pastes):
        raise PersistenceWriteFailed("disk full")

    monkeypatch.setattr(store.storage, "save", fail_save)

    resp = client.post(
        "/upload",
        data={"content": "", "expiration": "never"},
        files={"file": ("my notes.txt", b"file bytes", "text/plain")},
        follow_redirects=False,
    )

    assert resp.status_code == 500
    assert store._reserved == set()
    assert store.list() == []
    leftovers = [
        name for name in os.listdir(settings.DATA_DIR)
        if os.path.isdir(os.path.join(settings.DATA_DIR, name))
    ]
    assert leftovers == []


def test_empty_file_name_is_ignored(client):
    animals = _upload(client, content="hello", files={"file": ("", b"", "application/octet-stream")})
    assert client.get(f"/api/pastes/{animals}").json()["kind"] == "text"


def test_remove(client):
    animals = _upload(client, content="bye")

    resp = client.get(f"/remove/{animals}", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/pastalist"
    assert client.get(f"/api/pastes/{animals}").status_code == 404


def test_list(client):
    first = _upload(client, content="one")
    second = _upload(client, content="two")

    page = client.get("/pastalist")
    assert page.status_code == 200
    assert first in page.text and second in page.text

    listed = [p["id"] for p in client.get("/api/pastes").json()]
    assert listed == [first, second]


def test_healthz(client):
    resp = client.get("/api/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_pastes_survive_restart(settings):
    with TestClient(create_app(settings)) as c:
        animals = _upload(c, content="durable")

    assert os.path.isfile(settings.snapshot_path)

    with TestClient(create_app(settings)) as c:
        assert c.get(f"/raw/{animals}").text == "durable"
        assert to_u64(animals) < 2 ** settings.ID_BITS


def test_corrupt_snapshot_refuses_to_start(settings):
    with open(settings.snapshot_path, "w") as f:
        f.write("[{broken")

    with pytest.raises(PersistenceCorrupt):
        create_app(settings)

    with open(settings.snapshot_path) as f:
        assert f.read() == "[{broken"


def test_background_sweeper_starts_and_stops(settings):
    settings.SWEEP_INTERVAL_SECONDS = 3600
    app = create_app(settings)
    with TestClient(app):
        assert app.state.sweeper is not None
        assert not app.state.sweeper.done()
    assert app.state.sweeper.done()
