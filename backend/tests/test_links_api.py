from __future__ import annotations

import base64
import os

from backend.app.api.links import get_security_settings
from backend.app.db.links import get_link, put_link
from backend.main import app
from shared.runtime_settings import load_security_settings


def _basic(user: str, password: str) -> dict[str, str]:
    token = base64.b64encode(f"{user}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


ADMIN = _basic("admin", os.environ["PERSONALIZER_API_KEY"])


def test_shorten_and_follow(client, link_conn) -> None:
    res = client.post(
        "/shorten",
        json={"slug": "sam-riley", "target": "https://thrd.me/in/to/island-of-almosts?n=Riley", "data": {"title": "Riley"}},
        headers=ADMIN,
    )
    assert res.status_code == 200
    assert res.text == "Shortened: https://thrd.me/to/sam-riley"
    assert get_link(link_conn, "sam-riley") == {
        "target": "https://thrd.me/in/to/island-of-almosts?n=Riley",
        "title": "Riley",
    }

    res = client.get("/to/sam-riley", follow_redirects=False)
    assert res.status_code == 302
    assert res.headers["location"] == "https://thrd.me/in/to/island-of-almosts?n=Riley"


def test_redirect_prefers_url_field(client, link_conn) -> None:
    put_link(link_conn, "legacy", {"url": "https://example.com/a", "target": "https://example.com/b"})
    res = client.get("/to/legacy", follow_redirects=False)
    assert res.status_code == 302
    assert res.headers["location"] == "https://example.com/a"


def test_unknown_slug_is_404(client) -> None:
    res = client.get("/to/missing", follow_redirects=False)
    assert res.status_code == 404
    payload = res.json()
    assert payload["message"] == "Thread not found."
    assert payload["error_code"] == "LINKS_HTTP_404"


def test_list_all_links(client, link_conn) -> None:
    put_link(link_conn, "b-link", {"target": "https://example.com/b"})
    put_link(link_conn, "a-link", {"target": "https://example.com/a", "note": "first"})
    res = client.get("/to/api/all")
    assert res.status_code == 200
    assert res.json() == [
        {"slug": "a-link", "target": "https://example.com/a", "note": "first"},
        {"slug": "b-link", "target": "https://example.com/b"},
    ]


def test_shorten_overwrites_existing_slug(client, link_conn) -> None:
    for target in ("https://example.com/1", "https://example.com/2"):
        res = client.post("/shorten", json={"slug": "same", "target": target}, headers=ADMIN)
        assert res.status_code == 200
    assert get_link(link_conn, "same") == {"target": "https://example.com/2"}


def test_shorten_requires_auth(client) -> None:
    res = client.post("/shorten", json={"slug": "x", "target": "https://example.com"})
    assert res.status_code == 401
    assert res.headers["www-authenticate"].startswith("Basic realm=")

    res = client.post(
        "/shorten",
        json={"slug": "x", "target": "https://example.com"},
        headers=_basic("admin", "wrong"),
    )
    assert res.status_code == 401


def test_shorten_disabled_without_api_key(client) -> None:
    app.dependency_overrides[get_security_settings] = lambda: load_security_settings({})
    res = client.post("/shorten", json={"slug": "x", "target": "https://example.com"}, headers=_basic("admin", ""))
    assert res.status_code == 401


def test_shorten_rejects_bad_bodies(client) -> None:
    res = client.post("/shorten", content=b"{not json", headers={**ADMIN, "Content-Type": "application/json"})
    assert res.status_code == 400
    assert res.json()["message"] == "Invalid JSON body."

    res = client.post("/shorten", json={"slug": "x"}, headers=ADMIN)
    assert res.status_code == 400
    assert res.json()["message"] == "Missing slug or target."

    res = client.post("/shorten", json={"slug": "a/b", "target": "https://example.com"}, headers=ADMIN)
    assert res.status_code == 400
    assert res.json()["message"].startswith("Invalid slug")

    res = client.post("/shorten", json=["slug", "target"], headers=ADMIN)
    assert res.status_code == 400
