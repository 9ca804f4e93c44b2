import pytest
from fastapi.testclient import TestClient

from conftest import LOGIN_KEY, add_article, add_editor

from ams_api.app.core.db import ARTICLE_SHEET, EDITOR_SHEET
from ams_api.app.main import create_app


@pytest.fixture
def client(store, mailer, settings):
    return TestClient(create_app(store=store, mailer=mailer, config=settings))


def creds(editor):
    return {"authEmail": editor.email, "key": LOGIN_KEY}


def test_list_articles(client, store, editor):
    add_article(store, id="a1", title="Quantum dots")

    resp = client.get("/api/v1/articles/list", params=creds(editor))

    assert resp.status_code == 200
    body = resp.json()
    assert [a["id"] for a in body["message"]] == ["a1"]
    assert body["message"][0]["link"] == "https://docs.google.com/document/d/a1/edit"


def test_path_query_parameter(client, store, editor):
    add_article(store, id="a1")

    resp = client.get("/api/v1/", params={"path": "article/info", "id": "a1", **creds(editor)})

    assert resp.status_code == 200
    assert resp.json()["message"]["id"] == "a1"


def test_no_path_gives_empty_body(client):
    resp = client.get("/api/v1/")

    assert resp.status_code == 200
    assert resp.json() == {}


def test_unauthorized_is_401(client, store):
    add_article(store, id="a1")

    resp = client.post("/api/v1/article/delete", json={"id": "a1"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized", "details": "unauth"}
    assert len(store.get_all_rows(ARTICLE_SHEET)) == 1


def test_unknown_route_is_404(client, editor):
    resp = client.get("/api/v1/journal/list", params=creds(editor))

    assert resp.status_code == 404
    assert "journal" in resp.json()["detail"]


def test_credentials_can_come_from_body(client, store, editor):
    resp = client.post("/api/v1/article/update", json={
        "id": "missing", "properties": {"status": "Published"}, **creds(editor),
    })

    assert resp.status_code == 200
    assert resp.json()["error"] == "NotFound"


def test_update_article_over_http(client, store, editor, mailer):
    add_article(store, id="a1")

    resp = client.post("/api/v1/article/update",
                       json={"id": "a1", "properties": {"status": "Technical Review",
                                                        "deadline": "2024-10-01"}},
                       params=creds(editor))

    body = resp.json()
    assert body["reason"] == "Successful Update"
    assert body["message"]["deadline"] == "2024-10-01"
    assert store.get_all_rows(ARTICLE_SHEET)[0]["deadline"] == "2024-10-01"
    assert len(mailer.of_type("updateArticle")) == 1


def test_login_flow_over_http(client, store, editor, mailer):
    requested = client.post("/api/v1/authentication/requestKey", json={"email": editor.email})
    key = mailer.of_type("authKey")[0].data["key"]
    login = client.get("/api/v1/authentication/authenticate",
                       params={"email": editor.email, "key": key})
    token = login.json()["message"]["authToken"]
    listed = client.get("/api/v1/editors/list",
                        params={"email": editor.email, "authToken": token})

    assert requested.json()["reason"] == "requestKey"
    assert login.status_code == 200
    assert [e["email"] for e in listed.json()["message"]] == [editor.email]


def test_invalid_json_body_is_400(client, editor):
    resp = client.post("/api/v1/article/create", content=b"{not json",
                       headers={"Content-Type": "application/json"}, params=creds(editor))

    assert resp.status_code == 400


def test_subjects_list(client, editor):
    resp = client.get("/api/v1/subjects/list", params=creds(editor))

    assert "Physics" in resp.json()["message"]


def test_editor_looks_up_another_editor(client, store, editor):
    add_editor(store, email="other@example.com", name="Other Editor")

    resp = client.get("/api/v1/editor/info", params={"email": "other@example.com", **creds(editor)})

    assert resp.status_code == 200
    assert resp.json()["message"]["name"] == "Other Editor"


def test_editor_looks_up_self_with_plain_email(client, editor):
    resp = client.get("/api/v1/editor/info", params={"email": editor.email, "key": LOGIN_KEY})

    assert resp.status_code == 200
    assert resp.json()["message"]["email"] == editor.email


def test_create_editor_with_credentials_in_body(client, store, editor, mailer):
    resp = client.post("/api/v1/editor/create", json={
        "email": "new@example.com", "name": "New Editor", **creds(editor),
    })

    assert resp.status_code == 200
    assert resp.json()["reason"] == "createEditor"
    assert [row["email"] for row in store.get_all_rows(EDITOR_SHEET)] == [editor.email, "new@example.com"]
    assert [n.to for n in mailer.of_type("createEditor")] == ["new@example.com"]


def test_update_editor_with_credentials_in_body(client, store, editor):
    add_editor(store, email="other@example.com", name="Other Editor")

    resp = client.post("/api/v1/editor/update", json={
        "email": "other@example.com", "properties": {"school": "North High"}, **creds(editor),
    })

    assert resp.json()["reason"] == "updatedEditor"
    assert store.get_all_rows(EDITOR_SHEET)[1]["school"] == "North High"
