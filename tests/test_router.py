import asyncio

import pytest

from conftest import LOGIN_KEY, FailingStore, RecordingMailer, add_article, add_editor

from ams_api.app.api.router import Router
from ams_api.app.core.db import ARTICLE_SHEET, EDITOR_SHEET
from ams_api.app.core.errors import RoutingError
from ams_api.app.schemas.request import Credentials, RouterRequest
from ams_api.app.schemas.response import UNAUTHORIZED, ErrorKind, Response
from ams_api.app.services.ams_service import AMSService


def run(coro):
    return asyncio.run(coro)


def signed_in(editor):
    return Credentials(email=editor.email, key=LOGIN_KEY)


def route(ams, method="GET", path=None, params=None, body=None, credentials=None):
    request = RouterRequest(
        method=method,
        path=path,
        params=params or {},
        body=body or {},
        credentials=credentials or Credentials(),
    )
    return run(Router(request, ams).route())


def test_path_is_split_into_context_and_action(ams):
    router = Router(RouterRequest(path="/article//update/"), ams)

    assert router.paths == ["article", "update"]
    assert router.context == "article"
    assert router.action == "update"


def test_empty_path_returns_empty_response(ams):
    result = route(ams, path="")

    assert isinstance(result, Response)
    assert result.to_dict() == {}


def test_unknown_context_raises(ams, editor):
    with pytest.raises(RoutingError, match="No such context exists: journal"):
        route(ams, path="journal/list", credentials=signed_in(editor))


def test_context_is_looked_up_per_method(ams, editor):
    with pytest.raises(RoutingError, match="No such context exists: articles"):
        route(ams, method="POST", path="articles/list", credentials=signed_in(editor))


def test_unknown_action_raises_naming_both(ams, editor):
    with pytest.raises(RoutingError, match="No such action publish exists for context article"):
        route(ams, method="POST", path="article/publish", credentials=signed_in(editor))


def test_context_without_actions_raises(ams):
    class BrokenRouter(Router):
        @property
        def allowed_routes(self):
            return {"GET": {"article": None, "misc": "not a table"}}

    with pytest.raises(RoutingError, match="has no actions"):
        run(BrokenRouter(RouterRequest(path="misc/list"), ams).route())


def test_routing_errors_are_raised_before_authentication(ams):
    with pytest.raises(RoutingError):
        route(ams, path="journal/list")


def test_unauthenticated_request_runs_no_handler(ams, store, mailer):
    result = route(ams, method="POST", path="editor/create",
                   body={"email": "lee@example.com", "name": "Lee"},
                   credentials=Credentials(email="lee@example.com", key="000000"))

    assert result is UNAUTHORIZED
    assert store.get_all_rows(EDITOR_SHEET) == []
    assert mailer.sent == []


def test_only_matched_handler_runs(ams, store, editor, mailer):
    add_article(store, id="a1")

    result = route(ams, method="POST", path="article/delete", body={"id": "a1"},
                   credentials=signed_in(editor))

    assert result.message == {"id": "a1"}
    assert store.get_all_rows(ARTICLE_SHEET) == []
    assert len(store.get_all_rows(EDITOR_SHEET)) == 1
    assert mailer.sent == []


def test_authenticated_get_uses_params(ams, store, editor):
    add_article(store, id="a1", subject="Physics")
    add_article(store, id="a2", subject="Biology")

    result = route(ams, path="articles/list", params={"q": "subject:Biology"},
                   credentials=signed_in(editor))

    assert [a.id for a in result.message] == ["a2"]


def test_authentication_context_bypasses_gate(ams, editor, mailer):
    result = route(ams, method="POST", path="authentication/requestKey",
                   body={"email": editor.email})

    assert result.reason == "requestKey"
    assert len(mailer.of_type("authKey")) == 1


def test_authentication_returns_token(ams, editor):
    result = route(ams, path="authentication/authenticate", credentials=signed_in(editor))

    assert result.reason == "authenticated"
    assert result.message["authToken"]


def test_failed_login_is_not_the_gate_marker(ams, editor):
    result = route(ams, path="authentication/authenticate",
                   credentials=Credentials(email=editor.email, key="000000"))

    assert result is not UNAUTHORIZED
    assert result.error == ErrorKind.UNAUTHORIZED


def test_gate_storage_failure_is_reported():
    ams = AMSService(FailingStore(), RecordingMailer())

    result = route(ams, path="editors/list", credentials=Credentials(email="e@x.org", key="1"))

    assert result.error == ErrorKind.STORAGE


def test_credentials_prefer_auth_email_over_target_email():
    credentials = Credentials.from_sources(
        {"email": "target@example.com"},
        {"authEmail": "caller@example.com", "key": LOGIN_KEY},
    )

    assert credentials.email == "caller@example.com"
    assert credentials.key == LOGIN_KEY


def test_credentials_fall_back_to_email_and_skip_empty_values():
    credentials = Credentials.from_sources(
        {"email": "caller@example.com", "key": ""},
        {"key": "654321", "authToken": None},
    )

    assert credentials.email == "caller@example.com"
    assert credentials.key == "654321"
    assert credentials.authToken is None


def test_editor_info_targets_another_editor(ams, store, editor):
    add_editor(store, email="other@example.com", name="Other")

    result = route(ams, path="editor/info", params={"email": "other@example.com"},
                   credentials=signed_in(editor))

    assert result.message.name == "Other"
