import sys
import time
from pathlib import Path

import pytest

# Allow tests to import the package without installation
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ams_api.app.core.config import Settings  # noqa: E402
from ams_api.app.core.db import ARTICLE_SHEET, EDITOR_SHEET, KEY_SHEET, MemorySheetStore  # noqa: E402
from ams_api.app.core.errors import StoreError  # noqa: E402
from ams_api.app.core.security import hash_key  # noqa: E402
from ams_api.app.schemas.article import Article, Author  # noqa: E402
from ams_api.app.schemas.editor import Editor  # noqa: E402
from ams_api.app.services.ams_service import AMSService  # noqa: E402
from ams_api.app.services.auth_service import AuthService  # noqa: E402

LOGIN_KEY = "123456"


class RecordingMailer:
    """Collects notifications instead of sending them."""

    def __init__(self):
        self.sent = []

    def send(self, notification):
        self.sent.append(notification)

    def of_type(self, type_):
        return [n for n in self.sent if n.type == type_]


class FailingStore(MemorySheetStore):
    """A store whose every operation fails like an unreachable backend."""

    def get_all_rows(self, table):
        raise StoreError("backend unavailable")

    def append_row(self, table, row):
        raise StoreError("backend unavailable")

    def update_row(self, table, match, row):
        raise StoreError("backend unavailable")

    def delete_row(self, table, match):
        raise StoreError("backend unavailable")


def add_editor(store, email="editor@example.com", name="Jane Doe", **fields):
    editor = Editor(email=email, name=name, **fields)
    store.append_row(EDITOR_SHEET, editor.to_row())
    return editor


def add_article(store, id="a1", title="Soil microbes", subject="Biology", type="Blog",
                status="In Review", author_email="author@school.edu", **fields):
    article = Article(
        id=id,
        date="2024-01-15",
        title=title,
        subject=subject,
        type=type,
        status=status,
        author=Author(email=author_email, name="Sam Smith", school="Springfield High"),
        **fields,
    )
    store.append_row(ARTICLE_SHEET, article.to_row())
    return article


def add_key(store, email="editor@example.com", key=LOGIN_KEY, ttl=600):
    store.append_row(KEY_SHEET, [email, hash_key(key), str(int(time.time()) + ttl)])


@pytest.fixture
def settings():
    return Settings(mail_webhook_url="", key_expire_minutes=30, access_token_expire_minutes=60)


@pytest.fixture
def store():
    return MemorySheetStore()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def auth(store, mailer, settings):
    return AuthService(store, mailer, settings)


@pytest.fixture
def ams(store, mailer, auth):
    return AMSService(store, mailer, auth)


@pytest.fixture
def editor(store):
    """A registered editor holding a valid login key."""
    created = add_editor(store)
    add_key(store, created.email)
    return created
