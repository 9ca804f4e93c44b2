import httpx

from ams_api.app.core.config import Settings
from ams_api.app.schemas.article import Article
from ams_api.app.services.email_service import EmailService, Notification


class StubResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            request = httpx.Request("POST", "https://mail.test/send")
            raise httpx.HTTPStatusError(
                "failed", request=request, response=httpx.Response(self.status_code, request=request)
            )


def capture_posts(monkeypatch, status_code=200):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append({"url": url, "json": json, "timeout": timeout})
        return StubResponse(status_code)

    monkeypatch.setattr("ams_api.app.services.email_service.httpx.post", fake_post)
    return calls


def test_render_update_article():
    service = EmailService(Settings(mail_sender="ams@test"))
    article = Article(id="a1", title="Soil microbes")

    message = service.render(Notification(
        to="author@school.edu",
        type="updateArticle",
        data={"article": article, "modified": {"status": "Published"}},
    ))

    assert message["from"] == "ams@test"
    assert message["subject"] == "Update: Soil microbes"
    assert "status: Published" in message["body"]
    assert article.link in message["body"]


def test_render_auth_key():
    message = EmailService(Settings()).render(Notification(
        to="e@x.org", type="authKey", data={"key": "123456", "expires_minutes": 30},
    ))

    assert "123456" in message["body"]
    assert "30 minutes" in message["body"]


def test_send_posts_to_webhook(monkeypatch):
    calls = capture_posts(monkeypatch)
    service = EmailService(Settings(mail_webhook_url="https://mail.test/send", mail_timeout=3))

    service.send(Notification(to="e@x.org", type="createEditor", data={}))

    assert len(calls) == 1
    assert calls[0]["url"] == "https://mail.test/send"
    assert calls[0]["json"]["to"] == "e@x.org"
    assert calls[0]["timeout"] == 3


def test_send_without_webhook_or_recipient_does_not_post(monkeypatch):
    calls = capture_posts(monkeypatch)

    EmailService(Settings(mail_webhook_url="")).send(Notification(to="e@x.org", type="authKey"))
    EmailService(Settings(mail_webhook_url="https://mail.test/send")).send(
        Notification(to=None, type="authKey")
    )

    assert calls == []


def test_delivery_failure_is_logged_not_raised(monkeypatch, caplog):
    capture_posts(monkeypatch, status_code=502)
    service = EmailService(Settings(mail_webhook_url="https://mail.test/send"))

    service.send(Notification(to="e@x.org", type="authKey", data={"key": "1"}))

    assert "Failed to send authKey notification" in caplog.text
