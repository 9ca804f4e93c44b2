"""
Email notifications.

Actions describe what happened as a ``Notification`` (recipient, type
and data) and hand it to ``EmailService.send``.  The service renders a
subject and plain text body for the notification type and POSTs the
message to the configured mail webhook with httpx.  Sending is fire and
forget: delivery problems are logged and never reach the caller.  When
no webhook is configured the message is only logged, which is the
default for local development.
"""

import logging
from typing import Any, Callable, Dict, Optional, Tuple

import httpx
from pydantic import BaseModel, Field

from ..core.config import Settings, settings as default_settings
from .query_service import flatten

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    """A message to be delivered to one recipient."""

    to: Optional[str] = Field(None, example="author@school.edu")
    type: str = Field(..., example="updateArticle")
    data: Dict[str, Any] = Field(default_factory=dict)


def _render_update_article(data: Dict[str, Any]) -> Tuple[str, str]:
    article = data.get("article")
    title = getattr(article, "title", None) or "your article"
    modified = data.get("modified") or {}
    lines = [f"  {key}: {value}" for key, value in modified.items()]
    body = "\n".join(
        [f'There has been an update to "{title}".', "", "Changed:"]
        + (lines or ["  (no visible changes)"])
    )
    link = getattr(article, "link", None)
    if link:
        body += f"\n\nView it at {link}"
    return f"Update: {title}", body


def _render_create_editor(data: Dict[str, Any]) -> Tuple[str, str]:
    editor = data.get("editor")
    name = getattr(editor, "name", None) or "there"
    return (
        "Welcome to the editorial team",
        f"Hi {name},\n\nAn editor account has been created for you. "
        "Request a login key with your email address to sign in.",
    )


def _render_auth_key(data: Dict[str, Any]) -> Tuple[str, str]:
    minutes = data.get("expires_minutes")
    body = f"Your login key is {data.get('key')}."
    if minutes:
        body += f" It expires in {minutes} minutes."
    return "Your login key", body


RENDERERS: Dict[str, Callable[[Dict[str, Any]], Tuple[str, str]]] = {
    "updateArticle": _render_update_article,
    "createEditor": _render_create_editor,
    "authKey": _render_auth_key,
}


class EmailService:
    """Sends notifications through the mail webhook."""

    def __init__(self, config: Optional[Settings] = None) -> None:
        self.settings = config or default_settings

    def render(self, notification: Notification) -> Dict[str, Any]:
        renderer = RENDERERS.get(notification.type)
        if renderer is not None:
            subject, body = renderer(notification.data)
        else:
            subject = notification.type
            body = "\n".join(f"{k}: {v}" for k, v in flatten(notification.data).items())
        return {
            "from": self.settings.mail_sender,
            "to": notification.to,
            "subject": subject,
            "body": body,
            "type": notification.type,
        }

    def send(self, notification: Notification) -> None:
        if not notification.to:
            logger.warning("Dropping %s notification without a recipient", notification.type)
            return
        message = self.render(notification)
        if not self.settings.mail_webhook_url:
            logger.info("Mail delivery disabled; %s to %s: %s",
                        notification.type, notification.to, message["subject"])
            return
        try:
            response = httpx.post(
                self.settings.mail_webhook_url,
                json=message,
                timeout=self.settings.mail_timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Failed to send %s notification to %s: %s",
                         notification.type, notification.to, e)
            return
        logger.info("Sent %s notification to %s", notification.type, notification.to)
