from __future__ import annotations

import base64
import html
import logging
from email.mime.text import MIMEText
from pathlib import Path
from typing import Any

import anyio
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build

from careerpath.core.config import settings
from careerpath.core.paths import package_root, resolve_repo_path

logger = logging.getLogger("cpm.email")


def _resolve_sender_email() -> str:
    return settings.gmail_sender_email.strip()


def _gmail_client():
    scopes = ["https://www.googleapis.com/auth/gmail.send"]
    service_account_path = settings.google_application_credentials
    sender_email = _resolve_sender_email()
    if not service_account_path:
        raise RuntimeError("Missing service account credentials for Gmail.")
    if not sender_email:
        raise RuntimeError("Missing Gmail sender address.")
    credentials = Credentials.from_service_account_file(str(resolve_repo_path(service_account_path)), scopes=scopes)
    credentials = credentials.with_subject(sender_email)
    return build("gmail", "v1", credentials=credentials, cache_discovery=False)


def _template_path(name: str) -> Path:
    return package_root() / "templates" / "email" / f"{name}.html"


def render_template(name: str, context: dict[str, Any]) -> str:
    raw = _template_path(name).read_text(encoding="utf-8")
    return raw.format_map({k: ("" if v is None else html.escape(str(v))) for k, v in context.items()})


def build_message(*, to_emails: list[str], subject: str, html_body: str) -> str:
    sender = _resolve_sender_email()
    sender_name = settings.gmail_sender_name or "Career Path Manager"
    msg = MIMEText(html_body, "html", "utf-8")
    msg["To"] = ", ".join(to_emails)
    msg["From"] = f"{sender_name} <{sender}>"
    msg["Reply-To"] = sender
    msg["Subject"] = subject
    return base64.urlsafe_b64encode(msg.as_bytes()).decode("utf-8")


def _deliver(raw: str) -> None:
    service = _gmail_client()
    service.users().messages().send(userId=_resolve_sender_email(), body={"raw": raw}).execute()


async def send_email(
    *,
    to_emails: list[str],
    subject: str,
    template_name: str,
    context: dict[str, Any],
    email_type: str,
) -> dict[str, Any]:
    meta: dict[str, Any] = {
        "to": to_emails,
        "subject": subject,
        "template": template_name,
        "email_type": email_type,
    }

    if not to_emails:
        meta["status"] = "skipped"
        meta["reason"] = "missing_recipient"
        logger.info("email_skipped", extra=meta)
        return meta

    if not settings.enable_gmail:
        meta["status"] = "skipped"
        meta["reason"] = "gmail_disabled"
        logger.info("email_skipped", extra=meta)
        return meta

    raw = build_message(to_emails=to_emails, subject=subject, html_body=render_template(template_name, context))
    try:
        await anyio.to_thread.run_sync(_deliver, raw)
        meta["status"] = "sent"
    except Exception as exc:  # noqa: BLE001
        meta["status"] = "failed"
        meta["error"] = str(exc)

    logger.info("email_sent", extra=meta)
    return meta
