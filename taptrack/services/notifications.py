"""
Lead notification email via the Resend HTTP API.
Runs after the capture response; failures only produce a warning.
"""
from dataclasses import dataclass
from html import escape
from typing import Optional

import httpx
import structlog

from ..config import settings
from ..models.models import Lead, Rep


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LeadNotice:
    rep_name: str
    rep_email: Optional[str]
    lead_name: str
    lead_phone: Optional[str]
    lead_email: Optional[str]
    lead_address: Optional[str]
    lead_notes: Optional[str]

    @classmethod
    def from_lead(cls, lead: Lead, rep: Rep) -> "LeadNotice":
        # Plain values only: the ORM session is closed before the task runs
        return cls(
            rep_name=rep.name,
            rep_email=rep.email,
            lead_name=lead.name,
            lead_phone=lead.phone,
            lead_email=lead.email,
            lead_address=lead.address,
            lead_notes=lead.notes,
        )


def _row(label: str, value: Optional[str]) -> str:
    return (
        f'<tr><td style="padding:8px;font-weight:bold;color:#555">{escape(label)}</td>'
        f'<td style="padding:8px">{escape(value) if value else "-"}</td></tr>'
    )


def render_lead_email(notice: LeadNotice) -> str:
    rows = "".join([
        _row("Lead Name", notice.lead_name),
        _row("Phone", notice.lead_phone),
        _row("Email", notice.lead_email),
        _row("Address", notice.lead_address),
        _row("Rep", notice.rep_name),
        _row("Notes", notice.lead_notes),
    ])
    return (
        '<div style="font-family:sans-serif;max-width:560px;margin:auto">'
        '<h2 style="color:#1a1a1a">New NFC Lead</h2>'
        f'<table style="width:100%;border-collapse:collapse">{rows}</table>'
        f'<p style="color:#888;font-size:12px;margin-top:24px">Sent by {escape(settings.app_name)}</p>'
        '</div>'
    )


def send_lead_notification(notice: LeadNotice, client: Optional[httpx.Client] = None) -> bool:
    """Returns True when the provider accepted the message."""
    if not settings.resend_api_key or not settings.leads_notify_email:
        logger.warning("lead_notification_skipped", reason="RESEND_API_KEY or LEADS_NOTIFY_EMAIL not set")
        return False

    body = {
        "from": settings.mail_from,
        "to": [settings.leads_notify_email],
        "subject": f"New Lead - {notice.lead_name} via {notice.rep_name}",
        "html": render_lead_email(notice),
    }
    headers = {"Authorization": f"Bearer {settings.resend_api_key}"}
    try:
        if client is None:
            with httpx.Client(timeout=15.0) as c:
                res = c.post(settings.resend_api_url, json=body, headers=headers)
        else:
            res = client.post(settings.resend_api_url, json=body, headers=headers)
    except httpx.HTTPError as e:
        logger.warning("lead_notification_failed", error=str(e))
        return False
    if res.status_code >= 400:
        logger.warning("lead_notification_failed", status=res.status_code, body=res.text[:500])
        return False
    logger.info("lead_notification_sent", lead_name=notice.lead_name, rep_name=notice.rep_name)
    return True
