import json

import httpx

from taptrack.config import settings
from taptrack.services.notifications import LeadNotice, render_lead_email, send_lead_notification


NOTICE = LeadNotice(
    rep_name="Rep Seven",
    rep_email="rep7@example.com",
    lead_name="Pat <Homeowner>",
    lead_phone="555-0100",
    lead_email=None,
    lead_address="1 Main St",
    lead_notes=None,
)


def test_skipped_when_unconfigured(monkeypatch):
    monkeypatch.setattr(settings, "resend_api_key", None)
    assert send_lead_notification(NOTICE) is False


def test_email_body_escapes_values():
    html = render_lead_email(NOTICE)
    assert "Pat &lt;Homeowner&gt;" in html
    assert "Rep Seven" in html


def test_sends_to_provider(monkeypatch):
    monkeypatch.setattr(settings, "resend_api_key", "re_test")
    monkeypatch.setattr(settings, "leads_notify_email", "office@example.com")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email_1"})

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        assert send_lead_notification(NOTICE, client=client) is True

    assert seen["auth"] == "Bearer re_test"
    assert seen["body"]["to"] == ["office@example.com"]
    assert "Rep Seven" in seen["body"]["subject"]


def test_provider_error_is_reported_not_raised(monkeypatch):
    monkeypatch.setattr(settings, "resend_api_key", "re_test")
    monkeypatch.setattr(settings, "leads_notify_email", "office@example.com")

    def handler(request):
        return httpx.Response(500, text="boom")

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        assert send_lead_notification(NOTICE, client=client) is False


def test_transport_error_is_reported_not_raised(monkeypatch):
    monkeypatch.setattr(settings, "resend_api_key", "re_test")
    monkeypatch.setattr(settings, "leads_notify_email", "office@example.com")

    def handler(request):
        raise httpx.ConnectError("unreachable")

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        assert send_lead_notification(NOTICE, client=client) is False
