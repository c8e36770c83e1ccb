import pytest

from taptrack.services import tap_resolver
from taptrack.services.errors import RepNotFound
from taptrack.services.events import RequestContext
from taptrack.services.tap_resolver import Destination, parse_rep_id, resolve_tap


DEAL_URL = "https://example.com/deal"


@pytest.mark.parametrize("raw,expected", [
    ("7", 7),
    (7, 7),
    ("0", None),
    ("-3", None),
    ("abc", None),
    ("7.5", None),
    ("", None),
    ("99999999999", None),
    (True, None),
])
def test_parse_rep_id(raw, expected):
    assert parse_rep_id(raw) == expected


def test_redirect_records_one_tap_and_redirects(client, make_rep, stored_events):
    make_rep(7, redirect_url=DEAL_URL)
    r = client.get("/tap/7", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == DEAL_URL
    [event] = stored_events(7)
    assert event.type == "TAP"
    assert event.meta["redirected"] is True


def test_clearing_redirect_switches_to_profile_on_next_tap(client, make_rep, auth_headers, stored_events):
    make_rep(7, name="Dana Roofer", redirect_url=DEAL_URL)
    assert client.get("/tap/7", follow_redirects=False).status_code == 302

    r = client.patch("/reps/7", json={"redirectUrl": ""}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["rep"]["redirectUrl"] is None

    r = client.get("/tap/7", follow_redirects=False)
    assert r.status_code == 200
    assert "text/html" in r.headers["content-type"]
    assert "Dana Roofer" in r.text
    # profile taps are logged by the page, not by resolution
    assert len(stored_events(7)) == 1


def test_profile_resolution_records_nothing(db_session, make_rep, stored_events):
    make_rep(7)
    resolution = resolve_tap(db_session, "7", RequestContext(path="/tap/7"))
    assert resolution.destination is Destination.PROFILE
    assert resolution.redirect_url is None
    assert stored_events() == []


def test_blank_redirect_is_treated_as_unset(db_session, make_rep):
    make_rep(7, redirect_url="   ")
    assert resolve_tap(db_session, 7).destination is Destination.PROFILE


@pytest.mark.parametrize("raw", ["8", "abc", "0", "-1"])
def test_missing_or_malformed_rep_is_not_found(db_session, make_rep, raw):
    make_rep(7)
    with pytest.raises(RepNotFound):
        resolve_tap(db_session, raw)


def test_inactive_rep_is_not_found(db_session, make_rep):
    make_rep(7, is_active=False, redirect_url=DEAL_URL)
    with pytest.raises(RepNotFound):
        resolve_tap(db_session, 7)


def test_not_found_page_does_not_leak_reason(client, make_rep):
    make_rep(7, is_active=False)
    inactive = client.get("/tap/7")
    unknown = client.get("/tap/12345")
    malformed = client.get("/tap/not-a-number")
    assert inactive.status_code == unknown.status_code == malformed.status_code == 404
    assert inactive.text == unknown.text == malformed.text


def test_redirect_survives_event_logging_failure(client, make_rep, monkeypatch):
    make_rep(7, redirect_url=DEAL_URL)

    def broken(*args, **kwargs):
        raise RuntimeError("logging unavailable")

    monkeypatch.setattr(tap_resolver, "record_event", broken)
    r = client.get("/tap/7", follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == DEAL_URL


def test_legacy_short_path_resolves(client, make_rep):
    make_rep(7, redirect_url=DEAL_URL)
    r = client.get("/r/7", follow_redirects=False)
    assert r.status_code == 302


def test_contact_card_records_contact_save(client, make_rep, stored_events):
    make_rep(7, name="Dana Roofer", phone="555-0100", company="Swany Roofing")
    r = client.get("/tap/7/contact.vcf")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/vcard")
    assert "FN:Dana Roofer" in r.text
    assert "TEL;TYPE=CELL:555-0100" in r.text
    [event] = stored_events(7)
    assert event.type == "CONTACT_SAVE"


def test_contact_card_for_inactive_rep_is_not_found(client, make_rep, stored_events):
    make_rep(7, is_active=False)
    assert client.get("/tap/7/contact.vcf").status_code == 404
    assert stored_events() == []
