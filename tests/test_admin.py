import pytest

from taptrack.models.models import Rep


def test_login_rejects_bad_password(client, admin):
    r = client.post("/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert r.status_code == 401


def test_me(client, auth_headers):
    r = client.get("/auth/me", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["email"] == "admin@example.com"


def test_invalid_token(client):
    r = client.get("/auth/me", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid token"}


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_create_rep_with_chosen_id(client, auth_headers):
    r = client.post("/reps", json={"id": 42, "name": "Dana", "phone": "555"}, headers=auth_headers)
    assert r.status_code == 201
    rep = r.json()["rep"]
    assert rep["id"] == 42
    assert rep["isActive"] is True
    assert rep["redirectUrl"] is None

    dup = client.post("/reps", json={"id": 42, "name": "Other"}, headers=auth_headers)
    assert dup.status_code == 409


@pytest.mark.parametrize("body", [{"name": "Dana"}, {"id": 5}, {"id": 0, "name": "Dana"}])
def test_create_rep_requires_id_and_name(client, auth_headers, body):
    assert client.post("/reps", json=body, headers=auth_headers).status_code == 400


def test_patch_rep_allow_list(client, auth_headers, make_rep, db_session):
    make_rep(7, name="Dana")
    r = client.patch(
        "/reps/7",
        json={"redirectUrl": "https://example.com/deal", "isActive": False, "id": 99, "title": "Estimator"},
        headers=auth_headers,
    )
    assert r.status_code == 200
    rep = r.json()["rep"]
    assert rep["id"] == 7
    assert rep["redirectUrl"] == "https://example.com/deal"
    assert rep["isActive"] is False
    assert rep["title"] == "Estimator"
    assert db_session.get(Rep, 99) is None


def test_patch_missing_rep(client, auth_headers):
    assert client.patch("/reps/5", json={"name": "X"}, headers=auth_headers).status_code == 404


def test_delete_rep_is_soft(client, auth_headers, make_rep, db_session):
    make_rep(7)
    r = client.delete("/reps/7", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["rep"]["isActive"] is False
    db_session.expire_all()
    assert db_session.get(Rep, 7) is not None
    assert client.get("/tap/7").status_code == 404


def test_list_reps_with_stats(client, auth_headers, make_rep, make_event):
    make_rep(7)
    make_rep(3, name="Rep Three")
    for _ in range(4):
        make_event(7, "TAP")
    client.post("/leads", json={"repId": 7, "name": "Pat", "phone": "555"})

    r = client.get("/reps", params={"stats": "true"}, headers=auth_headers)
    assert r.status_code == 200
    reps = r.json()["reps"]
    assert [rep["id"] for rep in reps] == [3, 7]
    seven = reps[1]
    assert seven["stats"] == {"taps": 4, "submits": 1, "leads": 1, "conversionRate": "25.0"}
    assert seven["_count"] == {"leads": 1, "events": 5}
    assert reps[0]["stats"]["conversionRate"] == "0"


def test_rep_detail(client, auth_headers, make_rep):
    make_rep(7)
    client.post("/leads", json={"repId": 7, "name": "Pat", "phone": "555"})
    client.post("/tags", json={"type": "REP", "repId": 7, "uid": "chip-1"}, headers=auth_headers)
    r = client.get("/reps/7", headers=auth_headers)
    assert r.status_code == 200
    rep = r.json()["rep"]
    assert len(rep["leads"]) == 1
    assert rep["tags"][0]["uid"] == "chip-1"
    assert rep["_count"] == {"leads": 1, "events": 1}


def test_rep_tag_requires_existing_rep(client, auth_headers, make_rep):
    make_rep(7)
    ok = client.post("/tags", json={"type": "REP", "repId": 7, "label": "House card"}, headers=auth_headers)
    assert ok.status_code == 201
    tag = ok.json()["tag"]
    assert tag["repId"] == 7
    assert tag["programUrl"].endswith("/tap/7")

    assert client.post("/tags", json={"type": "REP"}, headers=auth_headers).status_code == 400
    assert client.post("/tags", json={"type": "REP", "repId": 8}, headers=auth_headers).status_code == 404


def test_tag_type_reference_invariant(client, auth_headers, make_rep):
    make_rep(7)
    job = client.post("/jobs", json={"homeownerName": "Lee", "address": "9 Elm"}, headers=auth_headers).json()["job"]

    r = client.post("/tags", json={"type": "JOB", "jobId": job["id"]}, headers=auth_headers)
    assert r.status_code == 201
    assert r.json()["tag"]["job"]["homeownerName"] == "Lee"

    assert client.post("/tags", json={"type": "JOB", "jobId": job["id"], "repId": 7}, headers=auth_headers).status_code == 400
    assert client.post("/tags", json={"type": "STATIC", "repId": 7}, headers=auth_headers).status_code == 400
    assert client.post("/tags", json={"type": "TRADESHOW", "label": "Booth"}, headers=auth_headers).status_code == 201
    assert client.post("/tags", json={"type": "NOPE"}, headers=auth_headers).status_code == 400

    r = client.get("/tags", params={"type": "job"}, headers=auth_headers)
    assert [t["type"] for t in r.json()["tags"]] == ["JOB"]


def test_duplicate_tag_uid(client, auth_headers, make_rep):
    make_rep(7)
    body = {"type": "REP", "repId": 7, "uid": "chip-1"}
    assert client.post("/tags", json=body, headers=auth_headers).status_code == 201
    assert client.post("/tags", json=body, headers=auth_headers).status_code == 409


def test_jobs(client, auth_headers):
    assert client.post("/jobs", json={"address": "9 Elm"}, headers=auth_headers).status_code == 400
    r = client.post(
        "/jobs",
        json={"homeownerName": "Lee", "address": "9 Elm", "completionDate": "2026-09-01", "warrantyYears": 25, "photoUrls": ["a.jpg"]},
        headers=auth_headers,
    )
    assert r.status_code == 201
    job = r.json()["job"]
    assert job["warrantyYears"] == 25
    assert job["photoUrls"] == ["a.jpg"]

    listed = client.get("/jobs", headers=auth_headers).json()["jobs"]
    assert [j["id"] for j in listed] == [job["id"]]

    page = client.get(f"/job/{job['id']}")
    assert page.status_code == 200
    assert "9 Elm" in page.text
    assert client.get("/job/not-a-uuid").status_code == 404


def test_deal_page(client, auth_headers):
    assert client.get("/deal-page").json() == {"page": None}
    assert client.put("/deal-page", json={"headline": "Spring sale"}).status_code == 401

    r = client.put("/deal-page", json={"isLive": True, "headline": "Spring sale", "bogus": 1}, headers=auth_headers)
    assert r.status_code == 200
    page = client.get("/deal-page").json()["page"]
    assert page["isLive"] is True
    assert page["headline"] == "Spring sale"
    assert "bogus" not in page
