"""Admin roster, review and deletion endpoints."""
from __future__ import annotations

from pathlib import Path

import api_server
from config.settings import settings
from identity import AccountIdentifier
from interview_answers import AnswerStore

HEADERS = {"X-User-Id": "acct-1", "X-User-Name": "Quinn Admin-Test"}


def _register(client, user_id="acct-1", email="quinn@example.com", name="Quinn"):
    resp = client.post("/api/candidates", json={"email": email, "full_name": name, "user_id": user_id})
    assert resp.status_code == 201
    return resp.json()


def test_duplicate_account_email_conflicts(client):
    _register(client)
    resp = client.post("/api/candidates", json={"email": "QUINN@example.com", "full_name": "Q", "user_id": "other"})
    assert resp.status_code == 409


def test_account_candidate_review_flow(client):
    _register(client)
    client.put("/api/interview/answers/generalQuestions/experience", headers=HEADERS, json={"value": "Nine years"})
    client.put(
        "/api/interview/answers/technicalExercises/auth",
        headers=HEADERS,
        json={"value": {"files": [{"name": "auth.zip", "size": 10}]}},
    )
    client.post("/api/interview/navigate", headers=HEADERS, json={"action": "next"})
    assert client.post("/api/interview/sign-out", headers=HEADERS).json() == {"flushed": 2}

    note = client.post(
        "/api/admin/candidates/acct-1/notes",
        json={"section": "general", "rating": 4, "notes": "Solid background"},
        headers={"X-Admin-Id": "admin-9"},
    )
    assert note.status_code == 201
    assert note.json()["admin_id"] == "admin-9"
    assert client.post("/api/admin/candidates/acct-1/notes", json={"rating": 9}).status_code == 422
    assert client.post("/api/admin/candidates/ghost/notes", json={"rating": 3}).status_code == 404

    detail = client.get("/api/admin/candidates/acct-1").json()
    assert detail["submission_status"] == "in-progress"
    assert detail["overall_score"] == 4.0
    general = next(section for section in detail["sections"] if section["section"] == "general")
    assert general["answers"][0]["value"] == "Nine years"

    exported = client.get("/api/admin/candidates/acct-1/export")
    assert exported.status_code == 200
    assert "candidate-quinn-" in exported.headers["content-disposition"]
    assert exported.json()["sections"]["technicalExercises"]["answers"]["auth"]["files"][0]["name"] == "auth.zip"

    pdf = client.get("/api/admin/candidates/acct-1/report.pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")

    roster = client.get("/api/admin/roster", params={"search": "quinn"}).json()
    assert [row["kind"] for row in roster["rows"]] == ["account"]
    assert roster["rows"][0]["overall_score"] == 4.0


def test_export_unavailable_before_start(client):
    _register(client, "acct-2", "rae@example.com", "Rae")
    assert client.get("/api/admin/candidates/acct-2/export").status_code == 409
    assert client.get("/api/admin/candidates/missing").status_code == 404


def test_manual_add_returns_link_without_email(client, notifier):
    first = client.post(
        "/api/admin/invitations/manual", json={"candidate_email": "sam@example.com", "candidate_name": "Sam"}
    )
    again = client.post(
        "/api/admin/invitations/manual", json={"candidate_email": "sam@example.com", "candidate_name": "Sam"}
    )
    assert first.status_code == 200
    assert first.json()["invitation"]["status"] == "created"
    assert again.json()["reused"] is True
    assert again.json()["interview_link"] == first.json()["interview_link"]
    assert notifier.sent == []
    assert client.post(
        "/api/admin/invitations/manual", json={"candidate_email": "bad", "candidate_name": "Sam"}
    ).status_code == 400


def test_resend_and_delete_branch_on_row_kind(client, notifier):
    invited = client.post("/api/admin/invitations", json={"candidate_email": "tia@example.com"}).json()
    invitation_id = invited["invitation"]["id"]

    resent = client.post(f"/api/admin/roster/invitation/{invitation_id}/resend")
    assert resent.status_code == 200
    assert len(notifier.sent) == 2

    _register(client, "acct-3", "uli@example.com", "Uli")
    assert client.post("/api/admin/roster/account/acct-3/resend").status_code == 404
    assert client.post("/api/admin/roster/unknown/acct-3/resend").status_code == 422

    removed = client.delete(f"/api/admin/roster/invitation/{invitation_id}")
    assert removed.json() == {"kind": "invitation", "id": invitation_id, "removed": {"invitations": 1}}
    assert client.delete(f"/api/admin/roster/invitation/{invitation_id}").status_code == 404

    client.put(
        "/api/interview/answers/cultureQuestions/motivation",
        headers={"X-User-Id": "acct-3"},
        json={"value": "Impact"},
    )
    client.post("/api/interview/sign-out", headers={"X-User-Id": "acct-3"})
    deleted = client.delete("/api/admin/roster/account/acct-3")
    assert deleted.status_code == 200
    assert deleted.json()["removed"] == {"answers": 1, "progress": 0, "notes": 0, "accounts": 1}
    assert client.get("/api/admin/roster").json()["rows"] == []


def test_resend_refused_once_started(client):
    _register(client, "acct-4", "vic@example.com", "Vic")
    client.post("/api/admin/invitations/manual", json={"candidate_email": "vic@example.com", "candidate_name": "Vic"})
    client.post("/api/interview/navigate", headers={"X-User-Id": "acct-4"}, json={"action": "next"})
    assert client.post("/api/admin/roster/account/acct-4/resend").status_code == 409


def test_deleting_account_drops_its_pending_answers(client, clock):
    _register(client, "acct-5", "wen@example.com", "Wen")
    client.put(
        "/api/interview/answers/generalQuestions/ehr",
        headers={"X-User-Id": "acct-5"},
        json={"value": "Cerner integrations"},
    )

    deleted = client.delete("/api/admin/roster/account/acct-5")
    assert deleted.json()["removed"]["answers"] == 0
    clock.fire_all()
    assert len(api_server.app.state.sessions) == 0
    assert AnswerStore(Path(settings.DB_PATH)).load_answers(AccountIdentifier(user_id="acct-5"))["generalQuestions"] == {}
