import re

import pytest


@pytest.fixture()
def alice(make_user, make_client):
    make_user("alice")
    return make_client("alice")


@pytest.fixture()
def admin(make_user, make_client):
    make_user("root", is_admin=True)
    return make_client("root")


class TestFeedback:
    def test_anonymous_feedback(self, client) -> None:
        res = client.post("/api/feedback", json={"rating": 4, "comment": "Search could be faster"})
        assert res.status_code == 201
        assert res.json()["userId"] is None
        assert res.json()["category"] == "general"

    def test_validation(self, alice) -> None:
        res = alice.post("/api/feedback", json={"rating": 6, "comment": "short"})
        assert res.status_code == 400
        assert {"rating", "comment"} <= set(res.json()["errors"])

    def test_comment_length_ignores_padding(self, alice) -> None:
        res = alice.post("/api/feedback", json={"rating": 3, "comment": "   ok        "})
        assert res.status_code == 400
        assert "comment" in res.json()["errors"]

        res = alice.post("/api/feedback", json={"rating": 3, "subject": "  Search ", "comment": "  Works well enough  "})
        assert res.status_code == 201
        assert res.json()["subject"] == "Search"
        assert res.json()["comment"] == "Works well enough"

    def test_admin_responds(self, alice, admin) -> None:
        fid = alice.post(
            "/api/feedback", json={"rating": 2, "category": "bug", "comment": "Withdraw button is broken"}
        ).json()["id"]

        res = admin.patch(f"/api/feedback/{fid}", json={"status": "resolved", "adminResponse": "Fixed"})
        assert res.status_code == 200
        assert res.json()["adminResponse"] == "Fixed"
        assert [f["status"] for f in admin.get("/api/feedback").json()] == ["resolved"]


class TestReferralCodes:
    def test_issue_once(self, alice) -> None:
        me = alice.get("/api/user").json()
        path = f"/api/users/{me['id']}/referral-code"

        assert alice.get(path).json()["referralCode"] is None

        first = alice.post(path).json()
        assert re.fullmatch(r"[A-Z0-9]{8}", first["referralCode"])
        assert first["referralLink"].endswith(f"/auth/register?ref={first['referralCode']}")
        assert first["usageCount"] == 0

        assert alice.post(path).json()["referralCode"] == first["referralCode"]
        assert alice.get("/api/user").json()["referralCode"] == first["referralCode"]

    def test_only_self_or_admin(self, alice, admin, make_user, make_client) -> None:
        alice_id = alice.get("/api/user").json()["id"]
        make_user("bob")
        bob = make_client("bob")
        assert bob.post(f"/api/users/{alice_id}/referral-code").status_code == 403
        assert admin.post(f"/api/users/{alice_id}/referral-code").status_code == 200

    def test_public_lookup(self, alice, client) -> None:
        alice_id = alice.get("/api/user").json()["id"]
        code = alice.post(f"/api/users/{alice_id}/referral-code").json()["referralCode"]

        assert client.get(f"/api/referral/{code}").json() == {"username": "alice"}
        assert client.get("/api/referral/NOPE0000").status_code == 404
