import pytest


@pytest.fixture()
def alice(make_user, make_client):
    make_user("alice")
    return make_client("alice")


@pytest.fixture()
def admin(make_user, make_client):
    make_user("root", is_admin=True)
    return make_client("root")


def _profile(client, **extra):
    body = {"name": "Alice Smith", "email": "alice@example.com", "skills": ["python"]}
    body.update(extra)
    return client.post("/api/profiles", json=body)


class TestProfiles:
    def test_create_and_read(self, alice) -> None:
        res = _profile(alice, linkedinUrl="https://linkedin.com/in/alice")
        assert res.status_code == 201, res.text
        body = res.json()
        assert body["linkedinUrl"] == "https://linkedin.com/in/alice"
        assert body["willingToRelocate"] is False
        assert "/api/profiles" in res.headers["X-Stale-Views"]

        assert alice.get(f"/api/profiles/{body['id']}").json()["name"] == "Alice Smith"
        assert [p["id"] for p in alice.get("/api/profiles").json()] == [body["id"]]

    def test_second_profile_is_409(self, alice) -> None:
        assert _profile(alice).status_code == 201
        assert _profile(alice).status_code == 409

    def test_malformed_email(self, alice) -> None:
        res = _profile(alice, email="alice@@example.com")
        assert res.status_code == 400
        assert "email" in res.json()["errors"]

    def test_only_owner_or_admin(self, alice, admin, make_user, make_client) -> None:
        pid = _profile(alice).json()["id"]
        make_user("mallory")
        assert make_client("mallory").get(f"/api/profiles/{pid}").status_code == 403
        assert admin.get(f"/api/profiles/{pid}").status_code == 200

    def test_patch(self, alice) -> None:
        pid = _profile(alice, githubUrl="https://github.com/alice").json()["id"]

        res = alice.patch(f"/api/profiles/{pid}", json={"githubUrl": None, "title": "Engineer"})
        assert res.status_code == 200
        assert res.json()["githubUrl"] is None
        assert res.json()["title"] == "Engineer"

        res = alice.patch(f"/api/profiles/{pid}", json={"name": None})
        assert res.status_code == 400
        assert "name" in res.json()["errors"]

    def test_apply_records_profile(self, alice, make_job) -> None:
        pid = _profile(alice).json()["id"]
        res = alice.post("/api/applications", json={"jobId": make_job().id})
        assert res.json()["profileId"] == pid


class TestMessages:
    @pytest.fixture()
    def app_id(self, alice, make_job) -> int:
        return alice.post("/api/applications", json={"jobId": make_job().id}).json()["id"]

    def test_admin_writes_applicant_reads(self, alice, admin, app_id) -> None:
        res = admin.post("/api/messages", json={"applicationId": app_id, "content": "  Can you start Monday?  "})
        assert res.status_code == 201, res.text
        msg = res.json()
        assert msg["content"] == "Can you start Monday?"
        assert msg["isFromAdmin"] is True
        assert msg["sender"] == "root"
        assert "/api/notifications/unread-count" in res.headers["X-Stale-Views"]

        assert alice.get(f"/api/applications/{app_id}/messages/unread").json() == 1
        types = [n["type"] for n in alice.get("/api/notifications").json()]
        assert "new_message" in types

        res = alice.post(f"/api/messages/{msg['id']}/read")
        assert res.status_code == 200
        assert res.json()["read"] is True
        assert alice.post(f"/api/messages/{msg['id']}/read").json()["read"] is True
        assert alice.get(f"/api/applications/{app_id}/messages/unread").json() == 0

    def test_applicant_replies_in_thread(self, alice, admin, app_id) -> None:
        admin.post(f"/api/applications/{app_id}/messages", json={"content": "Hello"})
        res = alice.post(f"/api/applications/{app_id}/messages", json={"content": "Hi there"})
        assert res.status_code == 201
        assert res.json()["isFromAdmin"] is False

        thread = admin.get(f"/api/messages/{app_id}").json()
        assert [m["content"] for m in thread] == ["Hello", "Hi there"]
        assert admin.get(f"/api/applications/{app_id}/messages/unread").json() == 1

    def test_blank_message(self, alice, app_id) -> None:
        res = alice.post(f"/api/applications/{app_id}/messages", json={"content": "   "})
        assert res.status_code == 400
        assert "content" in res.json()["errors"]

    def test_other_users_cannot_see_thread(self, alice, make_user, make_client, app_id) -> None:
        make_user("mallory")
        mallory = make_client("mallory")
        assert mallory.get(f"/api/applications/{app_id}/messages").status_code == 403
        assert mallory.post(f"/api/applications/{app_id}/messages", json={"content": "hi"}).status_code == 403
